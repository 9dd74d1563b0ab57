"""Tests for the per-student upsert-and-evaluate workflow."""

from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from dropout_monitor.core.config import RiskConfig
from dropout_monitor.core.errors import (
    InputFormatError,
    PersistenceError,
    StudentNotFoundError,
)
from dropout_monitor.models.risk_evaluation import RiskEvaluation
from dropout_monitor.models.student import Student
from dropout_monitor.services import evaluation_service
from dropout_monitor.services.evaluation_service import (
    process_and_evaluate,
    reevaluate_student,
)
from dropout_monitor.services.record_parser import parse_documents

from conftest import HIGH_RISK, LOW_RISK, MEDIUM_RISK, make_student


def test_batch_is_evaluated_and_persisted(db_session, risk_config):
    batch = parse_documents([
        make_student("S001", "Alice", **LOW_RISK),
        make_student("S002", "Bob", **HIGH_RISK),
    ])

    students = process_and_evaluate(db_session, batch, risk_config)

    assert [s.student_id for s in students] == ["S001", "S002"]

    alice, bob = students
    assert (alice.dropout_score, alice.dropout_risk_level) == (0, "LOW")
    assert alice.dropout_note == "No signs of disengagement detected"
    assert (bob.dropout_score, bob.dropout_risk_level) == (3, "HIGH")
    assert bob.dropout_note == "attendance, assignment, communication risk factors"
    assert bob.contacts == HIGH_RISK["contacts"]

    assert db_session.query(Student).count() == 2
    assert db_session.query(RiskEvaluation).count() == 2


def test_resubmission_keeps_identity(db_session, risk_config):
    first = process_and_evaluate(
        db_session, parse_documents([make_student("S001", **HIGH_RISK)]), risk_config
    )[0]
    first_id = first.id

    second = process_and_evaluate(
        db_session, parse_documents([make_student("S001", **LOW_RISK)]), risk_config
    )[0]

    assert second.id == first_id
    assert second.dropout_risk_level == "LOW"
    assert db_session.query(Student).count() == 1
    # Every evaluation leaves an audit row
    assert db_session.query(RiskEvaluation).filter_by(student_pk=first_id).count() == 2


def test_missing_record_lists_score_zero(db_session, risk_config):
    batch = parse_documents([make_student("S001")])

    student = process_and_evaluate(db_session, batch, risk_config)[0]

    assert student.dropout_score == 0
    assert student.dropout_risk_level == "LOW"
    assert student.attendance is None


def test_thresholds_come_from_config(db_session):
    strict = RiskConfig(attendance_threshold=100.0, medium_risk_threshold=1)
    attendance = [{"status": "ATTEND"}, {"status": "ABSENT"}]
    batch = parse_documents([make_student("S001", attendance=attendance)])

    student = process_and_evaluate(db_session, batch, strict)[0]

    assert student.dropout_score == 1
    assert student.dropout_risk_level == "MEDIUM"


def test_failure_stops_batch_but_keeps_committed_students(db_session, risk_config):
    # A soft-deleted row still holds the unique student_id, so S002 cannot be inserted
    process_and_evaluate(db_session, parse_documents([make_student("S002")]), risk_config)
    db_session.query(Student).filter_by(student_id="S002").update(
        {"deleted_at": datetime.utcnow()}
    )
    db_session.commit()

    batch = parse_documents([
        make_student("S001", **MEDIUM_RISK),
        make_student("S002", **HIGH_RISK),
        make_student("S003", **LOW_RISK),
    ])

    with pytest.raises(PersistenceError, match="S002"):
        process_and_evaluate(db_session, batch, risk_config)

    committed = {s.student_id: s for s in db_session.query(Student).all()}
    assert set(committed) == {"S001", "S002"}
    assert committed["S001"].dropout_risk_level == "MEDIUM"
    # The failed student's transaction was rolled back
    assert committed["S002"].dropout_score == 0
    assert committed["S002"].deleted_at is not None


def test_storage_error_rolls_back_student(db_session, risk_config, monkeypatch):
    calls = []
    real_save = evaluation_service.save_risk_evaluation

    def failing_save(db, student, assessment):
        calls.append(student.student_id)
        if student.student_id == "S002":
            raise OperationalError("UPDATE students", {}, Exception("connection lost"))
        return real_save(db, student, assessment)

    monkeypatch.setattr(evaluation_service, "save_risk_evaluation", failing_save)
    batch = parse_documents([make_student("S001"), make_student("S002"), make_student("S003")])

    with pytest.raises(PersistenceError) as exc_info:
        process_and_evaluate(db_session, batch, risk_config)

    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert calls == ["S001", "S002"]
    # S002's upsert ran in the rolled-back transaction
    assert [s.student_id for s in db_session.query(Student).all()] == ["S001"]


def test_reevaluate_uses_stored_records(db_session):
    process_and_evaluate(
        db_session, parse_documents([make_student("S001", **MEDIUM_RISK)]), RiskConfig()
    )

    lenient = RiskConfig(attendance_threshold=0.0, assignment_threshold=0.0)
    student = reevaluate_student(db_session, "S001", lenient)

    assert student.dropout_score == 0
    assert student.dropout_risk_level == "LOW"
    assert db_session.query(RiskEvaluation).count() == 2


def test_reevaluate_unknown_student(db_session, risk_config):
    with pytest.raises(StudentNotFoundError):
        reevaluate_student(db_session, "missing", risk_config)


def test_reevaluate_rejects_corrupt_blob(db_session, risk_config):
    process_and_evaluate(db_session, parse_documents([make_student("S001")]), risk_config)
    db_session.query(Student).filter_by(student_id="S001").update(
        {"assignments": [{"submitted": "maybe"}]}
    )
    db_session.commit()

    with pytest.raises(InputFormatError):
        reevaluate_student(db_session, "S001", risk_config)

    assert db_session.query(RiskEvaluation).count() == 1
