"""Upsert-and-evaluate workflow for student batches.

Every student is handled in its own transaction: the upsert, the risk
evaluation and the write of the result either all commit or all roll back.
A failure stops the batch; students committed before it stay committed.
"""

import logging
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dropout_monitor.core.config import RiskConfig
from dropout_monitor.core.errors import PersistenceError, StudentNotFoundError
from dropout_monitor.models.student import Student
from dropout_monitor.schemas.student import (
    AttendanceRecord,
    AssignmentRecord,
    ContactRecord,
    RawStudent,
)
from dropout_monitor.services.record_parser import load_records
from dropout_monitor.services.risk_engine import evaluate_risk
from dropout_monitor.services.risk_persistence import save_risk_evaluation
from dropout_monitor.services.student_repository import find_student, upsert_student

logger = logging.getLogger(__name__)


def process_and_evaluate(
    db: Session,
    raw_students: Sequence[RawStudent],
    config: RiskConfig,
) -> list[Student]:
    logger.info("Evaluating batch of %d students", len(raw_students))

    updated = []
    for raw in raw_students:
        updated.append(_upsert_and_evaluate(db, raw, config))

    logger.info("Evaluated %d students", len(updated))
    return updated


def _upsert_and_evaluate(db: Session, raw: RawStudent, config: RiskConfig) -> Student:
    try:
        # 1. Store the record lists as submitted
        student = upsert_student(
            db,
            student_id=raw.student_id,
            student_name=raw.student_name,
            attendance=raw.raw_records("attendance"),
            assignments=raw.raw_records("assignments"),
            contacts=raw.raw_records("contacts"),
        )

        # 2. Score and persist in the same transaction
        assessment = evaluate_risk(raw.attendance, raw.assignments, raw.contacts, config)
        save_risk_evaluation(db, student, assessment)
        db.commit()

        # 3. Return the committed state
        db.refresh(student)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to persist student %s", raw.student_id)
        raise PersistenceError(f"Failed to persist student {raw.student_id}: {e}") from e
    except Exception:
        db.rollback()
        logger.exception("Failed to evaluate student %s", raw.student_id)
        raise

    logger.debug(
        "Student %s scored %d (%s)",
        student.student_id,
        student.dropout_score,
        student.dropout_risk_level,
    )
    return student


def reevaluate_student(db: Session, student_id: str, config: RiskConfig) -> Student:
    """Re-score a stored student from the records already on file."""
    try:
        student = find_student(db, student_id)
        if not student:
            raise StudentNotFoundError(student_id)

        assessment = evaluate_risk(
            load_records(student.attendance, AttendanceRecord),
            load_records(student.assignments, AssignmentRecord),
            load_records(student.contacts, ContactRecord),
            config,
        )
        save_risk_evaluation(db, student, assessment)
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to re-evaluate student %s", student_id)
        raise PersistenceError(f"Failed to re-evaluate student {student_id}: {e}") from e
    except Exception:
        db.rollback()
        raise

    logger.info("Re-evaluated student %s: %s", student_id, student.dropout_risk_level)
    return student
