from sqlalchemy import case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dropout_monitor.core.errors import PersistenceError, StudentNotFoundError
from dropout_monitor.models.risk_evaluation import RiskEvaluation
from dropout_monitor.models.student import Student
from dropout_monitor.services.student_repository import find_student
from dropout_monitor.utils.enums import RiskLevel, SortKey

# Unknown or missing levels rank last in both directions
UNRANKED = 4

RISK_RANK_DESC = {
    RiskLevel.HIGH.value: 1,
    RiskLevel.MEDIUM.value: 2,
    RiskLevel.LOW.value: 3,
}

RISK_RANK_ASC = {
    RiskLevel.LOW.value: 1,
    RiskLevel.MEDIUM.value: 2,
    RiskLevel.HIGH.value: 3,
}


def _order_by(sort_key: SortKey) -> list:
    if sort_key == SortKey.RISK_LEVEL_DESC:
        primary = case(RISK_RANK_DESC, value=Student.dropout_risk_level, else_=UNRANKED)
    elif sort_key == SortKey.RISK_LEVEL_ASC:
        primary = case(RISK_RANK_ASC, value=Student.dropout_risk_level, else_=UNRANKED)
    elif sort_key == SortKey.SCORE_DESC:
        primary = Student.dropout_score.desc().nulls_last()
    elif sort_key == SortKey.SCORE_ASC:
        primary = Student.dropout_score.asc().nulls_last()
    else:
        return [Student.student_id.asc()]

    # Ties fall back to student_id so repeated queries return the same order
    return [primary, Student.student_id.asc()]


def list_students(
    db: Session,
    risk_level: str | None = None,
    sort_by: str | None = None,
) -> list[Student]:
    """List evaluated students.

    ``risk_level`` is an exact match on the stored level, so a value that is
    not a known level returns nothing. ``sort_by`` values that are not known
    sort keys fall back to ordering by ``student_id``.
    """
    query = db.query(Student).filter(Student.deleted_at.is_(None))

    if risk_level:
        query = query.filter(Student.dropout_risk_level == risk_level)

    try:
        return query.order_by(*_order_by(SortKey.parse(sort_by))).all()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to list students: {e}") from e


def get_student(db: Session, student_id: str) -> Student:
    try:
        student = find_student(db, student_id)
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to load student {student_id}: {e}") from e

    if not student:
        raise StudentNotFoundError(student_id)
    return student


def list_risk_evaluations(db: Session, student_id: str) -> list[RiskEvaluation]:
    """Audit history for one student, newest first."""
    student = get_student(db, student_id)

    try:
        return (
            db.query(RiskEvaluation)
            .filter(
                RiskEvaluation.student_pk == student.id,
                RiskEvaluation.deleted_at.is_(None),
            )
            .order_by(RiskEvaluation.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to load evaluations for {student_id}: {e}") from e
