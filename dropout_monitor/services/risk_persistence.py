from sqlalchemy.orm import Session
from uuid import uuid4

from dropout_monitor.models.risk_evaluation import RiskEvaluation
from dropout_monitor.models.student import Student
from dropout_monitor.services.risk_engine import RiskAssessment


def save_risk_evaluation(
    db: Session,
    student: Student,
    assessment: RiskAssessment,
) -> RiskEvaluation:
    # The columns on the student are what queries read; the audit row is history.
    student.dropout_score = assessment.score
    student.dropout_risk_level = assessment.risk_level.value
    student.dropout_note = assessment.note

    evaluation = RiskEvaluation(
        id=str(uuid4()),
        student_pk=student.id,
        score=assessment.score,
        risk_level=assessment.risk_level.value,
        note=assessment.note,
    )

    db.add(evaluation)
    db.flush()
    return evaluation
