from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from datetime import datetime
from dropout_monitor.core.database import Base


class RiskEvaluation(Base):
    __tablename__ = "risk_evaluations"

    id = Column(String, primary_key=True, index=True)
    student_pk = Column(String, ForeignKey("students.id"), index=True, nullable=False)

    score = Column(Integer, nullable=False)
    risk_level = Column(String, nullable=False)
    note = Column(String, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)
