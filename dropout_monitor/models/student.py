from sqlalchemy import Column, String, Integer, DateTime, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from dropout_monitor.core.database import Base

RecordBlob = JSON().with_variant(JSONB(), "postgresql")


class Student(Base):
    __tablename__ = "students"

    id = Column(String, primary_key=True, index=True)
    student_id = Column(String, unique=True, index=True, nullable=False)
    student_name = Column(String, nullable=False)

    # Raw record lists as submitted, normalized to the record schemas
    attendance = Column(RecordBlob, nullable=True)
    assignments = Column(RecordBlob, nullable=True)
    contacts = Column(RecordBlob, nullable=True)

    # Populated after the first evaluation
    dropout_score = Column(Integer, nullable=True)
    dropout_risk_level = Column(String, nullable=True, index=True)  # LOW | MEDIUM | HIGH
    dropout_note = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)
