from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    PrivateAttr,
    StrictBool,
    StrictStr,
    field_validator,
    model_validator,
)

RECORD_FIELDS = ("attendance", "assignments", "contacts")


class RecordBase(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def null_as_zero(cls, value, info):
        # Decoding null gives the field's zero value, never an error
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class AttendanceRecord(RecordBase):
    date: StrictStr = ""
    status: StrictStr = ""


class AssignmentRecord(RecordBase):
    date: StrictStr = ""
    name: StrictStr = ""
    submitted: StrictBool = False


class ContactRecord(RecordBase):
    date: StrictStr = ""
    status: StrictStr = ""


def null_items_as_empty(value):
    if isinstance(value, list):
        return [{} if item is None else item for item in value]
    return value


class RawStudent(BaseModel):
    """One student document from a batch.

    The typed record lists feed the risk evaluator. The lists exactly as
    submitted are kept alongside and are what gets stored.
    """

    student_id: StrictStr
    student_name: StrictStr
    attendance: list[AttendanceRecord] = []
    assignments: list[AssignmentRecord] = []
    contacts: list[ContactRecord] = []

    _raw_records: dict = PrivateAttr(default_factory=dict)

    @field_validator(*RECORD_FIELDS, mode="before")
    @classmethod
    def null_as_empty(cls, value):
        if value is None:
            return []
        return null_items_as_empty(value)

    @model_validator(mode="wrap")
    @classmethod
    def keep_raw_records(cls, data, handler):
        student = handler(data)
        if isinstance(data, dict):
            student._raw_records = {name: data.get(name) for name in RECORD_FIELDS}
        return student

    def raw_records(self, name: str) -> Any:
        """The list as submitted, or None when it was absent or null."""
        return self._raw_records.get(name)


class StudentResponse(BaseModel):
    id: str
    student_id: str
    student_name: str
    attendance: list | None
    assignments: list | None
    contacts: list | None
    dropout_score: int | None
    dropout_risk_level: str | None
    dropout_note: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RiskEvaluationResponse(BaseModel):
    id: str
    student_pk: str
    score: int
    risk_level: str
    note: str
    created_at: datetime

    class Config:
        from_attributes = True
