from typing import Sequence

from dropout_monitor.schemas.student import AttendanceRecord, AssignmentRecord, ContactRecord
from dropout_monitor.utils.enums import ATTEND_STATUS, FAILED_CONTACT_STATUS


def attendance_rate(records: Sequence[AttendanceRecord]) -> float:
    """Percentage of sessions attended. No records means no attendance risk."""
    if not records:
        return 100.0

    attended = sum(1 for record in records if record.status == ATTEND_STATUS)
    return attended / len(records) * 100.0


def assignment_rate(records: Sequence[AssignmentRecord]) -> float:
    """Percentage of assignments submitted. No records means no assignment risk."""
    if not records:
        return 100.0

    submitted = sum(1 for record in records if record.submitted)
    return submitted / len(records) * 100.0


def contact_failure_count(records: Sequence[ContactRecord]) -> int:
    return sum(1 for record in records if record.status == FAILED_CONTACT_STATUS)
