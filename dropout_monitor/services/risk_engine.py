from dataclasses import dataclass
from typing import Sequence

from dropout_monitor.core.config import RiskConfig
from dropout_monitor.schemas.student import AttendanceRecord, AssignmentRecord, ContactRecord
from dropout_monitor.services.rates import (
    attendance_rate,
    assignment_rate,
    contact_failure_count,
)
from dropout_monitor.utils.enums import RiskFactor, RiskLevel

NO_RISK_NOTE = "No signs of disengagement detected"


@dataclass(frozen=True)
class RiskAssessment:
    score: int
    risk_level: RiskLevel
    note: str
    factors: tuple[RiskFactor, ...]
    attendance_rate: float
    assignment_rate: float
    contact_failures: int


def evaluate_risk(
    attendance: Sequence[AttendanceRecord],
    assignments: Sequence[AssignmentRecord],
    contacts: Sequence[ContactRecord],
    config: RiskConfig,
) -> RiskAssessment:
    """Score a student on the three disengagement factors.

    Each factor that fires adds one point, so the score is always between
    0 and 3. Factors are reported in a fixed order: attendance, assignment,
    communication.
    """
    attendance_pct = attendance_rate(attendance)
    assignment_pct = assignment_rate(assignments)
    failures = contact_failure_count(contacts)

    factors = []

    if attendance_pct < config.attendance_threshold:
        factors.append(RiskFactor.ATTENDANCE)

    if assignment_pct < config.assignment_threshold:
        factors.append(RiskFactor.ASSIGNMENT)

    if failures >= config.contact_threshold:
        factors.append(RiskFactor.COMMUNICATION)

    score = len(factors)

    return RiskAssessment(
        score=score,
        risk_level=determine_risk_level(score, config),
        note=build_risk_note(factors),
        factors=tuple(factors),
        attendance_rate=attendance_pct,
        assignment_rate=assignment_pct,
        contact_failures=failures,
    )


def determine_risk_level(score: int, config: RiskConfig) -> RiskLevel:
    if score >= config.high_risk_threshold:
        return RiskLevel.HIGH
    elif score >= config.medium_risk_threshold:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def build_risk_note(factors: Sequence[RiskFactor]) -> str:
    if not factors:
        return NO_RISK_NOTE
    return ", ".join(factor.value for factor in factors) + " risk factors"
