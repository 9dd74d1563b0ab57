from enum import Enum


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RiskFactor(str, Enum):
    ATTENDANCE = "attendance"
    ASSIGNMENT = "assignment"
    COMMUNICATION = "communication"


class SortKey(str, Enum):
    RISK_LEVEL_DESC = "risk_level"
    RISK_LEVEL_ASC = "risk_level_asc"
    SCORE_DESC = "score"
    SCORE_ASC = "score_asc"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: str | None) -> "SortKey":
        """Map a ``sort_by`` query value to a sort key, falling back to DEFAULT."""
        if not value:
            return cls.DEFAULT
        aliases = {
            "risk_level_desc": cls.RISK_LEVEL_DESC,
            "score_desc": cls.SCORE_DESC,
        }
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            return cls.DEFAULT


ATTEND_STATUS = "ATTEND"
FAILED_CONTACT_STATUS = "FAILED"
