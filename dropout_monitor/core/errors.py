class StudentRiskError(Exception):
    """Base class for errors raised by the risk evaluation service."""


class InputFormatError(StudentRiskError, ValueError):
    """A batch document, or a stored record blob, does not match the expected shape."""


class PersistenceError(StudentRiskError, RuntimeError):
    """The storage layer failed while reading or writing students."""


class StudentNotFoundError(StudentRiskError, LookupError):
    def __init__(self, student_id: str):
        super().__init__(f"Student not found: {student_id}")
        self.student_id = student_id
