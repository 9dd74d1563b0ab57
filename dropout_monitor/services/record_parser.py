"""Decoding of student batch documents and stored record blobs."""

import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from dropout_monitor.core.errors import InputFormatError
from dropout_monitor.schemas.student import (
    AttendanceRecord,
    AssignmentRecord,
    ContactRecord,
    RawStudent,
    null_items_as_empty,
)

logger = logging.getLogger(__name__)

_batch_adapter = TypeAdapter(list[RawStudent])

_record_adapters = {
    AttendanceRecord: TypeAdapter(list[AttendanceRecord]),
    AssignmentRecord: TypeAdapter(list[AssignmentRecord]),
    ContactRecord: TypeAdapter(list[ContactRecord]),
}


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"]) or "body"
    return f"{location}: {error['msg']}"


def parse_batch(payload: bytes | str) -> list[RawStudent]:
    """Decode a JSON array of student documents.

    The whole batch is rejected on the first malformed document; nothing is
    skipped.
    """
    try:
        students = _batch_adapter.validate_json(payload)
    except ValidationError as exc:
        raise InputFormatError(f"Invalid student batch: {_describe(exc)}") from exc

    logger.debug("Parsed batch of %d students", len(students))
    return students


def parse_documents(documents: Any) -> list[RawStudent]:
    """Same as :func:`parse_batch` for already-decoded JSON values."""
    try:
        return _batch_adapter.validate_python(documents)
    except ValidationError as exc:
        raise InputFormatError(f"Invalid student batch: {_describe(exc)}") from exc


def load_batch_file(path: str | Path) -> list[RawStudent]:
    payload = Path(path).read_bytes()
    logger.info("Loaded student batch file %s", path)
    return parse_batch(payload)


def load_records(blob: Any, record_type: type) -> list:
    """Rebuild typed records from a stored JSON blob. A missing blob is an empty list."""
    if blob is None:
        return []

    try:
        return _record_adapters[record_type].validate_python(null_items_as_empty(blob))
    except ValidationError as exc:
        raise InputFormatError(
            f"Invalid stored {record_type.__name__} data: {_describe(exc)}"
        ) from exc
