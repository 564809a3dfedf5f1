# core/errors.py
"""
Error taxonomy shared by the marks engine and its collaborators.

Every failure the engine reports is one of four kinds. The transport layer
decides how to render them; `ErrorKind.http_status` is the conventional
mapping it is expected to use.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"

    @property
    def http_status(self) -> int:
        return {
            ErrorKind.VALIDATION: 400,
            ErrorKind.NOT_FOUND: 404,
            ErrorKind.CONFLICT: 409,
            ErrorKind.INTERNAL: 500,
        }[self]


class MarkbookError(Exception):
    """Base class: a machine-checkable kind plus a human-readable message."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


class ValidationError(MarkbookError):
    """Malformed or out-of-range input. Raised before anything is written."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        value: Any = None,
        bound: Optional[float] = None,
        student_id: Any = None,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.value = value
        self.bound = bound
        self.student_id = student_id
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        for key in ("value", "bound", "student_id", "field"):
            if getattr(self, key) is not None:
                data[key] = getattr(self, key)
        return data


class NotFoundError(MarkbookError):
    """A referenced student, course or assessment does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(MarkbookError):
    """An add was attempted where an update was required."""

    kind = ErrorKind.CONFLICT


class InternalError(MarkbookError):
    """Storage failure after the input was accepted."""

    kind = ErrorKind.INTERNAL


__all__ = [
    "ErrorKind",
    "MarkbookError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
]
