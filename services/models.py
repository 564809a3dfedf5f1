# services/models.py
"""
Records exchanged between the marks engine and its callers.
Rows read from storage stay plain dicts; these dataclasses describe the
inputs callers send in.
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional
from dataclasses import dataclass

from core.errors import ValidationError
from services.validators import coerce_mark


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = _text(value)
    if text.lstrip("-").isdigit():
        return int(text)
    return None


@dataclass
class MarkEntry:
    """One line of a batch: a student and the mark they earned."""
    student_id: int
    mark: float

    @classmethod
    def from_mapping(cls, raw: Any) -> "MarkEntry":
        if isinstance(raw, MarkEntry):
            return raw
        if not isinstance(raw, Mapping):
            raise ValidationError("Each mark entry must be an object with student_id and mark.", value=raw)

        student_id = _to_int(raw.get("student_id"))
        if student_id is None:
            raise ValidationError(
                f"Invalid student_id: {raw.get('student_id')!r}.",
                value=raw.get("student_id"),
                field="student_id",
            )
        return cls(student_id=student_id, mark=coerce_mark(raw.get("mark"), student_id=student_id))


@dataclass
class StudentRecord:
    """Payload of the single-record add."""
    name: str
    matric_number: str
    course_id: Optional[int]
    assessment_name: str
    mark: Any

    REQUIRED = ("name", "matric_number", "course_id", "assessment_name", "mark")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StudentRecord":
        return cls(
            name=_text(data.get("name")),
            matric_number=_text(data.get("matric_number")),
            course_id=_to_int(data.get("course_id")),
            assessment_name=_text(data.get("assessment_name")),
            mark=data.get("mark"),
        )

    def validate(self) -> List[str]:
        """Validate fields and return the names of the ones that are missing or invalid."""
        errors = []
        if not self.name:
            errors.append("name")
        if not self.matric_number:
            errors.append("matric_number")
        if not self.course_id:
            errors.append("course_id")
        if not self.assessment_name:
            errors.append("assessment_name")
        try:
            coerce_mark(self.mark)
        except ValidationError:
            errors.append("mark")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, key) for key in self.REQUIRED}
