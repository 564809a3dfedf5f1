# services/validators.py
"""Mark validation shared by batch commits and single-record adds."""

from __future__ import annotations
import math
from decimal import Decimal, InvalidOperation
from typing import Any

from core.errors import ValidationError


def coerce_mark(value: Any, student_id: Any = None) -> float:
    """
    Return `value` as a float, or raise ValidationError if it is not a number.

    Numeric strings ("25", " 12.5 ") are accepted; booleans, None, NaN and
    infinities are not.
    """
    who = f" for student_id: {student_id}" if student_id is not None else ""

    if value is None or isinstance(value, bool):
        raise ValidationError(f"Missing or non-numeric mark{who}.", value=value, student_id=student_id, field="mark")

    if isinstance(value, (int, float, Decimal, str)):
        try:
            number = float(Decimal(value.strip()) if isinstance(value, str) else value)
        except (InvalidOperation, ValueError, OverflowError):
            raise ValidationError(
                f"Non-numeric mark{who}: {value!r}.", value=value, student_id=student_id, field="mark"
            ) from None
    else:
        raise ValidationError(f"Non-numeric mark{who}: {value!r}.", value=value, student_id=student_id, field="mark")

    if not math.isfinite(number):
        raise ValidationError(f"Mark must be a finite number{who}.", value=value, student_id=student_id, field="mark")
    return number


def validate_mark(value: Any, weight: float, student_id: Any = None) -> float:
    """Check 0 <= value <= weight and return the mark as a float."""
    mark = coerce_mark(value, student_id=student_id)
    bound = float(weight)
    if mark < 0 or mark > bound:
        if student_id is not None:
            message = (
                f"Invalid mark value for student_id: {student_id}. Mark must be non-negative "
                f"and not exceed assessment weight ({bound:g}); got {mark:g}."
            )
        else:
            message = f"Invalid mark. Mark must be between 0 and {bound:g}; got {mark:g}."
        raise ValidationError(message, value=value, bound=bound, student_id=student_id, field="mark")
    return mark
