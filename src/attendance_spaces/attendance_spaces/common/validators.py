from __future__ import annotations

import math
import re

from ..core.exceptions import ValidationError

# Same shape the attendance form uses: local part, "@", dotted domain.
EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)
# Plain decimal or exponent notation, ASCII digits only.
NUMBER_PATTERN = re.compile(r"^[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def is_email(value: str) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def is_number(value: str) -> bool:
    if not isinstance(value, str) or NUMBER_PATTERN.match(value) is None:
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def require_email(value: str, field_name: str = "Email") -> str:
    value = require_non_empty(value, field_name)
    if not is_email(value):
        raise ValidationError("Invalid email address")
    return value
