"""Turn a space's stored field schema into a validated input form.

The form always starts with the fixed ``name`` and ``email`` fields, followed by
the space's custom fields in stored order. Each field carries its storage key
(the normalized field name) and a FieldKind tag that selects its validator.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, Mapping, Optional, Sequence

from ..common.validators import is_email, is_number
from ..core.constants import FIXED_FIELD_EMAIL, FIXED_FIELD_NAME
from ..core.enums import FieldKind
from ..core.exceptions import ValidationFailed
from ..spaces.model import CustomField

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_field_key(name: str) -> str:
    """'Student ID' -> 'student_id'. Every whitespace run becomes one underscore."""

    return _WHITESPACE.sub("_", (name or "").lower())


@dataclass(frozen=True)
class Prefill:
    full_name: str = ""
    email: str = ""


@dataclass(frozen=True)
class FormField:
    key: str
    label: str
    kind: FieldKind
    required: bool
    initial: str = ""

    @property
    def input_type(self) -> str:
        return self.kind.value

    @property
    def placeholder(self) -> str:
        if self.key == FIXED_FIELD_NAME:
            return "Enter your full name"
        return f"Enter your {self.label.lower()}"


def build_form(custom_fields: Sequence[CustomField], prefill: Optional[Prefill] = None) -> list[FormField]:
    """Fixed fields first, then one input per custom field.

    Custom fields whose keys collide are all kept; the payload resolves the
    collision (last value wins).
    """

    fields = [
        FormField(key=FIXED_FIELD_NAME, label="Full Name", kind=FieldKind.TEXT, required=True),
        FormField(key=FIXED_FIELD_EMAIL, label="Email", kind=FieldKind.EMAIL, required=True),
    ]
    for cf in custom_fields:
        fields.append(
            FormField(key=normalize_field_key(cf.name), label=cf.name, kind=cf.kind, required=cf.required)
        )

    if prefill is not None:
        initial = {FIXED_FIELD_NAME: prefill.full_name or "", FIXED_FIELD_EMAIL: prefill.email or ""}
        fields = [replace(f, initial=initial[f.key]) if f.key in initial and not f.initial else f for f in fields]

    seen: set[str] = set()
    for f in fields:
        if f.key in seen:
            logger.warning("form field key %r appears more than once; last value wins", f.key)
        seen.add(f.key)

    return fields


def _check_text(value: str, f: FormField) -> Optional[str]:
    return None


def _check_email(value: str, f: FormField) -> Optional[str]:
    return None if is_email(value) else "Invalid email address"


def _check_number(value: str, f: FormField) -> Optional[str]:
    return None if is_number(value) else f"{f.label} must be a number"


_CHECKS: Dict[FieldKind, Callable[[str, FormField], Optional[str]]] = {
    FieldKind.TEXT: _check_text,
    FieldKind.EMAIL: _check_email,
    FieldKind.NUMBER: _check_number,
}


def _raw_value(values: Mapping[str, object], key: str, nth: int) -> object:
    # HTML forms post colliding inputs as a list; the nth field reads the nth value.
    raw = values.get(key)
    if isinstance(raw, (list, tuple)):
        if not raw:
            return None
        return raw[nth] if nth < len(raw) else raw[-1]
    return raw


def validate_submission(form: Sequence[FormField], values: Mapping[str, object]) -> dict[str, str]:
    """Validate raw input against the form and build the stored payload.

    Returns a dict keyed by field key, in form order. Optional fields left empty
    are stored as "". Raises ValidationFailed with per-field messages; nothing
    is written in that case.
    """

    errors: dict[str, str] = {}
    payload: dict[str, str] = {}
    occurrences: dict[str, int] = {}

    for f in form:
        nth = occurrences.get(f.key, 0)
        occurrences[f.key] = nth + 1
        raw = _raw_value(values, f.key, nth)
        value = "" if raw is None else str(raw).strip()

        if not value:
            if f.required:
                errors[f.key] = f"{f.label} is required"
            else:
                payload[f.key] = ""
            continue

        message = _CHECKS[f.kind](value, f)
        if message:
            errors[f.key] = message
            continue

        payload[f.key] = value

    if errors:
        raise ValidationFailed(errors)
    return payload
