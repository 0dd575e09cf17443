from __future__ import annotations

import pytest

from src.attendance_spaces.attendance_spaces.core.enums import FieldKind
from src.attendance_spaces.attendance_spaces.core.exceptions import ValidationFailed
from src.attendance_spaces.attendance_spaces.spaces.model import CustomField, parse_custom_fields
from src.attendance_spaces.attendance_spaces.submissions.form import (
    Prefill,
    build_form,
    normalize_field_key,
    validate_submission,
)


@pytest.mark.parametrize(
    "name,key",
    [
        ("Student ID", "student_id"),
        ("Phone   Number", "phone_number"),
        ("already_snake", "already_snake"),
        ("Tab\tSeparated", "tab_separated"),
    ],
)
def test_normalize_field_key(name, key):
    assert normalize_field_key(name) == key


def test_form_keys_are_fixed_fields_then_schema_order():
    fields = build_form(
        [
            CustomField("1", "Student ID", FieldKind.NUMBER, True),
            CustomField("2", "Section", FieldKind.TEXT, False),
        ]
    )

    assert [f.key for f in fields] == ["name", "email", "student_id", "section"]
    assert [f.kind for f in fields] == [FieldKind.TEXT, FieldKind.EMAIL, FieldKind.NUMBER, FieldKind.TEXT]
    assert fields[0].required and fields[1].required
    assert not fields[3].required


def test_colliding_keys_are_kept_and_last_value_wins():
    form = build_form(
        [
            CustomField("1", "Phone Number", FieldKind.TEXT, True),
            CustomField("2", "phone_number", FieldKind.TEXT, True),
        ]
    )

    assert [f.key for f in form] == ["name", "email", "phone_number", "phone_number"]

    payload = validate_submission(
        form,
        {"name": "Jane", "email": "jane@x.com", "phone_number": ["111", "222"]},
    )
    assert payload == {"name": "Jane", "email": "jane@x.com", "phone_number": "222"}


def test_prefill_sets_initial_values_only():
    form = build_form([], Prefill(full_name="Jane Doe", email="jane@x.com"))

    assert form[0].initial == "Jane Doe"
    assert form[1].initial == "jane@x.com"

    # Prefilled values stay editable: whatever is submitted is stored.
    payload = validate_submission(form, {"name": "J. Doe", "email": "other@x.com"})
    assert payload == {"name": "J. Doe", "email": "other@x.com"}


def test_invalid_email_is_rejected():
    with pytest.raises(ValidationFailed) as exc:
        validate_submission(build_form([]), {"name": "Jane", "email": "not-an-email"})

    assert exc.value.errors == {"email": "Invalid email address"}


def test_short_tld_email_is_accepted():
    assert validate_submission(build_form([]), {"name": "A", "email": "a@b.co"})["email"] == "a@b.co"


def test_missing_required_fields_reported_per_field():
    form = build_form([CustomField("1", "Student ID", FieldKind.NUMBER, True)])

    with pytest.raises(ValidationFailed) as exc:
        validate_submission(form, {"name": "  ", "email": "jane@x.com"})

    assert exc.value.errors == {"name": "Full Name is required", "student_id": "Student ID is required"}


@pytest.mark.parametrize("value", ["abc", "nan", "inf", "1,5", "1_000", "\u0661\u0662", "1e999", "+", "."])
def test_number_field_rejects_non_numeric(value):
    form = build_form([CustomField("1", "Age", FieldKind.NUMBER, True)])

    with pytest.raises(ValidationFailed) as exc:
        validate_submission(form, {"name": "A", "email": "a@b.co", "age": value})

    assert exc.value.errors == {"age": "Age must be a number"}


@pytest.mark.parametrize("value", ["1e3", ".5", "-2", "+4.", "3.25E-2"])
def test_number_field_accepts_decimal_and_exponent(value):
    form = build_form([CustomField("1", "Age", FieldKind.NUMBER, True)])

    payload = validate_submission(form, {"name": "A", "email": "a@b.co", "age": value})

    assert payload["age"] == value


def test_optional_empty_field_is_stored_as_empty_string():
    form = build_form([CustomField("1", "Notes", FieldKind.TEXT, False)])

    payload = validate_submission(form, {"name": "A", "email": "a@b.co"})

    assert payload == {"name": "A", "email": "a@b.co", "notes": ""}


def test_optional_email_field_still_validated_when_filled():
    form = build_form([CustomField("1", "Backup Email", FieldKind.EMAIL, False)])

    with pytest.raises(ValidationFailed) as exc:
        validate_submission(form, {"name": "A", "email": "a@b.co", "backup_email": "nope"})

    assert "backup_email" in exc.value.errors


def test_parse_custom_fields_tolerates_bad_rows():
    parsed = parse_custom_fields(
        [
            {"id": "f1", "name": "Student ID", "type": "number", "required": True},
            {"id": "f2", "name": ""},
            "junk",
            {"name": "Colour", "type": "dropdown"},
        ]
    )

    assert [(f.field_id, f.name, f.kind, f.required) for f in parsed] == [
        ("f1", "Student ID", FieldKind.NUMBER, True),
        ("3", "Colour", FieldKind.TEXT, False),
    ]
    assert parse_custom_fields(None) == ()
    assert parse_custom_fields({"name": "x"}) == ()
