from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.attendance_spaces.attendance_spaces.core.enums import FieldKind, SpaceStatus, SpaceType
from src.attendance_spaces.attendance_spaces.core.exceptions import AuthorizationError, StoreError, ValidationError
from src.attendance_spaces.attendance_spaces.spaces.service import (
    NewCustomField,
    NewSpace,
    SpaceService,
    generate_space_code,
)


def _link(code: str) -> str:
    return f"http://localhost/attend/{code}"


def _codes(*codes):
    it = iter(codes)
    return lambda: next(it)


def test_generated_code_shape():
    code = generate_space_code()

    assert code.startswith("TEND-")
    assert len(code) == 10
    assert code[5:].isalnum() and code[5:].upper() == code[5:]


def test_create_space_stores_schema_and_link(spaces_repo):
    svc = SpaceService(spaces_repo, code_generator=_codes("TEND-AAAAA"))

    space = svc.create_space(
        admin_id="admin-1",
        data=NewSpace(
            title="  Weekly Standup ",
            space_type="Event",
            custom_fields=[NewCustomField("Team", "text", True), NewCustomField("Age", "number", False)],
        ),
        link_for=_link,
    )

    assert space.title == "Weekly Standup"
    assert space.space_type == SpaceType.EVENT
    assert space.status == SpaceStatus.OPEN
    assert space.unique_code == "TEND-AAAAA"
    assert space.public_link == "http://localhost/attend/TEND-AAAAA"
    assert [(f.name, f.kind, f.required) for f in space.required_fields] == [
        ("Team", FieldKind.TEXT, True),
        ("Age", FieldKind.NUMBER, False),
    ]


def test_create_space_retries_taken_codes(spaces_repo):
    svc = SpaceService(spaces_repo, code_generator=_codes("TEND-00042", "TEND-BBBBB"))

    space = svc.create_space(admin_id="admin-1", data=NewSpace(title="X", space_type="Class"), link_for=_link)

    assert space.unique_code == "TEND-BBBBB"


def test_create_space_gives_up_after_max_attempts(spaces_repo):
    svc = SpaceService(spaces_repo, code_generator=lambda: "TEND-00042", max_code_attempts=3)

    with pytest.raises(StoreError):
        svc.create_space(admin_id="admin-1", data=NewSpace(title="X", space_type="Class"), link_for=_link)


@pytest.mark.parametrize(
    "fields,message",
    [
        ([NewCustomField("Phone Number"), NewCustomField("phone_number")], 'Field "phone_number" conflicts with "Phone Number"'),
        ([NewCustomField("Email")], 'Field "Email" conflicts with "Email"'),
        ([NewCustomField("NAME")], 'Field "NAME" conflicts with "Full Name"'),
        ([NewCustomField("Colour", "dropdown")], "Unsupported field type: dropdown"),
        ([NewCustomField("   ")], "Field name is required"),
    ],
)
def test_create_space_rejects_bad_fields(spaces_repo, fields, message):
    svc = SpaceService(spaces_repo, code_generator=_codes("TEND-CCCCC"))

    with pytest.raises(ValidationError) as exc:
        svc.create_space(
            admin_id="admin-1",
            data=NewSpace(title="X", space_type="Class", custom_fields=fields),
            link_for=_link,
        )
    assert str(exc.value) == message


def test_create_space_validates_type_and_window(spaces_repo):
    svc = SpaceService(spaces_repo, code_generator=_codes("TEND-DDDDD", "TEND-EEEEE"))

    with pytest.raises(ValidationError, match="Type must be"):
        svc.create_space(admin_id="admin-1", data=NewSpace(title="X", space_type="Party"), link_for=_link)

    start = datetime(2026, 2, 2, 10, 0, tzinfo=timezone.utc)
    with pytest.raises(ValidationError, match="End time must be after start time"):
        svc.create_space(
            admin_id="admin-1",
            data=NewSpace(title="X", space_type="Class", start_time=start, end_time=start),
            link_for=_link,
        )


def test_only_owner_can_manage_space(spaces_repo):
    svc = SpaceService(spaces_repo)

    with pytest.raises(AuthorizationError):
        svc.get_owned_space(current_user_id="intruder", space_id="space-1")
    with pytest.raises(ValidationError, match="Space not found"):
        svc.get_owned_space(current_user_id="admin-1", space_id="missing")


def test_set_status_changes_lifecycle(spaces_repo):
    svc = SpaceService(spaces_repo)

    space = svc.set_status(current_user_id="admin-1", space_id="space-1", status="paused")
    assert space.status == SpaceStatus.PAUSED

    with pytest.raises(ValidationError):
        svc.set_status(current_user_id="admin-1", space_id="space-1", status="archived")


def test_dashboard_lists_own_spaces(spaces_repo, space_factory):
    spaces_repo.add(space_factory(space_id="space-2", unique_code="TEND-OTHER", admin_id="someone-else"))
    spaces_repo.counts["space-1"] = 3

    summaries = SpaceService(spaces_repo).list_dashboard("admin-1")

    assert [(s.space.space_id, s.submission_count) for s in summaries] == [("space-1", 3)]
