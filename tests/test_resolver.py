from __future__ import annotations

from datetime import timedelta

import pytest

from src.attendance_spaces.attendance_spaces.core.enums import RejectReason, ResolutionState, SpaceStatus
from src.attendance_spaces.attendance_spaces.core.exceptions import InvalidCode, SessionNotFound, SessionRejected
from src.attendance_spaces.attendance_spaces.spaces.resolver import SessionResolver


def test_unknown_code_is_not_found(spaces_repo, fixed_now):
    resolution = SessionResolver(spaces_repo).resolve("TEND-XXXXX", now=fixed_now)

    assert resolution.state == ResolutionState.NOT_FOUND
    assert resolution.space is None
    with pytest.raises(SessionNotFound):
        resolution.require_accepting()


@pytest.mark.parametrize("code", ["", "   ", None])
def test_blank_code_is_invalid(spaces_repo, code):
    with pytest.raises(InvalidCode):
        SessionResolver(spaces_repo).resolve(code)


def test_open_space_accepts(spaces_repo, space, fixed_now):
    resolution = SessionResolver(spaces_repo).resolve(" TEND-00042 ", now=fixed_now)

    assert resolution.accepting
    assert resolution.require_accepting() == space


def test_paused_rejects_even_with_future_end(spaces_repo, space_factory, fixed_now):
    spaces_repo.add(space_factory(status=SpaceStatus.PAUSED, end_time=fixed_now + timedelta(days=1)))

    resolution = SessionResolver(spaces_repo).resolve("TEND-00042", now=fixed_now)

    assert resolution.state == ResolutionState.REJECTED
    assert resolution.reason == RejectReason.PAUSED


def test_paused_rejects_even_with_past_end(spaces_repo, space_factory, fixed_now):
    spaces_repo.add(space_factory(status=SpaceStatus.PAUSED, end_time=fixed_now - timedelta(days=1)))

    resolution = SessionResolver(spaces_repo).resolve("TEND-00042", now=fixed_now)

    assert resolution.reason == RejectReason.PAUSED


def test_open_space_past_end_time_has_ended(spaces_repo, space_factory, fixed_now):
    spaces_repo.add(space_factory(end_time=fixed_now - timedelta(minutes=1)))

    resolution = SessionResolver(spaces_repo).resolve("TEND-00042", now=fixed_now)

    assert resolution.state == ResolutionState.REJECTED
    assert resolution.reason == RejectReason.ENDED
    with pytest.raises(SessionRejected) as exc:
        resolution.require_accepting()
    assert exc.value.reason == "ended"
    assert str(exc.value) == "This attendance session has ended"


def test_end_time_equal_to_now_still_accepts(spaces_repo, space_factory, fixed_now):
    spaces_repo.add(space_factory(end_time=fixed_now))

    assert SessionResolver(spaces_repo).resolve("TEND-00042", now=fixed_now).accepting


def test_closed_space_rejected_with_reason_closed(spaces_repo, space_factory, fixed_now):
    spaces_repo.add(space_factory(status=SpaceStatus.CLOSED))

    resolution = SessionResolver(spaces_repo).resolve("TEND-00042", now=fixed_now)

    assert resolution.reason == RejectReason.CLOSED
    assert resolution.space is not None


def test_store_failure_on_lookup_reads_as_not_found(spaces_repo, fixed_now):
    spaces_repo.fail_lookups = True

    resolution = SessionResolver(spaces_repo).resolve("TEND-00042", now=fixed_now)

    assert resolution.state == ResolutionState.NOT_FOUND
