from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from src.attendance_spaces.attendance_spaces.core.enums import Role
from src.attendance_spaces.attendance_spaces.core.exceptions import AuthenticationError, ValidationError
from src.attendance_spaces.attendance_spaces.users.service import AuthService, ProfileService


@pytest.fixture
def profiles(users_repo):
    return ProfileService(users_repo)


@pytest.fixture
def auth(users_repo, profiles):
    return AuthService(users_repo, profiles)


def test_ensure_profile_is_idempotent(users_repo, profiles):
    account = users_repo.add_account("jane@x.com", full_name="Jane Doe")

    first = profiles.ensure_profile(account)
    second = profiles.ensure_profile(account, full_name="Someone Else")

    assert first == second
    assert len(users_repo.profiles) == 1
    assert first.user_code == "USER-" + account.account_id[:8]
    assert first.full_name == "Jane Doe"
    assert first.role == Role.USER


def test_profile_name_falls_back_to_email_local_part(users_repo, profiles):
    account = users_repo.add_account("ann.lee@x.com")

    assert profiles.ensure_profile(account).full_name == "ann.lee"


def test_backfill_creates_only_missing_profiles(users_repo, profiles):
    has_profile = users_repo.add_account("a@x.com")
    profiles.ensure_profile(has_profile)
    users_repo.add_account("b@x.com")
    users_repo.add_account("c@x.com")

    assert profiles.backfill_profiles() == 2
    assert len(users_repo.profiles) == 3
    assert profiles.backfill_profiles() == 0


def test_backfill_continues_past_failures(users_repo, profiles):
    bad = users_repo.add_account("bad@x.com")
    users_repo.add_account("good@x.com")
    users_repo.fail_upsert_for.add(bad.account_id)

    assert profiles.backfill_profiles() == 1
    assert bad.account_id not in users_repo.profiles


def test_sign_up_creates_account_and_profile(users_repo, auth):
    s_user = auth.sign_up(email="Jane@X.com", password="secret1", full_name="Jane Doe")

    assert s_user.email == "jane@x.com"
    assert s_user.full_name == "Jane Doe"
    assert s_user.user_id in users_repo.profiles


def test_sign_up_rejects_duplicate_email(users_repo, auth):
    auth.sign_up(email="jane@x.com", password="secret1")

    with pytest.raises(ValidationError, match="already exists"):
        auth.sign_up(email="jane@x.com", password="secret2")


def test_sign_up_rejects_short_password(auth):
    with pytest.raises(ValidationError):
        auth.sign_up(email="jane@x.com", password="123")


def test_login_provisions_missing_profile(users_repo, auth):
    account = users_repo.add_account("old@x.com", password_hash=generate_password_hash("secret1"))
    assert account.account_id not in users_repo.profiles

    s_user = auth.authenticate("old@x.com", "secret1")

    assert s_user.user_id == account.account_id
    assert account.account_id in users_repo.profiles


def test_login_wrong_password(users_repo, auth):
    users_repo.add_account("jane@x.com", password_hash=generate_password_hash("secret1"))

    with pytest.raises(AuthenticationError):
        auth.authenticate("jane@x.com", "wrong")


def test_login_with_placeholder_hash_fails_cleanly(users_repo, auth):
    users_repo.add_account("jane@x.com", password_hash="CHANGE_ME")

    with pytest.raises(AuthenticationError):
        auth.authenticate("jane@x.com", "anything")
