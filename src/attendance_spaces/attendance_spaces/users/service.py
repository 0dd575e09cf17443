from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import USER_CODE_PREFIX
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, StoreError, ValidationError
from .model import Account, UserProfile
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    email: str
    full_name: str
    role: Role


class ProfileService:
    """Use case: make sure every account has exactly one profile row."""

    def __init__(self, users: UserRepository):
        self._users = users

    @staticmethod
    def default_user_code(user_id: str) -> str:
        return USER_CODE_PREFIX + user_id[:8]

    @staticmethod
    def default_full_name(email: str, full_name: Optional[str] = None) -> str:
        name = (full_name or "").strip()
        if name:
            return name
        local = (email or "").split("@", 1)[0]
        return local or "User"

    def ensure_profile(
        self,
        account: Account,
        *,
        full_name: Optional[str] = None,
        role: Role = Role.USER,
    ) -> UserProfile:
        """Idempotent upsert keyed by account id.

        Re-running for an account that already has a profile leaves it untouched.
        """

        self._users.upsert_profile(
            user_id=account.account_id,
            user_code=self.default_user_code(account.account_id),
            email=account.email,
            full_name=self.default_full_name(account.email, full_name or account.full_name),
            role=role,
        )
        profile = self._users.get_profile(account.account_id)
        if profile is None:
            raise StoreError(f"profile for {account.account_id} missing after upsert")
        return profile

    def get_profile(self, user_id: str) -> UserProfile:
        profile = self._users.get_profile(user_id)
        if profile is None:
            raise ValidationError("Profile not found")
        return profile

    def backfill_profiles(self) -> int:
        """Create profiles for accounts that have none. Returns how many were created."""

        created = 0
        for account in self._users.list_accounts_without_profile():
            try:
                self.ensure_profile(account)
                created += 1
            except StoreError:
                logger.exception("could not provision profile for account %s", account.account_id)
        return created


class AuthService:
    """Use case: sign up and authenticate (login)."""

    def __init__(self, users: UserRepository, profiles: ProfileService):
        self._users = users
        self._profiles = profiles

    def sign_up(self, *, email: str, password: str, full_name: str = "") -> SessionUser:
        email = require_email(email).lower()
        require_min_length(password, "Password", 6)

        if self._users.get_account_by_email(email):
            raise ValidationError("An account with this email already exists")

        name = (full_name or "").strip() or None
        account_id = self._users.create_account(
            email=email,
            password_hash=generate_password_hash(password),
            full_name=name,
        )
        account = Account(account_id=account_id, email=email, password_hash="", full_name=name)
        profile = self._profiles.ensure_profile(account, full_name=name)
        return self._to_session_user(profile)

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = require_non_empty(email, "Email").lower()
        account = self._users.get_account_by_email(email)
        if not account:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(account.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        profile = self._profiles.ensure_profile(account)
        return self._to_session_user(profile)

    @staticmethod
    def _to_session_user(profile: UserProfile) -> SessionUser:
        return SessionUser(
            user_id=profile.user_id,
            email=profile.email,
            full_name=profile.full_name,
            role=profile.role,
        )
