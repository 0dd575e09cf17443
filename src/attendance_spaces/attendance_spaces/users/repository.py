from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Account, UserProfile


class UserRepository(Protocol):
    """Repository interface for accounts and profiles.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_account_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def get_account_by_id(self, account_id: str) -> Optional[Account]:
        raise NotImplementedError

    def create_account(self, *, email: str, password_hash: str, full_name: Optional[str]) -> str:
        raise NotImplementedError

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        raise NotImplementedError

    def upsert_profile(
        self,
        *,
        user_id: str,
        user_code: str,
        email: str,
        full_name: str,
        role: Role,
    ) -> None:
        """Insert the profile unless one already exists for user_id.

        Must be safe under concurrent calls for the same user_id.
        """

        raise NotImplementedError

    def list_accounts_without_profile(self) -> Sequence[Account]:
        raise NotImplementedError
