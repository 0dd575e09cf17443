from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Account:
    """Login credentials. One account owns at most one profile."""

    account_id: str
    email: str
    password_hash: str
    full_name: Optional[str] = None


@dataclass(frozen=True)
class UserProfile:
    """Domain entity: user profile (plain data, no DB access)."""

    user_id: str
    user_code: str
    email: str
    full_name: str
    role: Role = Role.USER
    institution: Optional[str] = None
    occupation: Optional[str] = None
    bio: Optional[str] = None
    phone_number: Optional[str] = None


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as seen by the request layer."""

    user_id: str
    email: str
