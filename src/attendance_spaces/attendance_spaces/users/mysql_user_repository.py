from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account, UserProfile
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_account(row: dict) -> Account:
        return Account(
            account_id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            full_name=row.get("full_name"),
        )

    def get_account_by_email(self, email: str) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, email, password_hash, full_name FROM accounts WHERE email=%s",
                (email,),
            )
            row = fetchone(cur)
            return self._to_account(row) if row else None

    def get_account_by_id(self, account_id: str) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, email, password_hash, full_name FROM accounts WHERE id=%s",
                (account_id,),
            )
            row = fetchone(cur)
            return self._to_account(row) if row else None

    def create_account(self, *, email: str, password_hash: str, full_name: Optional[str]) -> str:
        account_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO accounts(id, email, password_hash, full_name)
                VALUES(%s,%s,%s,%s)
                """,
                (account_id, email, password_hash, full_name),
            )
        return account_id

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_code, email, full_name, role, institution, occupation, bio, phone_number
                FROM users
                WHERE id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return UserProfile(
                user_id=row["id"],
                user_code=row["user_code"],
                email=row["email"],
                full_name=row["full_name"],
                role=Role(row["role"]),
                institution=row.get("institution"),
                occupation=row.get("occupation"),
                bio=row.get("bio"),
                phone_number=row.get("phone_number"),
            )

    def upsert_profile(
        self,
        *,
        user_id: str,
        user_code: str,
        email: str,
        full_name: str,
        role: Role,
    ) -> None:
        # No-op update keeps the first writer's row when two logins race.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(id, user_code, email, full_name, role)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE id=id
                """,
                (user_id, user_code, email, full_name, role.value),
            )

    def list_accounts_without_profile(self) -> Sequence[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.id, a.email, a.password_hash, a.full_name
                FROM accounts a
                LEFT JOIN users u ON u.id = a.id
                WHERE u.id IS NULL
                ORDER BY a.created_at ASC
                """
            )
            return [self._to_account(r) for r in fetchall(cur)]
