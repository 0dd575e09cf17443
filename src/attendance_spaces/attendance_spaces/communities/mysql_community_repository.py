from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..core.enums import CommunityType, MemberRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, fetchone
from .model import Community, CommunitySummary, Post
from .repository import CommunityRepository

_COMMUNITY_COLUMNS = "c.id, c.name, c.description, c.creator_id, c.type, c.invite_code, c.created_at"


class MySQLCommunityRepository(CommunityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_community(r: dict) -> Community:
        return Community(
            community_id=r["id"],
            name=r["name"],
            description=r.get("description") or "",
            creator_id=r["creator_id"],
            community_type=CommunityType(r["type"]),
            invite_code=r["invite_code"],
            created_at=as_utc(r.get("created_at")),
        )

    def create_community(
        self,
        *,
        name: str,
        description: str,
        creator_id: str,
        community_type: CommunityType,
        invite_code: str,
    ) -> str:
        community_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO communities(id, name, description, creator_id, type, invite_code)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (community_id, name, description or None, creator_id, community_type.value, invite_code),
            )
        return community_id

    def get_by_id(self, community_id: str) -> Optional[Community]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COMMUNITY_COLUMNS} FROM communities c WHERE c.id=%s", (community_id,))
            r = fetchone(cur)
            return self._to_community(r) if r else None

    def get_by_invite_code(self, invite_code: str) -> Optional[Community]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COMMUNITY_COLUMNS} FROM communities c WHERE c.invite_code=%s", (invite_code,))
            r = fetchone(cur)
            return self._to_community(r) if r else None

    def list_for_viewer(self, viewer_id: str) -> Sequence[CommunitySummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COMMUNITY_COLUMNS},
                       (SELECT COUNT(*) FROM community_members m WHERE m.community_id = c.id) AS member_count,
                       me.role AS viewer_role
                FROM communities c
                LEFT JOIN community_members me ON me.community_id = c.id AND me.user_id=%s
                ORDER BY c.created_at DESC
                """,
                (viewer_id,),
            )
            return [
                CommunitySummary(
                    community=self._to_community(r),
                    member_count=int(r.get("member_count") or 0),
                    viewer_role=MemberRole(r["viewer_role"]) if r.get("viewer_role") else None,
                )
                for r in fetchall(cur)
            ]

    def get_member_role(self, *, community_id: str, user_id: str) -> Optional[MemberRole]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT role FROM community_members WHERE community_id=%s AND user_id=%s",
                (community_id, user_id),
            )
            r = fetchone(cur)
            return MemberRole(r["role"]) if r else None

    def add_member(self, *, community_id: str, user_id: str, role: MemberRole) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO community_members(id, community_id, user_id, role) VALUES(%s,%s,%s,%s)",
                (str(uuid.uuid4()), community_id, user_id, role.value),
            )

    def remove_member(self, *, community_id: str, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM community_members WHERE community_id=%s AND user_id=%s",
                (community_id, user_id),
            )
            return cur.rowcount > 0

    def create_post(
        self,
        *,
        community_id: str,
        author_id: str,
        title: str,
        content: str,
        is_public: bool,
    ) -> str:
        post_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO posts(id, community_id, author_id, title, content, is_public)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (post_id, community_id, author_id, title, content, bool(is_public)),
            )
        return post_id

    def list_posts(self, community_id: str, *, public_only: bool) -> Sequence[Post]:
        where = "p.community_id=%s"
        if public_only:
            where += " AND p.is_public = TRUE"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT p.id, p.community_id, p.author_id, p.title, p.content, p.is_public, p.created_at,
                       u.full_name AS author_name
                FROM posts p
                LEFT JOIN users u ON u.id = p.author_id
                WHERE {where}
                ORDER BY p.created_at DESC
                """,
                (community_id,),
            )
            return [
                Post(
                    post_id=r["id"],
                    community_id=r["community_id"],
                    author_id=r["author_id"],
                    title=r["title"],
                    content=r["content"],
                    is_public=bool(r["is_public"]),
                    author_name=r.get("author_name") or "Unknown",
                    created_at=as_utc(r.get("created_at")),
                )
                for r in fetchall(cur)
            ]
