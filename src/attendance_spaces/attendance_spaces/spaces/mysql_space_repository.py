from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import SpaceStatus, SpaceType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, dump_json, fetchall, fetchone, load_json, to_db_datetime
from .model import CustomField, Space, SpaceSummary, parse_custom_fields
from .repository import SpaceRepository

_SPACE_COLUMNS = """
    s.id, s.title, s.type, s.admin_id, s.required_fields, s.unique_code, s.public_link,
    s.status, s.start_time, s.end_time, s.created_at
"""


class MySQLSpaceRepository(SpaceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_space(r: dict) -> Space:
        return Space(
            space_id=r["id"],
            title=r["title"],
            space_type=SpaceType(r["type"]),
            admin_id=r["admin_id"],
            unique_code=r["unique_code"],
            public_link=r["public_link"],
            status=SpaceStatus(r["status"]),
            required_fields=parse_custom_fields(load_json(r.get("required_fields"), [])),
            start_time=as_utc(r.get("start_time")),
            end_time=as_utc(r.get("end_time")),
            created_at=as_utc(r.get("created_at")),
        )

    def get_by_code(self, code: str) -> Optional[Space]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SPACE_COLUMNS} FROM spaces s WHERE s.unique_code=%s", (code,))
            r = fetchone(cur)
            return self._to_space(r) if r else None

    def get_by_id(self, space_id: str) -> Optional[Space]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SPACE_COLUMNS} FROM spaces s WHERE s.id=%s", (space_id,))
            r = fetchone(cur)
            return self._to_space(r) if r else None

    def create_space(
        self,
        *,
        title: str,
        space_type: SpaceType,
        admin_id: str,
        required_fields: Sequence[CustomField],
        unique_code: str,
        public_link: str,
        start_time: Optional[datetime],
        end_time: Optional[datetime],
    ) -> str:
        space_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO spaces(id, title, type, admin_id, required_fields, unique_code, public_link,
                                   status, start_time, end_time)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    space_id,
                    title,
                    space_type.value,
                    admin_id,
                    dump_json([f.to_json() for f in required_fields]),
                    unique_code,
                    public_link,
                    SpaceStatus.OPEN.value,
                    to_db_datetime(start_time),
                    to_db_datetime(end_time),
                ),
            )
        return space_id

    def set_status(self, *, space_id: str, status: SpaceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE spaces SET status=%s WHERE id=%s", (status.value, space_id))
            return cur.rowcount > 0

    def list_for_admin(self, admin_id: str) -> Sequence[SpaceSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SPACE_COLUMNS}, COUNT(ar.id) AS submission_count
                FROM spaces s
                LEFT JOIN attendance_records ar ON ar.space_id = s.id
                WHERE s.admin_id=%s
                GROUP BY s.id
                ORDER BY s.created_at DESC
                """,
                (admin_id,),
            )
            return [
                SpaceSummary(space=self._to_space(r), submission_count=int(r.get("submission_count") or 0))
                for r in fetchall(cur)
            ]
