from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, dump_json, fetchall, load_json, to_db_datetime
from .model import AttendanceRecord, NewSubmission
from .repository import SubmissionRepository


class MySQLSubmissionRepository(SubmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert_record(self, submission: NewSubmission) -> AttendanceRecord:
        record_id = str(uuid.uuid4())
        submitted_at = now_utc().replace(microsecond=0)
        fields = dict(submission.fields)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(id, space_id, user_id, fields, submitted_at,
                                               submission_token, ip_address, user_agent)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record_id,
                    submission.space_id,
                    submission.user_id,
                    dump_json(fields),
                    to_db_datetime(submitted_at),
                    submission.submission_token,
                    submission.meta.ip_address,
                    submission.meta.user_agent,
                ),
            )

        return AttendanceRecord(
            record_id=record_id,
            space_id=submission.space_id,
            user_id=submission.user_id,
            fields=fields,
            submitted_at=submitted_at,
            submission_token=submission.submission_token,
            ip_address=submission.meta.ip_address,
            user_agent=submission.meta.user_agent,
        )

    def list_for_space(self, space_id: str, *, limit: Optional[int] = None) -> Sequence[AttendanceRecord]:
        params: list[object] = [space_id]
        limit_sql = ""
        if limit is not None:
            limit_sql = "LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, space_id, user_id, fields, submitted_at, submission_token, ip_address, user_agent
                FROM attendance_records
                WHERE space_id=%s
                ORDER BY submitted_at DESC
                {limit_sql}
                """,
                tuple(params),
            )
            rows = fetchall(cur)
            return [
                AttendanceRecord(
                    record_id=r["id"],
                    space_id=r["space_id"],
                    user_id=r.get("user_id"),
                    fields=_fields_from_json(r.get("fields")),
                    submitted_at=as_utc(r["submitted_at"]),
                    submission_token=r.get("submission_token"),
                    ip_address=r.get("ip_address"),
                    user_agent=r.get("user_agent"),
                )
                for r in rows
            ]


def _fields_from_json(value) -> dict[str, str]:
    data = load_json(value, {})
    if not isinstance(data, dict):
        return {}
    return {str(k): "" if v is None else str(v) for k, v in data.items()}
