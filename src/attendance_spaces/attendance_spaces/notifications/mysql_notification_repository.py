from __future__ import annotations

import uuid
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, dump_json, fetchall, load_json
from .model import InboxItem
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: str,
        title: str,
        message: str,
        kind: NotificationType,
        data: Optional[Mapping[str, Any]] = None,
    ) -> str:
        notification_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(id, user_id, title, message, type, data)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (notification_id, user_id, title, message, kind.value, dump_json(dict(data)) if data else None),
            )
        return notification_id

    def list_for_user(self, user_id: str, *, limit: int) -> Sequence[InboxItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, title, message, type, `read`, data, created_at
                FROM notifications
                WHERE user_id=%s
                ORDER BY created_at DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            out = []
            for r in fetchall(cur):
                data = load_json(r.get("data"), {})
                out.append(
                    InboxItem(
                        notification_id=r["id"],
                        user_id=r["user_id"],
                        title=r["title"],
                        message=r["message"],
                        kind=NotificationType(r["type"]),
                        read=bool(r["read"]),
                        data=data if isinstance(data, dict) else {},
                        created_at=as_utc(r.get("created_at")),
                    )
                )
            return out

    def mark_read(self, *, user_id: str, notification_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET `read`=TRUE WHERE id=%s AND user_id=%s",
                (notification_id, user_id),
            )
            return cur.rowcount > 0

    def mark_all_read(self, user_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET `read`=TRUE WHERE user_id=%s AND `read`=FALSE",
                (user_id,),
            )
            return int(cur.rowcount or 0)
