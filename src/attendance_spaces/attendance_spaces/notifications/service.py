from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from ..core.constants import DEFAULT_NOTIFICATIONS_LIMIT
from ..core.enums import NotificationType
from ..core.exceptions import StoreError, ValidationError
from .model import InboxItem
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Inbox:
    items: Sequence[InboxItem]

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.items if not n.read)


class NotificationService:
    """Use case: a user's inbox (list, mark read) and best-effort delivery."""

    def __init__(self, notifications: NotificationRepository, *, list_limit: int = DEFAULT_NOTIFICATIONS_LIMIT):
        self._notifications = notifications
        self._list_limit = int(list_limit)

    def inbox(self, user_id: str) -> Inbox:
        return Inbox(items=list(self._notifications.list_for_user(user_id, limit=self._list_limit)))

    def mark_read(self, *, user_id: str, notification_id: str) -> None:
        if not self._notifications.mark_read(user_id=user_id, notification_id=notification_id):
            raise ValidationError("Notification not found")

    def mark_all_read(self, user_id: str) -> int:
        return self._notifications.mark_all_read(user_id)

    def notify(
        self,
        *,
        user_id: str,
        title: str,
        message: str,
        kind: NotificationType = NotificationType.GENERAL,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Optional[str]:
        """Deliver one notification. A store failure is logged and never blocks the caller."""

        try:
            return self._notifications.create(user_id=user_id, title=title, message=message, kind=kind, data=data)
        except StoreError:
            logger.exception("could not notify user %s (%s)", user_id, title)
            return None
