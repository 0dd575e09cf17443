from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import NotificationType
from .model import InboxItem


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        user_id: str,
        title: str,
        message: str,
        kind: NotificationType,
        data: Optional[Mapping[str, Any]] = None,
    ) -> str:
        raise NotImplementedError

    def list_for_user(self, user_id: str, *, limit: int) -> Sequence[InboxItem]:
        """Newest first."""

        raise NotImplementedError

    def mark_read(self, *, user_id: str, notification_id: str) -> bool:
        """Only the owner's notification is updated; False when none matched."""

        raise NotImplementedError

    def mark_all_read(self, user_id: str) -> int:
        raise NotImplementedError
