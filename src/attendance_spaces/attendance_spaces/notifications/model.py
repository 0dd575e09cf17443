from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class InboxItem:
    """One entry of a user's notifications inbox."""

    notification_id: str
    user_id: str
    title: str
    message: str
    kind: NotificationType = NotificationType.GENERAL
    read: bool = False
    data: Mapping[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
