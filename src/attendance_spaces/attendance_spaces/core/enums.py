from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Profile role."""

    ADMIN = "admin"
    USER = "user"


class SpaceType(str, Enum):
    CLASS = "Class"
    EVENT = "Event"
    CUSTOM = "Custom"


class SpaceStatus(str, Enum):
    """Lifecycle status of a space; only OPEN accepts new submissions."""

    OPEN = "open"
    PAUSED = "paused"
    CLOSED = "closed"


class FieldKind(str, Enum):
    """Input kind of a custom field; drives validation."""

    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"


class ResolutionState(str, Enum):
    ACCEPTING = "accepting"
    REJECTED = "rejected"
    NOT_FOUND = "not_found"


class RejectReason(str, Enum):
    PAUSED = "paused"
    CLOSED = "closed"
    ENDED = "ended"


class CommunityType(str, Enum):
    """Public communities can be joined from the list; private ones need the invite code."""

    PUBLIC = "public"
    PRIVATE = "private"


class MemberRole(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    MEMBER = "member"


class NotificationType(str, Enum):
    EVENT_INVITE = "event_invite"
    COMMUNITY_INVITE = "community_invite"
    ATTENDANCE_REMINDER = "attendance_reminder"
    GENERAL = "general"
