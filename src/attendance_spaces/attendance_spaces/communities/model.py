from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CommunityType, MemberRole


@dataclass(frozen=True)
class Community:
    """Domain entity: a group of users sharing posts."""

    community_id: str
    name: str
    creator_id: str
    community_type: CommunityType
    invite_code: str
    description: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CommunitySummary:
    """Read-model for the community list, relative to one viewer."""

    community: Community
    member_count: int
    viewer_role: Optional[MemberRole] = None

    @property
    def is_member(self) -> bool:
        return self.viewer_role is not None


@dataclass(frozen=True)
class Post:
    post_id: str
    community_id: str
    author_id: str
    title: str
    content: str
    is_public: bool = True
    author_name: str = "Unknown"
    created_at: Optional[datetime] = None
