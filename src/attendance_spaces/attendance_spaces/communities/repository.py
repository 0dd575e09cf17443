from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import CommunityType, MemberRole
from .model import Community, CommunitySummary, Post


class CommunityRepository(Protocol):
    def create_community(
        self,
        *,
        name: str,
        description: str,
        creator_id: str,
        community_type: CommunityType,
        invite_code: str,
    ) -> str:
        """Insert a community; raises DuplicateKeyError when invite_code is taken."""

        raise NotImplementedError

    def get_by_id(self, community_id: str) -> Optional[Community]:
        raise NotImplementedError

    def get_by_invite_code(self, invite_code: str) -> Optional[Community]:
        raise NotImplementedError

    def list_for_viewer(self, viewer_id: str) -> Sequence[CommunitySummary]:
        """All communities newest first, with member counts and the viewer's role."""

        raise NotImplementedError

    def get_member_role(self, *, community_id: str, user_id: str) -> Optional[MemberRole]:
        raise NotImplementedError

    def add_member(self, *, community_id: str, user_id: str, role: MemberRole) -> None:
        """Raises DuplicateKeyError when the user is already a member."""

        raise NotImplementedError

    def remove_member(self, *, community_id: str, user_id: str) -> bool:
        raise NotImplementedError

    def create_post(
        self,
        *,
        community_id: str,
        author_id: str,
        title: str,
        content: str,
        is_public: bool,
    ) -> str:
        raise NotImplementedError

    def list_posts(self, community_id: str, *, public_only: bool) -> Sequence[Post]:
        raise NotImplementedError
