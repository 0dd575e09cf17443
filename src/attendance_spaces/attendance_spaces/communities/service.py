from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.constants import COMMUNITY_CODE_DIGITS, COMMUNITY_CODE_PREFIX, SPACE_CODE_MAX_ATTEMPTS
from ..core.enums import CommunityType, MemberRole, NotificationType
from ..core.exceptions import AuthorizationError, DuplicateKeyError, StoreError, ValidationError
from ..notifications.service import NotificationService
from .model import Community, CommunitySummary, Post
from .repository import CommunityRepository

logger = logging.getLogger(__name__)


def generate_invite_code() -> str:
    return COMMUNITY_CODE_PREFIX + "".join(secrets.choice("0123456789") for _ in range(COMMUNITY_CODE_DIGITS))


@dataclass(frozen=True)
class CommunityView:
    """A community as one viewer may see it."""

    community: Community
    viewer_role: Optional[MemberRole]
    posts: Sequence[Post]

    @property
    def is_member(self) -> bool:
        return self.viewer_role is not None

    @property
    def is_creator(self) -> bool:
        return self.viewer_role == MemberRole.ADMIN


class CommunityService:
    """Use case: communities, membership and posts."""

    def __init__(
        self,
        communities: CommunityRepository,
        notifications: NotificationService,
        *,
        code_generator: Callable[[], str] = generate_invite_code,
        max_code_attempts: int = SPACE_CODE_MAX_ATTEMPTS,
    ):
        self._communities = communities
        self._notifications = notifications
        self._code_generator = code_generator
        self._max_code_attempts = int(max_code_attempts)

    def create_community(
        self, *, creator_id: str, name: str, description: str = "", community_type: str = CommunityType.PUBLIC.value
    ) -> Community:
        name = require_non_empty(name, "Community name")
        try:
            kind = CommunityType((community_type or "").lower())
        except ValueError:
            raise ValidationError("Type must be public or private")

        for attempt in range(1, self._max_code_attempts + 1):
            code = self._code_generator()
            try:
                community_id = self._communities.create_community(
                    name=name,
                    description=(description or "").strip(),
                    creator_id=creator_id,
                    community_type=kind,
                    invite_code=code,
                )
            except DuplicateKeyError:
                logger.warning("invite code %s taken (attempt %d)", code, attempt)
                continue

            self._communities.add_member(community_id=community_id, user_id=creator_id, role=MemberRole.ADMIN)
            community = self._communities.get_by_id(community_id)
            if community is None:
                raise StoreError(f"community {community_id} missing after insert")
            logger.info("community %s created by %s", community_id, creator_id)
            return community

        raise StoreError("could not allocate a unique invite code")

    def list_for_viewer(self, viewer_id: str) -> Sequence[CommunitySummary]:
        return self._communities.list_for_viewer(viewer_id)

    def _get(self, community_id: str) -> Community:
        community = self._communities.get_by_id(community_id)
        if community is None:
            raise ValidationError("Community not found")
        return community

    def _add_member(self, community: Community, user_id: str, display_name: str) -> Community:
        try:
            self._communities.add_member(community_id=community.community_id, user_id=user_id, role=MemberRole.MEMBER)
        except DuplicateKeyError:
            raise ValidationError("You are already a member of this community")

        logger.info("user %s joined community %s", user_id, community.community_id)
        if community.creator_id != user_id:
            self._notifications.notify(
                user_id=community.creator_id,
                title="New community member",
                message=f"{display_name or 'Someone'} joined {community.name}",
                kind=NotificationType.GENERAL,
                data={"community_id": community.community_id},
            )
        return community

    def join(self, *, user_id: str, community_id: str, display_name: str = "") -> Community:
        """Join a public community from the list; private ones need the invite code."""

        community = self._get(community_id)
        if community.community_type != CommunityType.PUBLIC:
            raise AuthorizationError("This community is private. Join it with its invite code.")
        return self._add_member(community, user_id, display_name)

    def join_by_code(self, *, user_id: str, invite_code: str, display_name: str = "") -> Community:
        code = require_non_empty(invite_code, "Invite code").upper()
        community = self._communities.get_by_invite_code(code)
        if community is None:
            raise ValidationError("Invalid invite code")
        return self._add_member(community, user_id, display_name)

    def leave(self, *, user_id: str, community_id: str) -> None:
        community = self._get(community_id)
        if community.creator_id == user_id:
            raise ValidationError("The creator cannot leave the community")
        if not self._communities.remove_member(community_id=community_id, user_id=user_id):
            raise ValidationError("You are not a member of this community")
        logger.info("user %s left community %s", user_id, community_id)

    def view(self, *, viewer_id: str, community_id: str) -> CommunityView:
        community = self._get(community_id)
        role = self._communities.get_member_role(community_id=community_id, user_id=viewer_id)
        if role is None and community.community_type == CommunityType.PRIVATE:
            raise AuthorizationError("This community is private")
        posts = self._communities.list_posts(community_id, public_only=role is None)
        return CommunityView(community=community, viewer_role=role, posts=list(posts))

    def create_post(self, *, author_id: str, community_id: str, title: str, content: str, is_public: bool = True) -> str:
        self._get(community_id)
        if self._communities.get_member_role(community_id=community_id, user_id=author_id) is None:
            raise AuthorizationError("Only members can post in this community")
        title = require_non_empty(title, "Title")
        content = require_non_empty(content, "Content")
        post_id = self._communities.create_post(
            community_id=community_id,
            author_id=author_id,
            title=title,
            content=content,
            is_public=bool(is_public),
        )
        logger.info("post %s created in community %s", post_id, community_id)
        return post_id
