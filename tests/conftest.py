from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from src.attendance_spaces.attendance_spaces.communities.model import Community, CommunitySummary, Post
from src.attendance_spaces.attendance_spaces.core.enums import FieldKind, MemberRole, Role, SpaceStatus, SpaceType
from src.attendance_spaces.attendance_spaces.core.exceptions import DuplicateKeyError, StoreError
from src.attendance_spaces.attendance_spaces.notifications.model import InboxItem
from src.attendance_spaces.attendance_spaces.spaces.model import CustomField, Space, SpaceSummary
from src.attendance_spaces.attendance_spaces.submissions.model import AttendanceRecord, NewSubmission
from src.attendance_spaces.attendance_spaces.users.model import Account, UserProfile


class InMemoryUsers:
    def __init__(self):
        self.accounts: dict[str, Account] = {}
        self.profiles: dict[str, UserProfile] = {}
        self.upsert_calls = 0
        self.fail_profile_reads = False
        self.fail_upsert_for: set[str] = set()

    def add_account(self, email: str, password_hash: str = "", full_name: Optional[str] = None) -> Account:
        account = Account(account_id=str(uuid.uuid4()), email=email, password_hash=password_hash, full_name=full_name)
        self.accounts[account.account_id] = account
        return account

    def get_account_by_email(self, email: str) -> Optional[Account]:
        return next((a for a in self.accounts.values() if a.email == email), None)

    def get_account_by_id(self, account_id: str) -> Optional[Account]:
        return self.accounts.get(account_id)

    def create_account(self, *, email: str, password_hash: str, full_name: Optional[str]) -> str:
        return self.add_account(email, password_hash, full_name).account_id

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        if self.fail_profile_reads:
            raise StoreError("profile read timed out")
        return self.profiles.get(user_id)

    def upsert_profile(self, *, user_id: str, user_code: str, email: str, full_name: str, role: Role) -> None:
        self.upsert_calls += 1
        if user_id in self.fail_upsert_for:
            raise StoreError("upsert failed")
        self.profiles.setdefault(
            user_id,
            UserProfile(user_id=user_id, user_code=user_code, email=email, full_name=full_name, role=role),
        )

    def list_accounts_without_profile(self):
        return [a for a in self.accounts.values() if a.account_id not in self.profiles]


class InMemorySpaces:
    def __init__(self, spaces=(), *, taken_codes=()):
        self.spaces: dict[str, Space] = {s.space_id: s for s in spaces}
        self.taken_codes = set(taken_codes)
        self.fail_lookups = False
        self.counts: dict[str, int] = {}

    def add(self, space: Space) -> Space:
        self.spaces[space.space_id] = space
        return space

    def get_by_code(self, code: str) -> Optional[Space]:
        if self.fail_lookups:
            raise StoreError("lookup failed")
        return next((s for s in self.spaces.values() if s.unique_code == code), None)

    def get_by_id(self, space_id: str) -> Optional[Space]:
        return self.spaces.get(space_id)

    def create_space(self, *, title, space_type, admin_id, required_fields, unique_code, public_link, start_time, end_time) -> str:
        if unique_code in self.taken_codes or any(s.unique_code == unique_code for s in self.spaces.values()):
            raise DuplicateKeyError(f"duplicate code {unique_code}")
        space = Space(
            space_id=str(uuid.uuid4()),
            title=title,
            space_type=space_type,
            admin_id=admin_id,
            unique_code=unique_code,
            public_link=public_link,
            status=SpaceStatus.OPEN,
            required_fields=tuple(required_fields),
            start_time=start_time,
            end_time=end_time,
        )
        self.spaces[space.space_id] = space
        return space.space_id

    def set_status(self, *, space_id: str, status: SpaceStatus) -> bool:
        space = self.spaces.get(space_id)
        if space is None:
            return False
        self.spaces[space_id] = replace(space, status=status)
        return True

    def list_for_admin(self, admin_id: str):
        return [
            SpaceSummary(space=s, submission_count=self.counts.get(s.space_id, 0))
            for s in self.spaces.values()
            if s.admin_id == admin_id
        ]


class InMemorySubmissions:
    def __init__(self, now: datetime):
        self.records: list[AttendanceRecord] = []
        self.insert_calls = 0
        self.fail_with: Optional[Exception] = None
        self._now = now

    def insert_record(self, submission: NewSubmission) -> AttendanceRecord:
        self.insert_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        if submission.submission_token and any(
            r.submission_token == submission.submission_token for r in self.records
        ):
            raise DuplicateKeyError("duplicate submission_token")
        record = AttendanceRecord(
            record_id=str(uuid.uuid4()),
            space_id=submission.space_id,
            user_id=submission.user_id,
            fields=dict(submission.fields),
            submitted_at=self._now + timedelta(seconds=len(self.records)),
            submission_token=submission.submission_token,
            ip_address=submission.meta.ip_address,
            user_agent=submission.meta.user_agent,
        )
        self.records.append(record)
        return record

    def list_for_space(self, space_id: str, *, limit: Optional[int] = None):
        items = [r for r in self.records if r.space_id == space_id]
        items.sort(key=lambda r: r.submitted_at, reverse=True)
        return items[:limit] if limit is not None else items


class InMemoryCommunities:
    def __init__(self, now: datetime):
        self.communities: dict[str, Community] = {}
        self.members: dict[tuple[str, str], MemberRole] = {}
        self.posts: list[Post] = []
        self.taken_codes: set[str] = set()
        self._now = now

    def create_community(self, *, name, description, creator_id, community_type, invite_code) -> str:
        if invite_code in self.taken_codes or any(c.invite_code == invite_code for c in self.communities.values()):
            raise DuplicateKeyError(f"duplicate invite code {invite_code}")
        community = Community(
            community_id=str(uuid.uuid4()),
            name=name,
            description=description,
            creator_id=creator_id,
            community_type=community_type,
            invite_code=invite_code,
            created_at=self._now + timedelta(seconds=len(self.communities)),
        )
        self.communities[community.community_id] = community
        return community.community_id

    def get_by_id(self, community_id: str) -> Optional[Community]:
        return self.communities.get(community_id)

    def get_by_invite_code(self, invite_code: str) -> Optional[Community]:
        return next((c for c in self.communities.values() if c.invite_code == invite_code), None)

    def list_for_viewer(self, viewer_id: str):
        items = sorted(self.communities.values(), key=lambda c: c.created_at, reverse=True)
        return [
            CommunitySummary(
                community=c,
                member_count=sum(1 for (cid, _) in self.members if cid == c.community_id),
                viewer_role=self.members.get((c.community_id, viewer_id)),
            )
            for c in items
        ]

    def get_member_role(self, *, community_id: str, user_id: str) -> Optional[MemberRole]:
        return self.members.get((community_id, user_id))

    def add_member(self, *, community_id: str, user_id: str, role: MemberRole) -> None:
        if (community_id, user_id) in self.members:
            raise DuplicateKeyError("duplicate membership")
        self.members[(community_id, user_id)] = role

    def remove_member(self, *, community_id: str, user_id: str) -> bool:
        return self.members.pop((community_id, user_id), None) is not None

    def create_post(self, *, community_id, author_id, title, content, is_public) -> str:
        post = Post(
            post_id=str(uuid.uuid4()),
            community_id=community_id,
            author_id=author_id,
            title=title,
            content=content,
            is_public=is_public,
            created_at=self._now + timedelta(seconds=len(self.posts)),
        )
        self.posts.append(post)
        return post.post_id

    def list_posts(self, community_id: str, *, public_only: bool):
        items = [p for p in self.posts if p.community_id == community_id and (p.is_public or not public_only)]
        return sorted(items, key=lambda p: p.created_at, reverse=True)


class InMemoryNotifications:
    def __init__(self, now: datetime):
        self.items: list[InboxItem] = []
        self.fail_creates = False
        self._now = now

    def create(self, *, user_id, title, message, kind, data=None) -> str:
        if self.fail_creates:
            raise StoreError("notification insert failed")
        item = InboxItem(
            notification_id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            message=message,
            kind=kind,
            data=dict(data or {}),
            created_at=self._now + timedelta(seconds=len(self.items)),
        )
        self.items.append(item)
        return item.notification_id

    def list_for_user(self, user_id: str, *, limit: int):
        items = [n for n in self.items if n.user_id == user_id]
        items.sort(key=lambda n: n.created_at, reverse=True)
        return items[:limit]

    def mark_read(self, *, user_id: str, notification_id: str) -> bool:
        for idx, n in enumerate(self.items):
            if n.notification_id == notification_id and n.user_id == user_id:
                self.items[idx] = replace(n, read=True)
                return True
        return False

    def mark_all_read(self, user_id: str) -> int:
        count = 0
        for idx, n in enumerate(self.items):
            if n.user_id == user_id and not n.read:
                self.items[idx] = replace(n, read=True)
                count += 1
        return count


def make_space(**overrides) -> Space:
    values = dict(
        space_id="space-1",
        title="Intro to Databases",
        space_type=SpaceType.CLASS,
        admin_id="admin-1",
        unique_code="TEND-00042",
        public_link="http://localhost/attend/TEND-00042",
        status=SpaceStatus.OPEN,
        required_fields=(CustomField(field_id="1", name="Student ID", kind=FieldKind.NUMBER, required=True),),
    )
    values.update(overrides)
    return Space(**values)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def space_factory():
    return make_space


@pytest.fixture
def space() -> Space:
    return make_space()


@pytest.fixture
def spaces_repo(space) -> InMemorySpaces:
    return InMemorySpaces([space])


@pytest.fixture
def submissions_repo(fixed_now) -> InMemorySubmissions:
    return InMemorySubmissions(fixed_now)


@pytest.fixture
def communities_repo(fixed_now) -> InMemoryCommunities:
    return InMemoryCommunities(fixed_now)


@pytest.fixture
def notifications_repo(fixed_now) -> InMemoryNotifications:
    return InMemoryNotifications(fixed_now)
