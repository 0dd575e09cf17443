from __future__ import annotations

from dataclasses import dataclass

from .communities.mysql_community_repository import MySQLCommunityRepository
from .communities.repository import CommunityRepository
from .communities.service import CommunityService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .spaces.mysql_space_repository import MySQLSpaceRepository
from .spaces.repository import SpaceRepository
from .spaces.resolver import SessionResolver
from .spaces.service import SpaceService
from .submissions.mysql_submission_repository import MySQLSubmissionRepository
from .submissions.prefill import IdentityPrefill
from .submissions.report import AttendanceReportService
from .submissions.repository import SubmissionRepository
from .submissions.service import SubmissionWriter
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, ProfileService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    spaces_repo: SpaceRepository
    submissions_repo: SubmissionRepository
    communities_repo: CommunityRepository
    notifications_repo: NotificationRepository

    profile_service: ProfileService
    auth_service: AuthService
    space_service: SpaceService
    session_resolver: SessionResolver
    submission_writer: SubmissionWriter
    report_service: AttendanceReportService
    notification_service: NotificationService
    community_service: CommunityService


def wire_container(
    *,
    users_repo: UserRepository,
    spaces_repo: SpaceRepository,
    submissions_repo: SubmissionRepository,
    communities_repo: CommunityRepository,
    notifications_repo: NotificationRepository,
) -> Container:
    """Build services over any repository implementations (MySQL or in-memory)."""

    profile_service = ProfileService(users_repo)
    auth_service = AuthService(users_repo, profile_service)
    space_service = SpaceService(spaces_repo)
    session_resolver = SessionResolver(spaces_repo)
    submission_writer = SubmissionWriter(
        session_resolver,
        submissions_repo,
        prefill=IdentityPrefill(users_repo),
    )
    report_service = AttendanceReportService(submissions_repo)
    notification_service = NotificationService(notifications_repo)
    community_service = CommunityService(communities_repo, notification_service)

    return Container(
        users_repo=users_repo,
        spaces_repo=spaces_repo,
        submissions_repo=submissions_repo,
        communities_repo=communities_repo,
        notifications_repo=notifications_repo,
        profile_service=profile_service,
        auth_service=auth_service,
        space_service=space_service,
        session_resolver=session_resolver,
        submission_writer=submission_writer,
        report_service=report_service,
        notification_service=notification_service,
        community_service=community_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        spaces_repo=MySQLSpaceRepository(conn),
        submissions_repo=MySQLSubmissionRepository(conn),
        communities_repo=MySQLCommunityRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
    )
