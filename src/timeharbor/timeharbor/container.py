from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .activity.mysql_activity_repository import MySQLActivityLogRepository
from .activity.repository import ActivityLogRepository
from .activity.service import ActivityService
from .core.constants import DEFAULT_ACCESS_TOKEN_MINUTES, DEFAULT_REFRESH_TOKEN_DAYS, DEFAULT_RESET_TOKEN_MINUTES
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.push import FcmPushSender, LoggingPushSender, PushSender
from .notifications.service import NotificationService
from .stats.calculator.event_replay_calculator import EventReplayCalculator
from .stats.mysql_daily_stat_repository import MySQLDailyStatRepository
from .stats.repository import DailyStatRepository
from .stats.service import DailyStatsService
from .teams.mysql_team_repository import MySQLTeamRepository
from .teams.repository import TeamRepository
from .teams.service import TeamService
from .tickets.mysql_ticket_repository import MySQLTicketRepository
from .tickets.repository import TicketRepository
from .tickets.service import TicketService
from .timelog.mysql_reply_repository import MySQLWorkLogReplyRepository
from .timelog.mysql_work_log_repository import MySQLWorkLogRepository
from .timelog.repository import WorkLogReplyRepository, WorkLogRepository
from .timelog.service import TimeSyncService
from .users.mysql_refresh_token_repository import MySQLRefreshTokenRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import RefreshTokenRepository, UserRepository
from .users.service import AuthService
from .users.tokens import AccessTokenSigner


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    refresh_tokens_repo: RefreshTokenRepository
    teams_repo: TeamRepository
    tickets_repo: TicketRepository
    work_logs_repo: WorkLogRepository
    replies_repo: WorkLogReplyRepository
    activity_repo: ActivityLogRepository
    notifications_repo: NotificationRepository
    daily_stats_repo: DailyStatRepository

    auth_service: AuthService
    notification_service: NotificationService
    team_service: TeamService
    ticket_service: TicketService
    activity_service: ActivityService
    daily_stats_service: DailyStatsService
    time_sync_service: TimeSyncService
    dashboard_service: DashboardService


def build_push_sender(*, fcm_project_id: str = "", fcm_access_token: str = "") -> PushSender:
    if fcm_project_id and fcm_access_token:
        return FcmPushSender(project_id=fcm_project_id, access_token=fcm_access_token)
    return LoggingPushSender()


def assemble(
    *,
    conn,
    users_repo,
    refresh_tokens_repo,
    teams_repo,
    tickets_repo,
    work_logs_repo,
    replies_repo,
    activity_repo,
    notifications_repo,
    daily_stats_repo,
    signer: AccessTokenSigner,
    push_sender: PushSender,
    refresh_token_days: int = DEFAULT_REFRESH_TOKEN_DAYS,
    reset_token_minutes: int = DEFAULT_RESET_TOKEN_MINUTES,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    """Wire services on top of the given repositories (MySQL in production, in-memory in tests)."""
    clock_kw = {"clock": clock} if clock else {}

    auth_service = AuthService(
        users_repo,
        refresh_tokens_repo,
        signer,
        refresh_token_days=refresh_token_days,
        reset_token_minutes=reset_token_minutes,
        **clock_kw,
    )
    notification_service = NotificationService(notifications_repo, users_repo, push_sender, **clock_kw)
    team_service = TeamService(teams_repo, users_repo, notification_service)
    ticket_service = TicketService(tickets_repo, team_service, notification_service)
    activity_service = ActivityService(activity_repo, team_service)

    calculator = EventReplayCalculator()
    daily_stats_service = DailyStatsService(work_logs_repo, daily_stats_repo, calculator=calculator, **clock_kw)
    time_sync_service = TimeSyncService(
        work_logs_repo,
        replies_repo,
        team_service,
        daily_stats_service,
        notification_service,
        **clock_kw,
    )
    dashboard_service = DashboardService(
        work_logs_repo,
        ticket_service,
        team_service,
        daily_stats_service,
        calculator=calculator,
        **clock_kw,
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        refresh_tokens_repo=refresh_tokens_repo,
        teams_repo=teams_repo,
        tickets_repo=tickets_repo,
        work_logs_repo=work_logs_repo,
        replies_repo=replies_repo,
        activity_repo=activity_repo,
        notifications_repo=notifications_repo,
        daily_stats_repo=daily_stats_repo,
        auth_service=auth_service,
        notification_service=notification_service,
        team_service=team_service,
        ticket_service=ticket_service,
        activity_service=activity_service,
        daily_stats_service=daily_stats_service,
        time_sync_service=time_sync_service,
        dashboard_service=dashboard_service,
    )


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    access_token_minutes: int = DEFAULT_ACCESS_TOKEN_MINUTES,
    refresh_token_days: int = DEFAULT_REFRESH_TOKEN_DAYS,
    reset_token_minutes: int = DEFAULT_RESET_TOKEN_MINUTES,
    fcm_project_id: str = "",
    fcm_access_token: str = "",
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        refresh_tokens_repo=MySQLRefreshTokenRepository(conn),
        teams_repo=MySQLTeamRepository(conn),
        tickets_repo=MySQLTicketRepository(conn),
        work_logs_repo=MySQLWorkLogRepository(conn),
        replies_repo=MySQLWorkLogReplyRepository(conn),
        activity_repo=MySQLActivityLogRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        daily_stats_repo=MySQLDailyStatRepository(conn),
        signer=AccessTokenSigner(secret_key, ttl_seconds=int(access_token_minutes) * 60),
        push_sender=build_push_sender(fcm_project_id=fcm_project_id, fcm_access_token=fcm_access_token),
        refresh_token_days=refresh_token_days,
        reset_token_minutes=reset_token_minutes,
    )
