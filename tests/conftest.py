from __future__ import annotations

from datetime import datetime

import pytest

from src.timeharbor.timeharbor.container import assemble
from src.timeharbor.timeharbor.main import create_app
from src.timeharbor.timeharbor.users.tokens import AccessTokenSigner

from tests.fakes import (
    FakeActivityRepo,
    FakeDailyStatsRepo,
    FakeNotificationsRepo,
    FakeRefreshTokensRepo,
    FakeRepliesRepo,
    FakeTeamsRepo,
    FakeTicketsRepo,
    FakeUsersRepo,
    FakeWorkLogsRepo,
    RecordingPushSender,
    Ticker,
)

PASSWORD = "Secret123"


@pytest.fixture
def fixed_now():
    # A Wednesday; the week started on Sunday 2026-03-08.
    return datetime(2026, 3, 11, 10, 0, 0)


@pytest.fixture
def push_sender():
    return RecordingPushSender()


@pytest.fixture
def container(fixed_now, push_sender):
    ticker = Ticker()
    users = FakeUsersRepo(ticker)
    work_logs = FakeWorkLogsRepo()
    return assemble(
        conn=None,
        users_repo=users,
        refresh_tokens_repo=FakeRefreshTokensRepo(),
        teams_repo=FakeTeamsRepo(users, ticker),
        tickets_repo=FakeTicketsRepo(users, work_logs, ticker),
        work_logs_repo=work_logs,
        replies_repo=FakeRepliesRepo(users, ticker),
        activity_repo=FakeActivityRepo(),
        notifications_repo=FakeNotificationsRepo(ticker),
        daily_stats_repo=FakeDailyStatsRepo(),
        signer=AccessTokenSigner("test-secret", ttl_seconds=3600),
        push_sender=push_sender,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(container):
    """Create a user through the auth service; returns ``(user, headers)``."""

    def _signup(email: str, full_name: str = None):
        result = container.auth_service.signup(email=email, password=PASSWORD, full_name=full_name)
        headers = {"Authorization": f"Bearer {result.session.access_token}"}
        return result.user, headers

    return _signup


@pytest.fixture
def auth_headers(signup):
    _, headers = signup("alice@example.com", "Alice")
    return headers
