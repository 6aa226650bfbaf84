"""In-memory repositories used by the test suite in place of MySQL."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

from src.timeharbor.timeharbor.activity.model import ActivityLog
from src.timeharbor.timeharbor.core.enums import MemberRole, TicketStatus, UserStatus
from src.timeharbor.timeharbor.notifications.model import Notification, PushResult
from src.timeharbor.timeharbor.stats.model import DailyStat
from src.timeharbor.timeharbor.teams.model import Member, MemberProfile, Team
from src.timeharbor.timeharbor.tickets.model import Ticket, TicketPerson
from src.timeharbor.timeharbor.timelog.model import WorkLogReply
from src.timeharbor.timeharbor.users.model import RefreshToken, User


class Ticker:
    """Strictly increasing timestamps so ordering by creation time is stable."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 0, 0, 0)):
        self._current = start

    def __call__(self) -> datetime:
        self._current += timedelta(seconds=1)
        return self._current


class FakeUsersRepo:
    def __init__(self, ticker: Optional[Ticker] = None):
        self._users: dict[str, User] = {}
        self._ticker = ticker or Ticker()

    def get_by_id(self, user_id):
        return self._users.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self._users.values() if u.email == email), None)

    def get_by_reset_token(self, token):
        return next((u for u in self._users.values() if u.reset_token == token), None)

    def list_by_ids(self, user_ids):
        return [self._users[i] for i in user_ids if i in self._users]

    def create_user(self, *, user_id, email, password_hash, full_name):
        self._users[user_id] = User(
            id=user_id,
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            created_at=self._ticker(),
        )

    def update_profile(self, user_id, *, full_name=None, password_hash=None):
        user = self._users.get(user_id)
        if not user:
            return False
        changes = {}
        if full_name is not None:
            changes["full_name"] = full_name
        if password_hash is not None:
            changes["password_hash"] = password_hash
        self._users[user_id] = replace(user, **changes)
        return True

    def set_status(self, user_id, status):
        if user_id not in self._users:
            return False
        self._users[user_id] = replace(self._users[user_id], status=status)
        return True

    def set_reset_token(self, user_id, *, token, expires_at):
        if user_id not in self._users:
            return False
        self._users[user_id] = replace(self._users[user_id], reset_token=token, reset_token_expiry=expires_at)
        return True

    def set_device_token(self, user_id, *, fcm_token, platform, updated_at):
        if user_id not in self._users:
            return False
        self._users[user_id] = replace(
            self._users[user_id],
            fcm_token=fcm_token,
            fcm_platform=platform,
            fcm_updated_at=updated_at,
        )
        return True


class FakeRefreshTokensRepo:
    def __init__(self):
        self._tokens: dict[str, RefreshToken] = {}

    def create(self, *, user_id, token, expires_at):
        token_id = str(uuid.uuid4())
        self._tokens[token] = RefreshToken(id=token_id, user_id=user_id, token=token, expires_at=expires_at)
        return token_id

    def get_by_token(self, token):
        return self._tokens.get(token)

    def revoke(self, token):
        stored = self._tokens.get(token)
        if not stored:
            return False
        self._tokens[token] = replace(stored, revoked=True)
        return True

    def revoke_all_for_user(self, user_id):
        count = 0
        for token, stored in list(self._tokens.items()):
            if stored.user_id == user_id and not stored.revoked:
                self._tokens[token] = replace(stored, revoked=True)
                count += 1
        return count

    def delete_expired(self, now):
        doomed = [t for t, s in self._tokens.items() if s.revoked or s.expires_at <= now]
        for token in doomed:
            del self._tokens[token]
        return len(doomed)

    def all(self):
        return list(self._tokens.values())


class FakeTeamsRepo:
    def __init__(self, users: FakeUsersRepo, ticker: Optional[Ticker] = None):
        self._users = users
        self._ticker = ticker or Ticker()
        self._teams: dict[str, Team] = {}
        self._members: list[Member] = []

    def create_team(self, *, team_id, name, code, created_by, created_at=None):
        self._teams[team_id] = Team(
            id=team_id,
            name=name,
            code=code,
            created_by=created_by,
            created_at=created_at or self._ticker(),
        )

    def get_by_id(self, team_id):
        return self._teams.get(team_id)

    def get_by_code(self, code):
        return next((t for t in self._teams.values() if t.code == code), None)

    def list_for_user(self, user_id):
        ids = [m.team_id for m in self._members if m.user_id == user_id]
        return [self._teams[i] for i in ids if i in self._teams]

    def update_name(self, team_id, name):
        if team_id not in self._teams:
            return False
        self._teams[team_id] = replace(self._teams[team_id], name=name)
        return True

    def delete(self, team_id):
        self._members = [m for m in self._members if m.team_id != team_id]
        return self._teams.pop(team_id, None) is not None

    def add_member(self, *, team_id, user_id, role):
        member = Member(id=str(uuid.uuid4()), user_id=user_id, team_id=team_id, role=role, joined_at=self._ticker())
        self._members.append(member)
        return member

    def get_member(self, team_id, user_id):
        return next((m for m in self._members if m.team_id == team_id and m.user_id == user_id), None)

    def list_members(self, team_id):
        out = []
        for m in self._members:
            if m.team_id != team_id:
                continue
            user = self._users.get_by_id(m.user_id)
            out.append(
                MemberProfile(
                    user_id=m.user_id,
                    team_id=team_id,
                    full_name=user.full_name if user else None,
                    email=user.email if user else "",
                    status=user.status if user else UserStatus.OFFLINE,
                    role=m.role,
                    joined_at=m.joined_at,
                )
            )
        return out

    def remove_member(self, team_id, user_id):
        before = len(self._members)
        self._members = [m for m in self._members if not (m.team_id == team_id and m.user_id == user_id)]
        return len(self._members) < before

    def set_member_role(self, team_id, user_id, role: MemberRole):
        for i, m in enumerate(self._members):
            if m.team_id == team_id and m.user_id == user_id:
                self._members[i] = replace(m, role=role)
                return True
        return False

    def count_members(self, team_id):
        return sum(1 for m in self._members if m.team_id == team_id)


class FakeTicketsRepo:
    def __init__(self, users: FakeUsersRepo, work_logs: "FakeWorkLogsRepo", ticker: Optional[Ticker] = None):
        self._users = users
        self._work_logs = work_logs
        self._ticker = ticker or Ticker()
        self._rows: dict[str, dict] = {}

    def _person(self, user_id):
        user = self._users.get_by_id(user_id) if user_id else None
        return TicketPerson(id=user.id, full_name=user.full_name, email=user.email) if user else None

    def _to_ticket(self, row: dict) -> Ticket:
        activity = [e.timestamp for e in self._work_logs.all() if e.ticket_id == row["id"]]
        return Ticket(
            **row,
            creator=self._person(row["created_by"]),
            assignee=self._person(row["assigned_to"]),
            last_activity_at=max(activity) if activity else None,
        )

    def create(self, *, ticket_id, team_id, title, description, status, priority, link, created_by, assigned_to):
        now = self._ticker()
        self._rows[ticket_id] = {
            "id": ticket_id,
            "team_id": team_id,
            "title": title,
            "description": description,
            "status": status,
            "priority": priority,
            "link": link,
            "created_by": created_by,
            "assigned_to": assigned_to,
            "created_at": now,
            "updated_at": now,
        }

    def get(self, ticket_id, team_id):
        row = self._rows.get(ticket_id)
        if not row or row["team_id"] != team_id:
            return None
        return self._to_ticket(row)

    def list_for_team(self, team_id, *, status=None, open_only=False, sort_recent=False):
        rows = [r for r in self._rows.values() if r["team_id"] == team_id]
        if open_only:
            rows = [r for r in rows if r["status"] != TicketStatus.CLOSED]
        elif status is not None:
            rows = [r for r in rows if r["status"] == status]

        tickets = [self._to_ticket(r) for r in rows]
        tickets.sort(key=lambda t: t.created_at, reverse=True)
        if sort_recent:
            with_activity = sorted((t for t in tickets if t.last_activity_at), key=lambda t: t.last_activity_at, reverse=True)
            tickets = with_activity + [t for t in tickets if not t.last_activity_at]
        return tickets

    def update(self, ticket_id, *, title, description, status, priority, link, assigned_to):
        row = self._rows.get(ticket_id)
        if not row:
            return False
        row.update(
            title=title,
            description=description,
            status=status,
            priority=priority,
            link=link,
            assigned_to=assigned_to,
            updated_at=self._ticker(),
        )
        return True

    def delete(self, ticket_id):
        return self._rows.pop(ticket_id, None) is not None

    def count_open_assigned(self, user_id, *, team_id=None):
        return sum(
            1
            for r in self._rows.values()
            if r["assigned_to"] == user_id
            and r["status"] != TicketStatus.CLOSED
            and (not team_id or r["team_id"] == team_id)
        )


class FakeWorkLogsRepo:
    def __init__(self):
        self._events = {}

    def all(self):
        return list(self._events.values())

    def upsert_owned(self, user_id, events):
        foreign = sorted({e.id for e in events if e.id in self._events and self._events[e.id].user_id != user_id})
        if not foreign:
            self.upsert_many(events)
        return foreign

    def upsert_many(self, events):
        for e in events:
            self._events[e.id] = e
        return len(events)

    def get(self, event_id):
        return self._events.get(event_id)

    def list_events(self, user_id, *, team_id=None, start=None, end=None):
        out = [
            e
            for e in self._events.values()
            if e.user_id == user_id
            and (not team_id or e.team_id == team_id)
            and (start is None or e.timestamp >= start)
            and (end is None or e.timestamp < end)
        ]
        return sorted(out, key=lambda e: (e.timestamp, e.id))

    def first_timestamp(self, user_id, *, team_id=None):
        stamps = [e.timestamp for e in self.list_events(user_id, team_id=team_id)]
        return min(stamps) if stamps else None

    def user_team_pairs(self):
        return sorted({(e.user_id, e.team_id) for e in self._events.values()}, key=lambda p: (p[0], p[1] or ""))


class FakeRepliesRepo:
    def __init__(self, users: FakeUsersRepo, ticker: Optional[Ticker] = None):
        self._users = users
        self._ticker = ticker or Ticker()
        self._replies: list[WorkLogReply] = []

    def create(self, *, work_log_id, user_id, content):
        user = self._users.get_by_id(user_id)
        reply = WorkLogReply(
            id=str(uuid.uuid4()),
            work_log_id=work_log_id,
            user_id=user_id,
            content=content,
            created_at=self._ticker(),
            author_name=user.display_name if user else None,
        )
        self._replies.append(reply)
        return reply

    def list_for_log(self, work_log_id):
        return [r for r in self._replies if r.work_log_id == work_log_id]


class FakeActivityRepo:
    def __init__(self):
        self._items: dict[str, ActivityLog] = {}

    def list_for_team(self, team_id, *, limit):
        items = [a for a in self._items.values() if a.team_id == team_id]
        items.sort(key=lambda a: a.start_time, reverse=True)
        return items[:limit]

    def upsert(self, activity):
        self._items[activity.activity_id] = activity


class FakeNotificationsRepo:
    def __init__(self, ticker: Optional[Ticker] = None):
        self._ticker = ticker or Ticker()
        self._items: dict[str, Notification] = {}

    def all(self):
        return list(self._items.values())

    def for_user(self, user_id):
        return [n for n in self._items.values() if n.user_id == user_id]

    def create(self, *, user_id, title, body, type, data):
        n = Notification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            body=body,
            type=type,
            data=data,
            created_at=self._ticker(),
        )
        self._items[n.id] = n
        return n

    def list_for_user(self, user_id, *, offset, limit):
        items = sorted(self.for_user(user_id), key=lambda n: (n.created_at, n.id), reverse=True)
        return items[offset : offset + limit]

    def count_for_user(self, user_id):
        return len(self.for_user(user_id))

    def get_for_user(self, notification_id, user_id):
        n = self._items.get(notification_id)
        return n if n and n.user_id == user_id else None

    def mark_read(self, notification_id, user_id, *, read_at):
        n = self.get_for_user(notification_id, user_id)
        if not n:
            return False
        self._items[n.id] = replace(n, read_at=read_at)
        return True

    def mark_all_read(self, user_id, *, read_at):
        count = 0
        for n in self.for_user(user_id):
            if n.read_at is None:
                self._items[n.id] = replace(n, read_at=read_at)
                count += 1
        return count

    def delete(self, notification_id, user_id):
        if not self.get_for_user(notification_id, user_id):
            return False
        del self._items[notification_id]
        return True

    def delete_many(self, notification_ids, user_id):
        return sum(1 for i in notification_ids if self.delete(i, user_id))


class FakeDailyStatsRepo:
    def __init__(self):
        self._rows: dict[tuple, int] = {}

    def replace_from(self, user_id, team_id, since: date, totals):
        for key in [k for k in self._rows if k[0] == user_id and k[1] == team_id and k[2] >= since]:
            del self._rows[key]
        count = 0
        for day, ms in totals.items():
            if day >= since:
                self._rows[(user_id, team_id, day)] = int(ms)
                count += 1
        return count

    def list_range(self, user_id, *, team_id, start, end):
        rows = [
            DailyStat(user_id=u, team_id=t, date=d, total_ms=ms)
            for (u, t, d), ms in self._rows.items()
            if u == user_id and t == team_id and start <= d <= end
        ]
        return sorted(rows, key=lambda s: s.date)


class RecordingPushSender:
    def __init__(self, result: Optional[PushResult] = None):
        self.result = result or PushResult(delivered=True)
        self.sent = []

    def send(self, token, message, *, platform=None):
        self.sent.append((token, message, platform))
        return self.result
