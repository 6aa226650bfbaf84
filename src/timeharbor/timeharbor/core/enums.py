from __future__ import annotations

from enum import Enum


class UserStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class DevicePlatform(str, Enum):
    IOS = "ios"
    ANDROID = "android"


class MemberRole(str, Enum):
    """Role of a user inside one team."""

    LEADER = "Leader"
    MEMBER = "Member"


class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"


class TicketPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class WorkLogType(str, Enum):
    """Event types recorded by the clock and ticket timers."""

    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    START_TICKET = "START_TICKET"
    STOP_TICKET = "STOP_TICKET"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"


class NotificationType(str, Enum):
    INFO = "info"
    TICKET_ASSIGNED = "ticket_assigned"
    TEAM_INVITATION = "team_invitation"
    NEW_TEAM_MEMBER = "new_team_member"
    TICKET_STATUS = "ticket_status"
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    WORKLOG_REPLY = "worklog_reply"
