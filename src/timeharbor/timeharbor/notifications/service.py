from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import is_uuid
from ..core.constants import DEFAULT_NOTIFICATION_PAGE_SIZE
from ..core.enums import NotificationType
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Notification, PushMessage
from .push import PushSender
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationPage:
    notifications: Sequence[Notification]
    total: int
    page: int
    total_pages: int

    def to_dict(self) -> dict:
        return {
            "notifications": [n.to_dict() for n in self.notifications],
            "total": self.total,
            "page": self.page,
            "totalPages": self.total_pages,
        }


class NotificationService:
    """Stores in-app notifications and pushes them to the user's registered device."""

    def __init__(
        self,
        notifications: NotificationRepository,
        users: UserRepository,
        sender: PushSender,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._notifications = notifications
        self._users = users
        self._sender = sender
        self._clock = clock

    # -------- Sending --------
    def notify_user(self, user_id: str, message: PushMessage) -> bool:
        self._notifications.create(
            user_id=user_id,
            title=message.title,
            body=message.body,
            type=message.type.value,
            data=dict(message.data) or None,
        )

        user = self._users.get_by_id(user_id)
        if not user or not user.fcm_token:
            logger.debug("No device token for user %s, stored notification only", user_id)
            return False

        # Push is best effort; the caller's writes are already committed.
        try:
            result = self._sender.send(user.fcm_token, message, platform=user.fcm_platform)
        except Exception:
            logger.exception("Push to user %s failed", user_id)
            return False
        if result.invalid_token:
            logger.info("Clearing invalid device token for user %s", user_id)
            self._users.set_device_token(user_id, fcm_token=None, platform=None, updated_at=None)
        return result.delivered

    def notify_users(self, user_ids: Sequence[str], message: PushMessage) -> Dict[str, int]:
        success = 0
        failed = 0
        for user_id in dict.fromkeys(user_ids):
            if self.notify_user(user_id, message):
                success += 1
            else:
                failed += 1
        return {"success": success, "failed": failed}

    def ticket_assigned(self, *, assignee_id: str, ticket_id: str, ticket_title: str, team_id: str) -> bool:
        return self.notify_user(
            assignee_id,
            PushMessage(
                title="New Ticket Assigned",
                body=f"You've been assigned: {ticket_title}",
                type=NotificationType.TICKET_ASSIGNED,
                data={"ticketId": ticket_id, "teamId": team_id},
            ),
        )

    def team_invitation(self, *, user_id: str, team_id: str, team_name: str) -> bool:
        return self.notify_user(
            user_id,
            PushMessage(
                title="Team Invitation",
                body=f"You've been added to {team_name}",
                type=NotificationType.TEAM_INVITATION,
                data={"teamId": team_id},
            ),
        )

    def new_team_member(self, *, leader_ids: Sequence[str], team_id: str, team_name: str, member_name: str) -> Dict[str, int]:
        return self.notify_users(
            leader_ids,
            PushMessage(
                title="New Team Member",
                body=f"{member_name} joined {team_name}",
                type=NotificationType.NEW_TEAM_MEMBER,
                data={"teamId": team_id},
            ),
        )

    def ticket_status_changed(self, *, user_id: str, ticket_id: str, ticket_title: str, status: str, team_id: str) -> bool:
        return self.notify_user(
            user_id,
            PushMessage(
                title="Ticket Status Updated",
                body=f"{ticket_title} is now {status}",
                type=NotificationType.TICKET_STATUS,
                data={"ticketId": ticket_id, "teamId": team_id, "status": status},
            ),
        )

    def clock_event(
        self,
        *,
        leader_ids: Sequence[str],
        clocked_in: bool,
        member_id: str,
        member_name: str,
        team_id: str,
        team_name: str,
    ) -> Dict[str, int]:
        if clocked_in:
            message = PushMessage(
                title="Team Member Clocked In",
                body=f"{member_name} clocked in to {team_name}",
                type=NotificationType.CLOCK_IN,
                data={"teamId": team_id, "memberId": member_id},
            )
        else:
            message = PushMessage(
                title="Team Member Clocked Out",
                body=f"{member_name} clocked out from {team_name}",
                type=NotificationType.CLOCK_OUT,
                data={"teamId": team_id, "memberId": member_id},
            )
        return self.notify_users(leader_ids, message)

    def worklog_reply(self, *, owner_id: str, author_name: str, work_log_id: str, content: str) -> bool:
        preview = content if len(content) <= 80 else content[:77] + "..."
        return self.notify_user(
            owner_id,
            PushMessage(
                title="New Reply",
                body=f"{author_name}: {preview}",
                type=NotificationType.WORKLOG_REPLY,
                data={"workLogId": work_log_id},
            ),
        )

    # -------- In-app inbox --------
    def list_page(self, user_id: str, *, page: int = 1, limit: int = DEFAULT_NOTIFICATION_PAGE_SIZE) -> NotificationPage:
        page = max(int(page), 1)
        limit = max(int(limit), 1)
        total = self._notifications.count_for_user(user_id)
        items = self._notifications.list_for_user(user_id, offset=(page - 1) * limit, limit=limit)
        total_pages = (total + limit - 1) // limit
        return NotificationPage(notifications=items, total=total, page=page, total_pages=total_pages)

    @staticmethod
    def _require_id(notification_id: str) -> str:
        if not is_uuid(notification_id):
            raise ValidationError("Invalid Notification ID")
        return str(notification_id)

    def mark_read(self, user_id: str, notification_id: str) -> Notification:
        notification_id = self._require_id(notification_id)
        if not self._notifications.get_for_user(notification_id, user_id):
            raise NotFoundError("Notification not found")
        self._notifications.mark_read(notification_id, user_id, read_at=self._clock())
        return self._notifications.get_for_user(notification_id, user_id)

    def mark_all_read(self, user_id: str) -> int:
        return self._notifications.mark_all_read(user_id, read_at=self._clock())

    def delete(self, user_id: str, notification_id: str) -> None:
        notification_id = self._require_id(notification_id)
        if not self._notifications.delete(notification_id, user_id):
            raise NotFoundError("Notification not found")

    def delete_many(self, user_id: str, notification_ids: Any) -> int:
        if not isinstance(notification_ids, list) or not notification_ids:
            raise ValidationError("ids must be a non-empty array")
        ids = [self._require_id(i) for i in notification_ids]
        return self._notifications.delete_many(ids, user_id)
