from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from .model import Notification


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        user_id: str,
        title: str,
        body: str,
        type: str,
        data: Optional[Dict[str, Any]],
    ) -> Notification:
        raise NotImplementedError

    def list_for_user(self, user_id: str, *, offset: int, limit: int) -> Sequence[Notification]:
        raise NotImplementedError

    def count_for_user(self, user_id: str) -> int:
        raise NotImplementedError

    def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        raise NotImplementedError

    def mark_read(self, notification_id: str, user_id: str, *, read_at: datetime) -> bool:
        raise NotImplementedError

    def mark_all_read(self, user_id: str, *, read_at: datetime) -> int:
        raise NotImplementedError

    def delete(self, notification_id: str, user_id: str) -> bool:
        raise NotImplementedError

    def delete_many(self, notification_ids: Sequence[str], user_id: str) -> int:
        raise NotImplementedError
