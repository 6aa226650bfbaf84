from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import to_iso
from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    id: str
    user_id: str
    title: str
    body: str
    type: str = NotificationType.INFO.value
    data: Optional[Dict[str, Any]] = None
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "body": self.body,
            "type": self.type,
            "data": self.data or {},
            "read_at": to_iso(self.read_at),
            "created_at": to_iso(self.created_at),
        }


@dataclass(frozen=True)
class PushMessage:
    """Payload for one push notification (also persisted in-app)."""

    title: str
    body: str
    type: NotificationType = NotificationType.INFO
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PushResult:
    delivered: bool
    invalid_token: bool = False
    error: Optional[str] = None
