from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import DevicePlatform, UserStatus


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object (no DB access code).
    """

    id: str
    email: str
    password_hash: str
    full_name: Optional[str]
    status: UserStatus = UserStatus.OFFLINE
    email_verified: bool = False
    reset_token: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None
    fcm_token: Optional[str] = None
    fcm_platform: Optional[DevicePlatform] = None
    fcm_updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    def to_public_dict(self) -> dict:
        # Never expose hashes or device/reset tokens.
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "status": self.status.value,
            "email_verified": self.email_verified,
            "created_at": to_iso(self.created_at),
        }

    def to_brief_dict(self) -> dict:
        return {"id": self.id, "full_name": self.full_name, "email": self.email}


@dataclass(frozen=True)
class RefreshToken:
    id: str
    user_id: str
    token: str
    expires_at: datetime
    revoked: bool = False
    created_at: Optional[datetime] = None

    def is_usable(self, now: datetime) -> bool:
        return not self.revoked and self.expires_at > now
