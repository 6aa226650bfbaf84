from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import DevicePlatform, UserStatus
from .model import RefreshToken, User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_reset_token(self, token: str) -> Optional[User]:
        raise NotImplementedError

    def list_by_ids(self, user_ids: Sequence[str]) -> Sequence[User]:
        raise NotImplementedError

    def create_user(self, *, user_id: str, email: str, password_hash: str, full_name: Optional[str]) -> None:
        raise NotImplementedError

    def update_profile(
        self,
        user_id: str,
        *,
        full_name: Optional[str] = None,
        password_hash: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def set_status(self, user_id: str, status: UserStatus) -> bool:
        raise NotImplementedError

    def set_reset_token(self, user_id: str, *, token: Optional[str], expires_at: Optional[datetime]) -> bool:
        raise NotImplementedError

    def set_device_token(
        self,
        user_id: str,
        *,
        fcm_token: Optional[str],
        platform: Optional[DevicePlatform],
        updated_at: Optional[datetime],
    ) -> bool:
        raise NotImplementedError


class RefreshTokenRepository(Protocol):
    def create(self, *, user_id: str, token: str, expires_at: datetime) -> str:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[RefreshToken]:
        raise NotImplementedError

    def revoke(self, token: str) -> bool:
        raise NotImplementedError

    def revoke_all_for_user(self, user_id: str) -> int:
        raise NotImplementedError

    def delete_expired(self, now: datetime) -> int:
        raise NotImplementedError
