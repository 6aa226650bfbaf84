from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import (
    normalize_email,
    optional_full_name,
    parse_enum,
    require_non_empty,
    require_strong_password,
    text_field,
)
from ..core.constants import DEFAULT_REFRESH_TOKEN_DAYS, DEFAULT_RESET_TOKEN_MINUTES
from ..core.enums import DevicePlatform, UserStatus
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import User
from .repository import RefreshTokenRepository, UserRepository
from .tokens import AccessTokenSigner

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email is already registered. Please sign in instead."
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


@dataclass(frozen=True)
class Session:
    access_token: str
    refresh_token: str
    expires_in: int

    def to_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
        }


@dataclass(frozen=True)
class AuthResult:
    user: User
    session: Session

    def to_dict(self) -> dict:
        return {"user": self.user.to_public_dict(), "session": self.session.to_dict()}


class AuthService:
    """Use cases: sign up, sign in, token refresh, password reset and device registration."""

    def __init__(
        self,
        users: UserRepository,
        refresh_tokens: RefreshTokenRepository,
        signer: AccessTokenSigner,
        *,
        refresh_token_days: int = DEFAULT_REFRESH_TOKEN_DAYS,
        reset_token_minutes: int = DEFAULT_RESET_TOKEN_MINUTES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._refresh_tokens = refresh_tokens
        self._signer = signer
        self._refresh_token_days = int(refresh_token_days)
        self._reset_token_minutes = int(reset_token_minutes)
        self._clock = clock

    @staticmethod
    def _password_matches(user: User, password: str) -> bool:
        try:
            return check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            return False

    def _issue_session(self, user: User) -> Session:
        refresh_token = secrets.token_urlsafe(48)
        self._refresh_tokens.create(
            user_id=user.id,
            token=refresh_token,
            expires_at=self._clock() + timedelta(days=self._refresh_token_days),
        )
        return Session(
            access_token=self._signer.issue(user_id=user.id, email=user.email),
            refresh_token=refresh_token,
            expires_in=self._signer.ttl_seconds,
        )

    def signup(self, *, email: str, password: str, full_name: Optional[str] = None) -> AuthResult:
        email = normalize_email(email)
        password = require_strong_password(password)
        full_name = optional_full_name(full_name)

        if self._users.get_by_email(email):
            raise ValidationError(DUPLICATE_EMAIL_MESSAGE)

        user_id = str(uuid.uuid4())
        self._users.create_user(
            user_id=user_id,
            email=email,
            password_hash=generate_password_hash(password),
            full_name=full_name,
        )
        self._users.set_status(user_id, UserStatus.ONLINE)
        user = self._users.get_by_id(user_id)
        logger.info("User signed up: %s", user_id)
        return AuthResult(user=user, session=self._issue_session(user))

    def signin(self, *, email: str, password: str) -> AuthResult:
        email = text_field(email, "Email").strip().lower()
        password = text_field(password, "Password")
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self._users.get_by_email(email)
        if not user or not self._password_matches(user, password):
            raise ValidationError(INVALID_CREDENTIALS_MESSAGE)

        self._users.set_status(user.id, UserStatus.ONLINE)
        user = self._users.get_by_id(user.id) or user
        return AuthResult(user=user, session=self._issue_session(user))

    def refresh(self, *, refresh_token: str) -> AuthResult:
        refresh_token = require_non_empty(refresh_token, "Refresh token")
        stored = self._refresh_tokens.get_by_token(refresh_token)
        if not stored or not stored.is_usable(self._clock()):
            raise AuthenticationError("Invalid or expired refresh token")

        user = self._users.get_by_id(stored.user_id)
        if not user:
            raise AuthenticationError("User not found")

        # Rotation: a refresh token can only be used once.
        self._refresh_tokens.revoke(refresh_token)
        return AuthResult(user=user, session=self._issue_session(user))

    def signout(self, *, user_id: str, refresh_token: Optional[str] = None) -> None:
        if refresh_token:
            self._refresh_tokens.revoke(refresh_token)
        self._users.set_status(user_id, UserStatus.OFFLINE)

    def authenticate_token(self, token: Optional[str]) -> User:
        if not token:
            raise AuthenticationError("Access token required")
        claims = self._signer.verify(token)
        user = self._users.get_by_id(claims.user_id)
        if not user:
            raise AuthenticationError("User not found")
        return user

    def forgot_password(self, *, email: str) -> Optional[str]:
        """Create a reset token for ``email``.

        Returns the token (None for unknown emails); callers must not reveal which.
        """
        email = text_field(email, "Email").strip().lower()
        user = self._users.get_by_email(email) if email else None
        if not user:
            return None

        token = secrets.token_hex(32)
        self._users.set_reset_token(
            user.id,
            token=token,
            expires_at=self._clock() + timedelta(minutes=self._reset_token_minutes),
        )
        logger.info("Password reset requested for user %s", user.id)
        return token

    def reset_password(self, *, token: str, password: str) -> None:
        token = require_non_empty(token, "Reset token")
        password = require_strong_password(password)

        user = self._users.get_by_reset_token(token)
        if not user or not user.reset_token_expiry or user.reset_token_expiry < self._clock():
            raise ValidationError("Invalid or expired reset token")

        self._users.update_profile(user.id, password_hash=generate_password_hash(password))
        self._users.set_reset_token(user.id, token=None, expires_at=None)
        self._refresh_tokens.revoke_all_for_user(user.id)

    def get_profile(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, *, full_name: Optional[str] = None, password: Optional[str] = None) -> User:
        full_name = optional_full_name(full_name)
        password_hash = generate_password_hash(require_strong_password(password)) if password is not None else None
        if full_name is None and password_hash is None:
            raise ValidationError("Nothing to update")

        self._users.update_profile(user_id, full_name=full_name, password_hash=password_hash)
        return self.get_profile(user_id)

    def register_device(self, user_id: str, *, fcm_token: str, platform: str) -> None:
        fcm_token = require_non_empty(fcm_token, "FCM token")
        device_platform = parse_enum(DevicePlatform, (platform or "").lower(), "platform")
        self._users.set_device_token(user_id, fcm_token=fcm_token, platform=device_platform, updated_at=self._clock())

    def cleanup_expired_tokens(self, now: Optional[datetime] = None) -> int:
        deleted = self._refresh_tokens.delete_expired(now or self._clock())
        logger.info("Deleted %d expired refresh tokens", deleted)
        return deleted
