from __future__ import annotations

from dataclasses import dataclass

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..core.exceptions import AuthenticationError


@dataclass(frozen=True)
class AccessClaims:
    user_id: str
    email: str


class AccessTokenSigner:
    """Signs short-lived bearer tokens carrying the user id and email."""

    def __init__(self, secret_key: str, *, ttl_seconds: int):
        self._serializer = URLSafeTimedSerializer(secret_key, salt="access")
        self._ttl_seconds = int(ttl_seconds)

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, *, user_id: str, email: str) -> str:
        return self._serializer.dumps({"id": user_id, "email": email})

    def verify(self, token: str) -> AccessClaims:
        try:
            payload = self._serializer.loads(token, max_age=self._ttl_seconds)
        except SignatureExpired:
            raise AuthenticationError("Token expired")
        except BadSignature:
            raise AuthenticationError("Invalid token")

        if not isinstance(payload, dict) or not payload.get("id"):
            raise AuthenticationError("Invalid token")
        return AccessClaims(user_id=str(payload["id"]), email=str(payload.get("email", "")))
