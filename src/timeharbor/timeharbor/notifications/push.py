from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from ..core.enums import DevicePlatform
from .model import PushMessage, PushResult

logger = logging.getLogger(__name__)

FCM_ENDPOINT = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"
_INVALID_TOKEN_CODES = {"UNREGISTERED", "INVALID_ARGUMENT", "NOT_FOUND"}


class PushSender(Protocol):
    """Delivers one push message to one device token."""

    def send(self, token: str, message: PushMessage, *, platform: Optional[DevicePlatform] = None) -> PushResult:
        raise NotImplementedError


class LoggingPushSender(PushSender):
    """Used when push is not configured; messages are only logged."""

    def send(self, token: str, message: PushMessage, *, platform: Optional[DevicePlatform] = None) -> PushResult:
        logger.info("Push disabled, skipping %s notification: %s", message.type.value, message.title)
        return PushResult(delivered=False, error="push disabled")


def build_fcm_message(token: str, message: PushMessage) -> dict:
    # FCM data values must be strings.
    data = {str(k): "" if v is None else str(v) for k, v in message.data.items()}
    data["type"] = message.type.value
    return {
        "message": {
            "token": token,
            "notification": {"title": message.title, "body": message.body},
            "data": data,
            "apns": {"payload": {"aps": {"sound": "default", "badge": 1}}},
            "android": {"priority": "high", "notification": {"sound": "default"}},
        }
    }


def _json_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_code(response: httpx.Response) -> Optional[str]:
    error = _json_body(response).get("error")
    if not isinstance(error, dict):
        return str(error) if error else None
    for detail in error.get("details") or []:
        code = detail.get("errorCode") if isinstance(detail, dict) else None
        if code:
            return str(code)
    return error.get("status")


class FcmPushSender(PushSender):
    """Firebase Cloud Messaging HTTP v1 sender."""

    def __init__(
        self,
        *,
        project_id: str,
        access_token: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._url = FCM_ENDPOINT.format(project_id=project_id)
        self._access_token = access_token
        self._client = client or httpx.Client(timeout=timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._access_token}",
        }

    def send(self, token: str, message: PushMessage, *, platform: Optional[DevicePlatform] = None) -> PushResult:
        try:
            r = self._client.post(self._url, headers=self._headers(), json=build_fcm_message(token, message))
        except httpx.HTTPError as e:
            logger.error("FCM request failed: %s", e)
            return PushResult(delivered=False, error=str(e))

        if r.is_success:
            logger.debug("FCM message sent: %s", _json_body(r).get("name"))
            return PushResult(delivered=True)

        code = _error_code(r)
        logger.warning("FCM send failed: %s %s", r.status_code, code)
        return PushResult(
            delivered=False,
            invalid_token=r.status_code == 404 or code in _INVALID_TOKEN_CODES,
            error=code or str(r.status_code),
        )
