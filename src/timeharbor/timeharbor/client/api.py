"""HTTP client for the Timeharbor API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Session expired. Please sign in again."


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(ApiError):
    def __init__(self):
        super().__init__(401, SESSION_EXPIRED_MESSAGE)


@dataclass
class Tokens:
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user_id: Optional[str] = None

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.user_id = None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP error! status: {response.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP error! status: {response.status_code}"


class TimeharborClient:
    def __init__(
        self,
        base_url: str,
        *,
        tokens: Optional[Tokens] = None,
        timeout: float = 10.0,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.tokens = tokens or Tokens()
        self._http = http or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    def _send(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> httpx.Response:
        headers = {}
        if self.tokens.access_token:
            headers["Authorization"] = f"Bearer {self.tokens.access_token}"
        return self._http.request(method, self._url(path), json=json, params=params, headers=headers)

    def _store_session(self, body: dict) -> None:
        session = body.get("session") or {}
        self.tokens.access_token = session.get("access_token")
        self.tokens.refresh_token = session.get("refresh_token")
        user = body.get("user") or {}
        if user.get("id"):
            self.tokens.user_id = str(user["id"])

    def refresh_session(self) -> bool:
        if not self.tokens.refresh_token:
            return False
        response = self._http.post(self._url("/auth/refresh"), json={"refresh_token": self.tokens.refresh_token})
        if response.status_code != 200:
            logger.info("Refresh rejected with status %s", response.status_code)
            self.tokens.clear()
            return False
        self._store_session(response.json())
        return True

    def raw_request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> httpx.Response:
        """Send a request, refreshing the session once if the access token was rejected."""
        response = self._send(method, path, json=json, params=params)
        if response.status_code == 401 and self.refresh_session():
            response = self._send(method, path, json=json, params=params)
        return response

    def request(self, method: str, path: str, *, json: Any = None, params: Optional[dict] = None) -> Any:
        response = self.raw_request(method, path, json=json, params=params)
        if response.status_code == 401:
            raise SessionExpiredError()
        if response.status_code >= 400:
            raise ApiError(response.status_code, _error_message(response))
        if not response.content:
            return None
        if response.headers.get("content-type", "").startswith("application/json"):
            return response.json()
        return response.text

    def ping(self) -> bool:
        try:
            self._http.head(self._url("/"))
        except httpx.TransportError:
            return False
        return True

    # auth

    def signup(self, email: str, password: str, full_name: Optional[str] = None) -> dict:
        body = self.request("POST", "/auth/signup", json={"email": email, "password": password, "full_name": full_name})
        self._store_session(body)
        return body

    def signin(self, email: str, password: str) -> dict:
        body = self.request("POST", "/auth/signin", json={"email": email, "password": password})
        self._store_session(body)
        return body

    def signout(self) -> None:
        try:
            self.request("POST", "/auth/signout", json={"refresh_token": self.tokens.refresh_token})
        finally:
            self.tokens.clear()

    def me(self) -> dict:
        return self.request("GET", "/auth/me")["user"]

    # teams

    def list_teams(self) -> list:
        return self.request("GET", "/teams")

    def create_team(self, name: str) -> dict:
        return self.request("POST", "/teams", json={"name": name})

    def join_team(self, code: str) -> dict:
        return self.request("POST", "/teams/join", json={"code": code})

    # tickets

    def list_tickets(self, team_id: str, **filters) -> list:
        params = {k: v for k, v in filters.items() if v is not None}
        return self.request("GET", f"/teams/{team_id}/tickets", params=params)

    def create_ticket(self, team_id: str, **fields) -> dict:
        return self.request("POST", f"/teams/{team_id}/tickets", json=fields)

    def update_ticket(self, team_id: str, ticket_id: str, **fields) -> dict:
        return self.request("PUT", f"/teams/{team_id}/tickets/{ticket_id}", json=fields)

    # notifications

    def list_notifications(self, page: int = 1, limit: int = 20) -> dict:
        return self.request("GET", "/notifications", params={"page": page, "limit": limit})

    def mark_notification_read(self, notification_id: str) -> dict:
        return self.request("PATCH", f"/notifications/{notification_id}/read")

    # dashboard

    def dashboard_stats(self, team_id: Optional[str] = None) -> dict:
        params = {"teamId": team_id} if team_id else None
        return self.request("GET", "/dashboard/stats", params=params)

    def dashboard_activity(self, team_id: Optional[str] = None) -> list:
        params = {"teamId": team_id} if team_id else None
        return self.request("GET", "/dashboard/activity", params=params)

    # time

    def sync_time(self, events: list) -> dict:
        return self.request("POST", "/time/sync", json={"events": events})
