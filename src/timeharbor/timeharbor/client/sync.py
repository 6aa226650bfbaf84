"""Replays offline work against the API once the network is back."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from .api import ApiError, SessionExpiredError, TimeharborClient
from .offline_store import OfflineStore

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    mutations_synced: int = 0
    events_synced: int = 0
    session_expired: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.session_expired


class SyncManager:
    def __init__(
        self,
        client: TimeharborClient,
        store: OfflineStore,
        *,
        is_online: Optional[Callable[[], bool]] = None,
    ) -> None:
        self._client = client
        self._store = store
        self._is_online = is_online or client.ping

    def is_online(self) -> bool:
        return bool(self._is_online())

    def add_mutation(self, url: str, method: str, body: Any = None, *, temp_id: Optional[str] = None) -> int:
        mutation_id = self._store.add_mutation(url, method, body, temp_id=temp_id)
        if self.is_online():
            self.sync()
        return mutation_id

    def sync(self) -> SyncResult:
        result = SyncResult()
        self._replay_mutations(result)
        if result.ok:
            self._push_events(result)
        return result

    def _replay_mutations(self, result: SyncResult) -> None:
        mutations = self._store.list_mutations()
        if not mutations:
            return
        logger.info("Found %d offline mutations to sync", len(mutations))

        # Strictly in insertion order; the first failure stops the run.
        for m in mutations:
            try:
                self._client.request(m.method, m.url, json=m.body)
            except SessionExpiredError:
                logger.info("Session expired, clearing offline mutations")
                self._store.clear_mutations()
                result.session_expired = True
                return
            except (ApiError, httpx.TransportError) as e:
                logger.warning("Failed to sync mutation %s: %s", m.id, e)
                self._store.increment_retry(m.id)
                result.error = str(e)
                return
            self._store.delete_mutation(m.id)
            result.mutations_synced += 1

    def _push_events(self, result: SyncResult) -> None:
        # Events are attributed to whoever holds the token, so only that user's are sent.
        user_id = self._client.tokens.user_id
        if not user_id:
            logger.debug("No signed-in user, leaving time events unsynced")
            return
        pending = self._store.list_events(user_id=user_id, unsynced_only=True)
        if not pending:
            return
        try:
            self._client.sync_time([e.to_sync_dict() for e in pending])
        except SessionExpiredError:
            result.session_expired = True
            return
        except (ApiError, httpx.TransportError) as e:
            logger.warning("Failed to sync %d time events: %s", len(pending), e)
            result.error = str(e)
            return
        self._store.mark_events_synced([e.id for e in pending])
        result.events_synced = len(pending)

    def cached(self, key: str, fetch: Callable[[], Any]) -> Any:
        """Fetch fresh data and cache it; on network or server failure return the last cached copy."""
        try:
            data = fetch()
        except (ApiError, httpx.TransportError) as e:
            cached = self._store.cache_get(key)
            if cached is None:
                raise
            logger.info("Serving %s from offline cache (%s)", key, e)
            return cached
        self._store.cache_put(key, data)
        return data

    def teams(self) -> list:
        return self.cached("teams", self._client.list_teams)

    def tickets(self, team_id: str) -> list:
        return self.cached(f"tickets:{team_id}", lambda: self._client.list_tickets(team_id))

    def dashboard_stats(self, team_id: Optional[str] = None) -> dict:
        return self.cached(f"dashboard_stats:{team_id or 'all'}", lambda: self._client.dashboard_stats(team_id))
