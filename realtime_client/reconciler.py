"""Apply server broadcasts to the client query cache.

``match_update`` patches the cached match in place and marks match lists
stale. ``match_event`` marks that match's timeline stale; timelines are
append-only and always re-fetched. The remaining CRUD broadcasts fall back
to one generic rule per verb so no record type is left unreconciled.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import structlog

from .cache import QueryCache, detail_key, list_key, match_events_key, match_stats_key

logger = structlog.get_logger(__name__)

# envelope entity prefix -> cache entity name
ENTITY_CACHE_NAMES: Dict[str, str] = {
    "team": "teams",
    "player": "players",
    "match": "matches",
    "news": "news",
    "comment": "comments",
    "favorite": "favorites",
}

MATCH_PATCH_FIELDS = ("team1Score", "team2Score", "status", "currentMap", "startedAt", "finishedAt")

_IGNORED_TYPES = {"connected", "ping", "pong"}


class CacheReconciler:
    def __init__(self, cache: QueryCache) -> None:
        self.cache = cache

    def handle(self, message: Mapping[str, Any]) -> bool:
        """Reconcile one decoded envelope; returns whether the cache was touched."""
        mtype = message.get("type")
        if not isinstance(mtype, str) or mtype in _IGNORED_TYPES:
            return False
        data = message.get("data")

        if mtype == "match_update":
            return self._on_match_update(data)
        if mtype == "match_event":
            return self._on_match_event(data)
        if mtype == "match_stats_created":
            match_id = _field(data, "matchId")
            if not match_id:
                return False
            self.cache.invalidate(match_stats_key(match_id), exact=True)
            return True

        entity, _, verb = mtype.rpartition("_")
        name = ENTITY_CACHE_NAMES.get(entity)
        if name is None or verb not in ("created", "updated", "deleted"):
            logger.debug("realtime_client_message_unhandled", type=mtype)
            return False
        record_id = _field(data, "id")
        if verb == "updated" and record_id and isinstance(data, dict):
            if detail_key(name, record_id) in self.cache:
                self.cache.set(detail_key(name, record_id), dict(data))
        elif verb == "deleted" and record_id:
            self.cache.remove(detail_key(name, record_id))
            if name == "matches":
                self.cache.invalidate(detail_key(name, record_id))
        self.cache.invalidate(list_key(name))
        return True

    def _on_match_update(self, data: Any) -> bool:
        match_id = _field(data, "id")
        if not match_id:
            return False
        changes = {k: data[k] for k in MATCH_PATCH_FIELDS if k in data}
        self.cache.patch(detail_key("matches", match_id), changes)
        self.cache.invalidate(list_key("matches"))
        return True

    def _on_match_event(self, data: Any) -> bool:
        match_id = _field(data, "matchId")
        if not match_id:
            return False
        self.cache.invalidate(match_events_key(match_id), exact=True)
        return True


def _field(data: Any, name: str) -> Optional[str]:
    if isinstance(data, dict):
        value = data.get(name)
        return str(value) if value else None
    return None
