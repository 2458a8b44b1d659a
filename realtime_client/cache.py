"""Client-side query cache.

Entries are keyed by tuples built with :func:`list_key` / :func:`detail_key`
so a prefix such as ``("matches", "list")`` addresses every list variant of
an entity at once. Entries are never dropped when they go stale; the next
``fetch`` re-reads them through the configured fetcher.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional, Tuple

QueryKey = Tuple[str, ...]
Fetcher = Callable[[QueryKey], Awaitable[Any]]


def list_key(entity: str, **filters: Any) -> QueryKey:
    parts = [f"{name}={value}" for name, value in sorted(filters.items()) if value is not None]
    return (entity, "list", *parts)


def detail_key(entity: str, entity_id: str, *sub: str) -> QueryKey:
    return (entity, "detail", str(entity_id), *sub)


def match_events_key(match_id: str) -> QueryKey:
    return detail_key("matches", match_id, "events")


def match_stats_key(match_id: str) -> QueryKey:
    return detail_key("matches", match_id, "stats")


@dataclass
class CacheEntry:
    data: Any
    stale: bool = False
    updated_at: float = field(default_factory=time.monotonic)


class QueryCache:
    def __init__(self, fetcher: Optional[Fetcher] = None) -> None:
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._fetcher = fetcher

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> Iterator[QueryKey]:
        return iter(list(self._entries))

    def get(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def set(self, key: QueryKey, data: Any) -> None:
        self._entries[key] = CacheEntry(data=data)

    def is_stale(self, key: QueryKey) -> bool:
        """Missing entries count as stale."""
        entry = self._entries.get(key)
        return entry is None or entry.stale

    def patch(self, key: QueryKey, changes: Dict[str, Any]) -> bool:
        """Merge ``changes`` into a cached dict record; other fields are kept."""
        entry = self._entries.get(key)
        if entry is None or not isinstance(entry.data, dict):
            return False
        entry.data.update(changes)
        entry.updated_at = time.monotonic()
        return True

    def invalidate(self, prefix: QueryKey, *, exact: bool = False) -> int:
        """Mark matching entries stale and return how many were marked."""
        marked = 0
        for key, entry in self._entries.items():
            if key == prefix or (not exact and key[: len(prefix)] == prefix):
                entry.stale = True
                marked += 1
        return marked

    def remove(self, key: QueryKey) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    async def fetch(self, key: QueryKey, fetcher: Optional[Fetcher] = None) -> Any:
        """Serve fresh entries from memory, re-read missing or stale ones."""
        entry = self._entries.get(key)
        if entry is not None and not entry.stale:
            return entry.data
        loader = fetcher or self._fetcher
        if loader is None:
            raise LookupError(f"no fetcher configured for {key!r}")
        data = await loader(key)
        self.set(key, data)
        return data
