"""CS2Stats client SDK: query cache, broadcast reconciler, realtime channel and REST client."""
from .api import APIError, EsportsApiClient
from .cache import QueryCache, detail_key, list_key, match_events_key, match_stats_key
from .connection import RECONNECT_DELAY_S, RealtimeClient
from .reconciler import CacheReconciler

__all__ = [
    "APIError",
    "EsportsApiClient",
    "QueryCache",
    "CacheReconciler",
    "RealtimeClient",
    "RECONNECT_DELAY_S",
    "detail_key",
    "list_key",
    "match_events_key",
    "match_stats_key",
]
