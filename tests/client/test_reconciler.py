import pytest

from realtime_client import CacheReconciler, QueryCache, detail_key, list_key, match_events_key, match_stats_key


@pytest.fixture
def cache():
    cache = QueryCache()
    cache.set(
        detail_key("matches", "m1"),
        {"id": "m1", "team1Score": 5, "team2Score": 3, "status": "upcoming", "tournament": "IEM Cologne"},
    )
    cache.set(list_key("matches"), [{"id": "m1"}])
    cache.set(list_key("matches", status="live"), [])
    cache.set(match_events_key("m1"), [{"id": "e1"}])
    cache.set(match_events_key("m2"), [{"id": "e9"}])
    return cache


def test_match_update_patches_in_place_and_marks_lists_stale(cache):
    CacheReconciler(cache).handle(
        {"type": "match_update", "data": {"id": "m1", "team1Score": 6, "status": "live", "currentMap": "Mirage"}}
    )

    match = cache.get(detail_key("matches", "m1"))
    assert match["team1Score"] == 6
    assert match["status"] == "live"
    assert match["currentMap"] == "Mirage"
    assert match["tournament"] == "IEM Cologne"
    assert match["team2Score"] == 3
    assert not cache.is_stale(detail_key("matches", "m1"))
    assert cache.is_stale(list_key("matches"))
    assert cache.is_stale(list_key("matches", status="live"))
    assert not cache.is_stale(match_events_key("m1"))


def test_match_update_ignores_fields_outside_the_patch_set(cache):
    CacheReconciler(cache).handle({"type": "match_update", "data": {"id": "m1", "tournament": "renamed"}})
    assert cache.get(detail_key("matches", "m1"))["tournament"] == "IEM Cologne"


def test_match_update_for_uncached_match_does_not_create_partial_entry(cache):
    CacheReconciler(cache).handle({"type": "match_update", "data": {"id": "m7", "team1Score": 1}})
    assert detail_key("matches", "m7") not in cache
    assert cache.is_stale(list_key("matches"))


@pytest.mark.asyncio
async def test_match_event_forces_refetch_of_that_timeline(cache):
    fetched = []

    async def fetcher(key):
        fetched.append(key)
        return [{"id": "e2"}, {"id": "e1"}]

    CacheReconciler(cache).handle({"type": "match_event", "data": {"id": "e2", "matchId": "m1", "eventType": "kill"}})

    assert cache.is_stale(match_events_key("m1"))
    assert not cache.is_stale(match_events_key("m2"))
    assert await cache.fetch(match_events_key("m1"), fetcher) == [{"id": "e2"}, {"id": "e1"}]
    assert await cache.fetch(match_events_key("m2"), fetcher) == [{"id": "e9"}]
    assert fetched == [match_events_key("m1")]


def test_updated_record_replaces_cached_entry_and_marks_lists(cache):
    cache.set(detail_key("teams", "t1"), {"id": "t1", "name": "NAVI", "wins": 1})
    cache.set(list_key("teams"), [])

    CacheReconciler(cache).handle({"type": "team_updated", "data": {"id": "t1", "name": "NAVI", "wins": 2}})

    assert cache.get(detail_key("teams", "t1"))["wins"] == 2
    assert cache.is_stale(list_key("teams"))


def test_created_record_marks_lists_only(cache):
    cache.set(list_key("news"), [])
    cache.set(list_key("comments", articleId="a1"), [])

    reconciler = CacheReconciler(cache)
    assert reconciler.handle({"type": "news_created", "data": {"id": "n1", "title": "t"}})
    assert reconciler.handle({"type": "comment_created", "data": {"id": "c1", "articleId": "a1"}})

    assert cache.is_stale(list_key("news"))
    assert cache.is_stale(list_key("comments", articleId="a1"))
    assert detail_key("news", "n1") not in cache


def test_deleted_record_is_dropped(cache):
    cache.set(detail_key("players", "p1"), {"id": "p1"})
    cache.set(list_key("players"), [{"id": "p1"}])

    CacheReconciler(cache).handle({"type": "player_deleted", "data": {"id": "p1"}})

    assert detail_key("players", "p1") not in cache
    assert cache.is_stale(list_key("players"))


def test_match_stats_created_marks_stats_stale(cache):
    cache.set(match_stats_key("m1"), [])
    CacheReconciler(cache).handle({"type": "match_stats_created", "data": {"id": "s1", "matchId": "m1"}})
    assert cache.is_stale(match_stats_key("m1"))


@pytest.mark.parametrize(
    "message",
    [
        {"type": "connected", "message": "hi"},
        {"type": "pong"},
        {"type": "create_match_event:ok", "data": {"id": "e1"}},
        {"type": "match_events", "data": []},
        {"type": "something_else"},
        {"data": {}},
    ],
)
def test_non_broadcast_messages_leave_cache_untouched(cache, message):
    assert CacheReconciler(cache).handle(message) is False
    assert not any(cache.is_stale(key) for key in cache.keys())
