import asyncio
import json

import pytest

from realtime_client import CacheReconciler, QueryCache, RealtimeClient, detail_key


class FakeChannel:
    """Yields queued frames; stays open until closed when ``hold_open`` is set."""

    def __init__(self, frames=(), hold_open=False):
        self._frames = list(frames)
        self._hold_open = hold_open
        self._closed = asyncio.Event()
        self.sent = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._frames:
            return self._frames.pop(0)
        if self._hold_open:
            await self._closed.wait()
        raise StopAsyncIteration

    async def send(self, data):
        self.sent.append(json.loads(data))

    async def close(self):
        self._closed.set()


class FakeConnector:
    def __init__(self, *channels):
        self._channels = list(channels)
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        if self._channels:
            return self._channels.pop(0)
        return FakeChannel(hold_open=True)


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


def _client(connector, **kwargs):
    return RealtimeClient("ws://test/ws", CacheReconciler(QueryCache()), connect=connector, **kwargs)


@pytest.mark.asyncio
async def test_close_schedules_exactly_one_reconnect_at_fixed_delay():
    connector = FakeConnector(FakeChannel())
    client = _client(connector)
    client.mount()
    await _settle()

    handle = client.pending_reconnect
    assert handle is not None
    loop = asyncio.get_running_loop()
    assert handle.when() - loop.time() == pytest.approx(3.0, abs=0.1)
    assert len(connector.urls) == 1

    await client.unmount()


@pytest.mark.asyncio
async def test_reconnect_fires_once_and_clears_timer_on_open():
    connector = FakeConnector(FakeChannel())
    client = _client(connector, reconnect_delay=0.01)
    client.mount()
    await _settle()
    await asyncio.sleep(0.05)
    await _settle()

    assert len(connector.urls) == 2
    assert client.connected
    assert client.pending_reconnect is None

    await client.unmount()


@pytest.mark.asyncio
async def test_unmount_cancels_pending_reconnect():
    connector = FakeConnector(FakeChannel())
    client = _client(connector, reconnect_delay=0.02)
    client.mount()
    await _settle()
    assert client.pending_reconnect is not None

    await client.unmount()
    await asyncio.sleep(0.05)

    assert client.pending_reconnect is None
    assert len(connector.urls) == 1


@pytest.mark.asyncio
async def test_messages_are_dispatched_to_reconciler_and_pings_answered():
    frames = [
        json.dumps({"type": "connected", "message": "Welcome to CS2Stats WebSocket"}),
        "not json",
        json.dumps({"type": "ping"}),
        json.dumps({"type": "match_update", "data": {"id": "m1", "team1Score": 9}}),
    ]
    channel = FakeChannel(frames, hold_open=True)
    client = _client(FakeConnector(channel))
    client.reconciler.cache.set(detail_key("matches", "m1"), {"id": "m1", "team1Score": 8, "stage": "Final"})

    client.mount()
    await _settle()

    assert client.reconciler.cache.get(detail_key("matches", "m1")) == {"id": "m1", "team1Score": 9, "stage": "Final"}
    assert channel.sent == [{"type": "pong"}]

    await client.send({"type": "get_match_events", "matchId": "m1"})
    assert channel.sent[-1] == {"type": "get_match_events", "matchId": "m1"}

    await client.unmount()
    assert client.pending_reconnect is None


@pytest.mark.asyncio
async def test_connection_error_is_logged_and_retried():
    class Refused:
        async def __aenter__(self):
            raise OSError("connection refused")

        async def __aexit__(self, *exc):
            return False

    client = _client(FakeConnector(Refused()))
    client.mount()
    await _settle()

    assert not client.connected
    assert client.pending_reconnect is not None
    await client.unmount()


@pytest.mark.asyncio
async def test_connect_timeout_still_schedules_reconnect():
    class TimesOut:
        async def __aenter__(self):
            raise asyncio.TimeoutError()

        async def __aexit__(self, *exc):
            return False

    client = _client(FakeConnector(TimesOut()))
    client.mount()
    await _settle()

    assert not client.connected
    assert client.pending_reconnect is not None
    await client.unmount()


@pytest.mark.asyncio
async def test_undecodable_frame_keeps_channel_and_reconnect_alive():
    nested = "[" * 100000 + "]" * 100000
    frames = [nested, json.dumps({"type": "ping"})]
    channel = FakeChannel(frames)
    client = _client(FakeConnector(channel))
    client.mount()
    await _settle()

    assert channel.sent == [{"type": "pong"}]
    assert client.pending_reconnect is not None
    await client.unmount()


@pytest.mark.asyncio
async def test_unexpected_handler_error_still_schedules_reconnect():
    class Exploding(CacheReconciler):
        def handle(self, message):
            raise KeyError("boom")

    channel = FakeChannel([json.dumps({"type": "match_update", "data": {"id": "m1"}})], hold_open=True)
    client = RealtimeClient("ws://test/ws", Exploding(QueryCache()), connect=FakeConnector(channel))
    client.mount()
    await _settle()

    assert not client.connected
    assert client.pending_reconnect is not None
    await client.unmount()


@pytest.mark.asyncio
async def test_send_without_open_channel_raises():
    client = _client(FakeConnector())
    with pytest.raises(ConnectionError):
        await client.send({"type": "ping"})
