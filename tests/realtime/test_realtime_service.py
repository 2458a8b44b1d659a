import asyncio
import json
from datetime import datetime, timezone

import pytest

from application.dto import MatchEventCreateDTO, MatchEventDTO
from application.ports.realtime import deleted
from application.services.realtime_service import RealtimeService
from domain.common.exceptions import MatchNotFoundException
from domain.user.entity import User, UserRole
from infrastructure.realtime.brokers import InMemoryRealtimeBroker
from infrastructure.realtime.connection_manager import ConnectionManager

ADMIN = User(id="admin-1", role=UserRole.ADMIN)
VIEWER = User(id="viewer-1")


class StubMatchService:
    def __init__(self):
        self.created = []
        self.list_calls = []
        self.fail_list = False

    async def create_event(self, data: MatchEventCreateDTO) -> MatchEventDTO:
        if data.match_id == "missing":
            raise MatchNotFoundException(data.match_id)
        event = MatchEventDTO(
            id=f"evt-{len(self.created) + 1}",
            match_id=data.match_id,
            event_type=data.event_type,
            description=data.description,
            timestamp=data.timestamp or datetime(2024, 5, 1, 18, 30, tzinfo=timezone.utc),
            player_id=data.player_id,
            metadata=data.metadata,
        )
        self.created.append(event)
        return event

    async def list_events(self, match_id, limit=None):
        self.list_calls.append((match_id, limit))
        if self.fail_list:
            raise RuntimeError("db down")
        return [
            MatchEventDTO(
                id="evt-1",
                match_id=match_id,
                event_type="kill",
                description="s1mple opens",
                timestamp=datetime(2024, 5, 1, 18, 30, tzinfo=timezone.utc),
            )
        ]


class RecordingNotifier:
    def __init__(self, enabled=True):
        self._enabled = enabled
        self.events = []

    @property
    def enabled(self):
        return self._enabled

    async def notify_match_event(self, event):
        self.events.append(event)


async def _service(notifier=None, **kwargs):
    broker = InMemoryRealtimeBroker()
    hub = ConnectionManager()
    matches = StubMatchService()
    rt = RealtimeService(broker=broker, connections=hub, match_service=matches, notifier=notifier, **kwargs)
    await broker.subscribe(rt.on_broker_event)
    return rt, hub, matches


def _event_frame(**data):
    payload = {"matchId": "m1", "eventType": "kill", "description": "s1mple AWP kill"}
    payload.update(data)
    return json.dumps({"type": "create_match_event", "data": payload})


@pytest.mark.asyncio
async def test_connect_sends_one_welcome_only_to_new_connection(fake_ws_factory):
    rt, hub, _ = await _service()
    first, second = fake_ws_factory("first"), fake_ws_factory("second")
    await rt.connect(first)
    await hub.drain()
    first.sent.clear()

    await rt.connect(second)
    await hub.drain()

    assert second.messages() == [{"type": "connected", "message": "Welcome to CS2Stats WebSocket"}]
    assert first.sent == []


@pytest.mark.asyncio
async def test_unparseable_and_unknown_frames_are_ignored(fake_ws_factory):
    rt, hub, _ = await _service()
    ws = fake_ws_factory()
    await rt.connect(ws)
    await hub.drain()
    ws.sent.clear()

    nested = "[" * 100000 + "]" * 100000
    for raw in ("not json", "[1, 2]", nested, json.dumps({"type": "subscribe"}), json.dumps({"data": {}})):
        await rt.handle_message(ws, raw, ADMIN)
    await hub.drain()

    assert ws.sent == []


@pytest.mark.asyncio
async def test_create_match_event_broadcasts_and_acknowledges_sender(fake_ws_factory):
    notifier = RecordingNotifier()
    rt, hub, matches = await _service(notifier=notifier)
    sender, viewer = fake_ws_factory("sender"), fake_ws_factory("viewer")
    for ws in (sender, viewer):
        await rt.connect(ws)
    await hub.drain()
    sender.sent.clear()
    viewer.sent.clear()

    await rt.handle_message(sender, _event_frame(metadata={"weapon": "AWP", "round": 3}), ADMIN)
    await hub.drain()
    await asyncio.sleep(0)

    sender_types = [m["type"] for m in sender.messages()]
    assert sender_types == ["match_event", "create_match_event:ok"]
    assert [m["type"] for m in viewer.messages()] == ["match_event"]

    ok = sender.messages()[1]
    assert ok["data"]["id"] == "evt-1"
    assert ok["data"]["matchId"] == "m1"
    assert ok["data"]["metadata"]["weapon"] == "AWP"
    assert viewer.messages()[0]["data"] == ok["data"]
    assert [e.id for e in notifier.events] == ["evt-1"]
    assert len(matches.created) == 1


@pytest.mark.asyncio
async def test_create_match_event_invalid_payload_replies_error_without_broadcast(fake_ws_factory):
    rt, hub, matches = await _service()
    sender, viewer = fake_ws_factory("sender"), fake_ws_factory("viewer")
    for ws in (sender, viewer):
        await rt.connect(ws)
    await hub.drain()
    sender.sent.clear()
    viewer.sent.clear()

    frame = json.dumps({"type": "create_match_event", "data": {"eventType": "kill", "description": "no match"}})
    await rt.handle_message(sender, frame, ADMIN)
    await hub.drain()

    replies = sender.messages()
    assert len(replies) == 1
    assert replies[0]["type"] == "create_match_event:error"
    assert "matchId" in replies[0]["message"]
    assert viewer.sent == []
    assert matches.created == []


@pytest.mark.asyncio
async def test_create_match_event_for_unknown_match_reports_business_error(fake_ws_factory):
    rt, hub, _ = await _service()
    ws = fake_ws_factory()
    await rt.connect(ws)
    await hub.drain()
    ws.sent.clear()

    await rt.handle_message(ws, _event_frame(matchId="missing"), ADMIN)
    await hub.drain()

    assert [m["type"] for m in ws.messages()] == ["create_match_event:error"]


@pytest.mark.asyncio
@pytest.mark.parametrize("user", [None, VIEWER])
async def test_create_match_event_requires_admin(fake_ws_factory, user):
    rt, hub, matches = await _service()
    ws = fake_ws_factory()
    await rt.connect(ws)
    await hub.drain()
    ws.sent.clear()

    await rt.handle_message(ws, _event_frame(), user)
    await hub.drain()

    assert ws.messages() == [{"type": "create_match_event:error", "message": "Forbidden: admin role required"}]
    assert matches.created == []


@pytest.mark.asyncio
async def test_admin_gate_can_be_disabled(fake_ws_factory):
    rt, hub, matches = await _service(commands_require_admin=False)
    ws = fake_ws_factory()
    await rt.connect(ws)

    await rt.handle_message(ws, _event_frame(), None)
    await hub.drain()

    assert ws.messages()[-1]["type"] == "create_match_event:ok"
    assert len(matches.created) == 1


@pytest.mark.asyncio
async def test_get_match_events_replies_point_to_point(fake_ws_factory):
    rt, hub, matches = await _service()
    asker, other = fake_ws_factory("asker"), fake_ws_factory("other")
    for ws in (asker, other):
        await rt.connect(ws)
    await hub.drain()
    asker.sent.clear()
    other.sent.clear()

    await rt.handle_message(asker, json.dumps({"type": "get_match_events", "matchId": "m1", "limit": "25"}))
    await rt.handle_message(asker, json.dumps({"type": "get_match_events", "data": {"matchId": "m2"}}))
    await hub.drain()

    replies = asker.messages()
    assert [r["type"] for r in replies] == ["match_events", "match_events"]
    assert replies[0]["data"][0]["timestamp"] == "2024-05-01T18:30:00Z"
    assert matches.list_calls == [("m1", 25), ("m2", None)]
    assert other.sent == []


@pytest.mark.asyncio
async def test_get_match_events_errors(fake_ws_factory):
    rt, hub, matches = await _service()
    ws = fake_ws_factory()
    await rt.connect(ws)
    await hub.drain()
    ws.sent.clear()

    await rt.handle_message(ws, json.dumps({"type": "get_match_events"}))
    matches.fail_list = True
    await rt.handle_message(ws, json.dumps({"type": "get_match_events", "matchId": "m1"}))
    await hub.drain()

    assert ws.messages() == [
        {"type": "get_match_events:error", "message": "matchId required"},
        {"type": "get_match_events:error", "message": "Failed to fetch"},
    ]


@pytest.mark.asyncio
async def test_get_match_events_with_unrepresentable_limit_uses_default(fake_ws_factory):
    rt, hub, matches = await _service()
    ws = fake_ws_factory()
    await rt.connect(ws)
    await hub.drain()
    ws.sent.clear()

    await rt.handle_message(ws, '{"type": "get_match_events", "matchId": "m1", "limit": 1e999}')
    await rt.handle_message(ws, '{"type": "get_match_events", "matchId": "m1", "limit": NaN}')
    await hub.drain()

    assert matches.list_calls == [("m1", None), ("m1", None)]
    assert [m["type"] for m in ws.messages()] == ["match_events", "match_events"]


@pytest.mark.asyncio
async def test_ping_gets_pong(fake_ws_factory):
    rt, hub, _ = await _service()
    ws = fake_ws_factory()
    await rt.connect(ws)
    await hub.drain()
    ws.sent.clear()

    await rt.handle_message(ws, json.dumps({"type": "ping"}))
    await rt.handle_message(ws, json.dumps({"type": "pong"}))
    await hub.drain()

    assert ws.messages() == [{"type": "pong"}]


@pytest.mark.asyncio
async def test_publish_safely_swallows_broker_failure():
    class BrokenBroker(InMemoryRealtimeBroker):
        async def publish(self, envelope):
            raise ConnectionError("broker down")

    rt = RealtimeService(broker=BrokenBroker(), connections=ConnectionManager(), match_service=StubMatchService())
    await rt.publish_safely(deleted("team", "t1"), deleted("player", "p1"))


@pytest.mark.asyncio
async def test_disabled_notifier_is_not_called(fake_ws_factory):
    notifier = RecordingNotifier(enabled=False)
    rt, hub, _ = await _service(notifier=notifier)
    ws = fake_ws_factory()
    await rt.connect(ws)

    await rt.handle_message(ws, _event_frame(), ADMIN)
    await hub.drain()
    await asyncio.sleep(0)

    assert notifier.events == []
