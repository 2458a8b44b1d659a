import asyncio
import json
from datetime import datetime, timezone

import pytest

from application.dto import MatchDTO
from application.ports.realtime import MatchUpdateEnvelope, dump_envelope
from domain.match.entity import MatchStatus
from infrastructure.realtime.connection_manager import ConnectionManager


def _match_update(score: int = 1) -> MatchUpdateEnvelope:
    match = MatchDTO(
        id="m1",
        team1_id="t1",
        team2_id="t2",
        status=MatchStatus.LIVE,
        team1_score=score,
        team2_score=0,
        current_map="Mirage",
        started_at=datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc),
    )
    return MatchUpdateEnvelope(data=match)


@pytest.mark.asyncio
async def test_broadcast_isolates_failing_subscriber(fake_ws_factory):
    hub = ConnectionManager()
    good = [fake_ws_factory(f"ok{i}") for i in range(3)]
    broken = fake_ws_factory("broken", fail=True)
    for ws in (*good, broken):
        await hub.add(ws)

    await hub.broadcast(_match_update())
    await hub.drain()

    for ws in good:
        assert len(ws.sent) == 1
    assert broken.sent == []
    # the broken socket stays registered and does not affect later broadcasts
    await hub.broadcast(_match_update(2))
    await hub.drain()
    assert all(len(ws.sent) == 2 for ws in good)


@pytest.mark.asyncio
async def test_broadcast_without_subscribers_is_noop():
    hub = ConnectionManager()
    await hub.broadcast(_match_update())
    await hub.drain()
    assert hub.count == 0


@pytest.mark.asyncio
async def test_fan_out_delivers_identical_envelope_once_per_subscriber(fake_ws_factory):
    hub = ConnectionManager()
    subscribers = [fake_ws_factory(f"ws{i}") for i in range(4)]
    for ws in subscribers:
        await hub.add(ws)
    envelope = _match_update(7)

    await hub.broadcast(envelope)
    await hub.drain()

    expected = dump_envelope(envelope)
    for ws in subscribers:
        assert [json.loads(m) for m in ws.sent] == [expected]
    assert expected["data"]["team1Score"] == 7
    assert expected["data"]["startedAt"] == "2024-05-01T18:00:00Z"


@pytest.mark.asyncio
async def test_removed_or_closed_connections_receive_nothing(fake_ws_factory):
    hub = ConnectionManager()
    stays, leaves, closed = fake_ws_factory("stays"), fake_ws_factory("leaves"), fake_ws_factory("closed")
    for ws in (stays, leaves, closed):
        await hub.add(ws)

    await hub.remove(leaves)
    await closed.close()
    await hub.broadcast(_match_update())
    await hub.drain()

    assert len(stays.sent) == 1
    assert leaves.sent == []
    assert closed.sent == []
    assert leaves not in hub


@pytest.mark.asyncio
async def test_drop_oldest_keeps_newest_payloads(fake_ws_factory):
    gate = asyncio.Event()
    slow = fake_ws_factory("slow", gate=gate)
    hub = ConnectionManager(queue_max=2, overflow_policy="drop_oldest")
    await hub.add(slow)

    await hub.broadcast(_match_update(1))
    for _ in range(3):
        await asyncio.sleep(0)  # sender picks up #1 and blocks on the gate
    for score in (2, 3, 4):
        await hub.broadcast(_match_update(score))

    gate.set()
    await hub.drain()
    scores = [m["data"]["team1Score"] for m in slow.messages()]
    assert scores == [1, 3, 4]


@pytest.mark.asyncio
async def test_disconnect_policy_closes_slow_subscriber(fake_ws_factory):
    gate = asyncio.Event()
    slow = fake_ws_factory("slow", gate=gate)
    hub = ConnectionManager(queue_max=1, overflow_policy="disconnect")
    await hub.add(slow)

    await hub.broadcast(_match_update(1))
    for _ in range(3):
        await asyncio.sleep(0)
    await hub.broadcast(_match_update(2))
    await hub.broadcast(_match_update(3))

    assert slow not in hub
    assert slow.closed_with == 1013
    gate.set()


@pytest.mark.asyncio
async def test_close_all_closes_and_unregisters(fake_ws_factory):
    hub = ConnectionManager()
    sockets = [fake_ws_factory(f"ws{i}") for i in range(2)]
    for ws in sockets:
        await hub.add(ws)

    await hub.close_all()

    assert hub.count == 0
    assert all(ws.closed_with == 1001 for ws in sockets)
