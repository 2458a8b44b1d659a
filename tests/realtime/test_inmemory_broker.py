import pytest

from application.ports.realtime import deleted
from infrastructure.realtime.brokers import InMemoryRealtimeBroker


@pytest.mark.asyncio
async def test_publish_reaches_every_subscriber_in_order():
    broker = InMemoryRealtimeBroker()
    seen = []

    async def failing(envelope):
        raise RuntimeError("relay down")

    async def relay(envelope):
        seen.append(envelope.type)

    await broker.subscribe(failing)
    await broker.subscribe(relay)
    await broker.publish(deleted("team", "t1"))
    await broker.publish(deleted("match", "m1"))

    assert seen == ["team_deleted", "match_deleted"]
    assert broker.subscriber_count == 2


@pytest.mark.asyncio
async def test_publish_after_close_is_dropped():
    broker = InMemoryRealtimeBroker()
    seen = []

    async def relay(envelope):
        seen.append(envelope)

    await broker.subscribe(relay)
    await broker.aclose()
    await broker.publish(deleted("news", "n1"))

    assert seen == []
    with pytest.raises(RuntimeError):
        await broker.subscribe(relay)
