"""In-process RealtimeBrokerPort.

Default for a single uvicorn worker and for tests: ``publish`` hands the
envelope straight to every subscribed hub relay in subscription order.
"""
from __future__ import annotations

from typing import List

from application.ports.realtime import Envelope, Handler, RealtimeBrokerPort
from core.logging_config import get_logger

logger = get_logger(__name__)


class InMemoryRealtimeBroker(RealtimeBrokerPort):
    def __init__(self) -> None:
        self._handlers: List[Handler] = []
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    async def publish(self, envelope: Envelope) -> None:  # type: ignore[override]
        if self._closed:
            logger.debug("inmemory_broker_publish_after_close", type=envelope.type)
            return
        # snapshot: a handler may subscribe/close while we iterate
        for handler in tuple(self._handlers):
            try:
                await handler(envelope)
            except Exception as exc:
                logger.error("inmemory_broker_handler_failed", type=envelope.type, error=str(exc))

    async def subscribe(self, handler: Handler) -> None:  # type: ignore[override]
        if self._closed:
            raise RuntimeError("broker is closed")
        self._handlers.append(handler)

    async def aclose(self) -> None:  # type: ignore[override]
        self._closed = True
        self._handlers.clear()
