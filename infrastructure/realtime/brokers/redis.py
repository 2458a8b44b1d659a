"""Redis Pub/Sub based RealtimeBrokerPort implementation.

All envelopes go through one channel ``{namespace}:rt:broadcast``; every
process subscribes once and relays received envelopes to its own hub, so a
mutation handled by any worker reaches every connected viewer.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from pydantic import ValidationError
from redis import asyncio as aioredis
from redis.exceptions import RedisError

from application.ports.realtime import Envelope, Handler, RealtimeBrokerPort, encode_envelope, parse_envelope
from core.config import settings
from core.logging_config import get_logger


logger = get_logger(__name__)


class RedisRealtimeBroker(RealtimeBrokerPort):
    def __init__(self, url: Optional[str] = None, *, client: Optional[aioredis.Redis] = None) -> None:
        self._url = url or settings.redis.url
        self._client = client
        self._channel = f"{settings.redis.namespace}:rt:broadcast"
        self._task: Optional[asyncio.Task] = None
        self._handler: Optional[Handler] = None
        self._pubsub = None

    def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            if not self._url:
                raise RuntimeError("redis.url is not configured")
            self._client = aioredis.from_url(
                self._url,
                decode_responses=True,
                max_connections=settings.redis.max_connections,
            )
        return self._client

    async def publish(self, envelope: Envelope) -> None:  # type: ignore[override]
        try:
            await self._get_client().publish(self._channel, encode_envelope(envelope))
        except RedisError as exc:
            logger.error("redis_publish_failed", channel=self._channel, error=str(exc))

    async def _listen(self) -> None:
        assert self._pubsub is not None and self._handler is not None
        logger.info("redis_pubsub_subscribed", channel=self._channel)
        try:
            async for message in self._pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    envelope = parse_envelope(message["data"])
                except ValidationError as exc:
                    logger.warning("redis_pubsub_parse_failed", error=str(exc))
                    continue
                try:
                    await self._handler(envelope)
                except Exception as exc:
                    logger.error("redis_pubsub_handler_failed", type=envelope.type, error=str(exc))
        except asyncio.CancelledError:
            raise
        except RedisError as exc:
            logger.error("redis_pubsub_listen_failed", error=str(exc))

    async def subscribe(self, handler: Handler) -> None:  # type: ignore[override]
        self._handler = handler
        self._pubsub = self._get_client().pubsub(ignore_subscribe_messages=True)
        await self._pubsub.subscribe(self._channel)
        self._task = asyncio.create_task(self._listen(), name="redis-realtime-listener")

    async def aclose(self) -> None:  # type: ignore[override]
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        if self._pubsub is not None:
            await self._pubsub.aclose()
            self._pubsub = None
        if self._client is not None:
            await self._client.aclose()
            self._client = None
