"""In-process WebSocket subscriber hub.

Keeps the set of currently-open ``/ws`` connections for this process and
fans envelopes out to them. Each connection owns a bounded send queue
drained by its own sender task, so a slow or broken socket never blocks
the broadcaster or the other subscribers. Cross-process fan-out is handled
by a RealtimeBrokerPort implementation that feeds ``broadcast``.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional, Set

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from application.ports.realtime import Envelope, encode_envelope
from core.config import settings
from core.logging_config import get_logger


logger = get_logger(__name__)

OVERFLOW_POLICIES = {"drop_oldest", "drop_new", "disconnect"}


def is_open(ws: WebSocket) -> bool:
    """Both sides of the handshake still report CONNECTED."""
    connected = WebSocketState.CONNECTED
    return (
        getattr(ws, "client_state", connected) == connected
        and getattr(ws, "application_state", connected) == connected
    )


class ConnectionManager:
    """Manage per-process WebSocket subscribers."""

    def __init__(
        self,
        *,
        queue_max: Optional[int] = None,
        overflow_policy: Optional[str] = None,
    ) -> None:
        self._connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        # per-connection send queues and sender tasks
        self._send_queues: Dict[WebSocket, asyncio.Queue] = {}
        self._sender_tasks: Dict[WebSocket, asyncio.Task] = {}
        self._queue_max = max(1, int(queue_max or settings.REALTIME_WS_SEND_QUEUE_MAX))
        policy = (overflow_policy or settings.REALTIME_WS_SEND_OVERFLOW_POLICY or "drop_oldest").lower()
        if policy not in OVERFLOW_POLICIES:
            logger.warning("ws_send_queue_policy_invalid", policy=policy, fallback="drop_oldest")
            policy = "drop_oldest"
        self._overflow_policy = policy

    @property
    def count(self) -> int:
        return len(self._connections)

    def __contains__(self, ws: WebSocket) -> bool:
        return ws in self._connections

    async def add(self, ws: WebSocket) -> None:
        async with self._lock:
            if ws in self._connections:
                return
            self._connections.add(ws)
            q: asyncio.Queue = asyncio.Queue(maxsize=self._queue_max)
            self._send_queues[ws] = q
            self._sender_tasks[ws] = asyncio.create_task(self._sender_loop(ws, q))
            total = len(self._connections)
        logger.info("ws_connected", connections=total)

    async def remove(self, ws: WebSocket) -> None:
        async with self._lock:
            if ws not in self._connections:
                return
            self._connections.discard(ws)
            task = self._sender_tasks.pop(ws, None)
            if task is not None:
                task.cancel()
            self._send_queues.pop(ws, None)
            total = len(self._connections)
        logger.info("ws_disconnected", connections=total)

    async def send_to(self, ws: WebSocket, envelope: Envelope) -> None:
        """Point-to-point delivery to one registered connection."""
        payload = self._encode(envelope)
        if payload is not None:
            await self._enqueue(ws, payload)

    async def broadcast(self, envelope: Envelope) -> None:
        """Queue ``envelope`` for every open subscriber; never raises."""
        async with self._lock:
            targets = [ws for ws in self._connections if is_open(ws)]
        if not targets:
            return
        payload = self._encode(envelope)
        if payload is None:
            return
        for ws in targets:
            await self._enqueue(ws, payload)

    async def drain(self) -> None:
        """Wait until every queued payload has been handed to its socket."""
        async with self._lock:
            queues = list(self._send_queues.values())
        await asyncio.gather(*(q.join() for q in queues))

    async def close_all(self, code: int = 1001) -> None:
        async with self._lock:
            targets = list(self._connections)
        for ws in targets:
            try:
                await ws.close(code=code)
            except Exception as exc:
                logger.debug("ws_close_failed", error=str(exc))
            await self.remove(ws)

    @staticmethod
    def _encode(envelope: Envelope) -> Optional[str]:
        try:
            return encode_envelope(envelope)
        except Exception as exc:
            logger.error("ws_envelope_encode_failed", type=getattr(envelope, "type", None), error=str(exc))
            return None

    async def _enqueue(self, ws: WebSocket, payload: str) -> None:
        q = self._send_queues.get(ws)
        if q is None:
            return
        try:
            q.put_nowait(payload)
            return
        except asyncio.QueueFull:
            pass

        policy = self._overflow_policy
        if policy == "drop_new":
            logger.warning("ws_send_queue_drop_new", queue_max=self._queue_max)
            return
        if policy == "disconnect":
            logger.warning("ws_send_queue_disconnect", queue_max=self._queue_max)
            await self.remove(ws)
            try:
                await ws.close(code=1013)
            except Exception as exc:
                logger.debug("ws_close_failed", error=str(exc))
            return
        # drop_oldest
        try:
            q.get_nowait()
            q.task_done()
        except asyncio.QueueEmpty:
            pass
        try:
            q.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning("ws_send_queue_drop_after_trim")

    async def _sender_loop(self, ws: WebSocket, q: asyncio.Queue) -> None:
        try:
            while True:
                payload = await q.get()
                try:
                    if is_open(ws):
                        await ws.send_text(payload)
                except Exception as exc:
                    logger.warning("ws_send_failed", error=str(exc))
                finally:
                    q.task_done()
        except asyncio.CancelledError:  # graceful exit
            return
