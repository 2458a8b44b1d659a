"""Long-lived client connection to ``/ws`` with fixed-delay reconnect.

One channel per mounted client. Every close (clean or not) schedules exactly
one reconnect after ``reconnect_delay`` seconds; a successful open clears any
pending timer. ``unmount`` is the only way to stop the loop.
"""
from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, Optional

import structlog
import websockets
from websockets.exceptions import WebSocketException

from .reconciler import CacheReconciler

logger = structlog.get_logger(__name__)

RECONNECT_DELAY_S = 3.0


class RealtimeClient:
    def __init__(
        self,
        url: str,
        reconciler: CacheReconciler,
        *,
        reconnect_delay: float = RECONNECT_DELAY_S,
        connect: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.url = url
        self.reconciler = reconciler
        self.reconnect_delay = reconnect_delay
        self._connect = connect or websockets.connect
        self._ws: Any = None
        self._task: Optional[asyncio.Task] = None
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._mounted = False
        self.attempts = 0

    @property
    def connected(self) -> bool:
        return self._ws is not None

    @property
    def pending_reconnect(self) -> Optional[asyncio.TimerHandle]:
        return self._reconnect_handle

    def mount(self) -> None:
        """Open the channel; must be called from a running event loop."""
        if self._mounted:
            return
        self._mounted = True
        self._open()

    async def unmount(self) -> None:
        self._mounted = False
        self._cancel_reconnect()
        ws, task = self._ws, self._task
        if ws is not None:
            try:
                await ws.close()
            except (WebSocketException, OSError) as exc:
                logger.debug("realtime_client_close_failed", error=str(exc))
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def send(self, message: Dict[str, Any]) -> None:
        """Send a command frame (``create_match_event``, ``get_match_events``)."""
        if self._ws is None:
            raise ConnectionError("realtime channel is not open")
        await self._ws.send(json.dumps(message))

    def _open(self) -> None:
        self._task = asyncio.create_task(self._run(), name="realtime-client")

    async def _run(self) -> None:
        self.attempts += 1
        try:
            async with self._connect(self.url) as ws:
                self._ws = ws
                self._on_open()
                async for raw in ws:
                    await self._on_message(raw)
        except (WebSocketException, OSError, asyncio.TimeoutError) as exc:
            logger.warning("realtime_client_error", url=self.url, error=str(exc))
        except Exception as exc:
            logger.exception("realtime_client_failed", url=self.url, error=str(exc))
        finally:
            self._ws = None
        self._on_close()

    def _on_open(self) -> None:
        self._cancel_reconnect()
        logger.info("realtime_client_connected", url=self.url)

    async def _on_message(self, raw: Any) -> None:
        try:
            message = json.loads(raw)
        except (TypeError, ValueError, RecursionError):
            logger.debug("realtime_client_message_unparseable")
            return
        if not isinstance(message, dict):
            return
        if message.get("type") == "ping" and self._ws is not None:
            await self._ws.send(json.dumps({"type": "pong"}))
            return
        self.reconciler.handle(message)

    def _on_close(self) -> None:
        if not self._mounted or self._reconnect_handle is not None:
            return
        logger.info("realtime_client_disconnected", url=self.url, retry_in=self.reconnect_delay)
        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(self.reconnect_delay, self._reconnect)

    def _reconnect(self) -> None:
        self._reconnect_handle = None
        if self._mounted:
            self._open()

    def _cancel_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None
