"""WebSocket route for realtime match updates.

- Anyone may subscribe; a bearer token (``?token=`` or ``Authorization``)
  only matters for commands that change data.
- Server sends a JSON ping when the socket is idle and closes it after the
  configured number of unanswered pings.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from api.dependencies import get_ws_user
from application.ports.realtime import PingEnvelope
from application.services.realtime_service import RealtimeService
from core.config import settings
from core.logging_config import get_logger


logger = get_logger(__name__)


router = APIRouter(tags=["WebSocket"])


def get_realtime_service_from_app(ws: WebSocket) -> RealtimeService:
    svc = getattr(ws.app.state, "realtime_service", None)
    if svc is None:
        raise RuntimeError("Realtime service not initialized. Ensure lifespan sets app.state.realtime_service.")
    return svc


def _frame_text(message: dict) -> Optional[str]:
    text = message.get("text")
    if text is not None:
        return text
    data = message.get("bytes")
    if data is not None:
        return data.decode("utf-8", errors="replace")
    return None


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket) -> None:
    await ws.accept()
    rt = get_realtime_service_from_app(ws)
    user = await get_ws_user(ws)
    await rt.connect(ws)

    idle_ping_interval = float(settings.REALTIME_WS_IDLE_PING_INTERVAL_S)
    pong_grace = float(settings.REALTIME_WS_PONG_GRACE_S)
    missed_limit = int(settings.REALTIME_WS_MISSED_PING_LIMIT)
    missed = 0
    try:
        while True:
            if idle_ping_interval > 0:
                # after a ping only the grace period is allowed
                timeout = pong_grace if missed else idle_ping_interval
                try:
                    message = await asyncio.wait_for(ws.receive(), timeout=timeout)
                except asyncio.TimeoutError:
                    missed += 1
                    if missed > missed_limit:
                        logger.info("ws_idle_timeout", missed=missed, user_id=getattr(user, "id", None))
                        await ws.close(code=1001)
                        break
                    await rt.connections.send_to(ws, PingEnvelope())
                    continue
            else:
                message = await ws.receive()

            if message["type"] == "websocket.disconnect":
                break
            missed = 0
            raw = _frame_text(message)
            if raw is not None:
                await rt.handle_message(ws, raw, user)
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.error("ws_error", user_id=getattr(user, "id", None), error=str(exc), exc_info=True)
    finally:
        await rt.disconnect(ws)
