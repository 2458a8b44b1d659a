"""Application service for realtime WebSocket workflows.

Keeps application logic (command dispatch, authorization, orchestration)
separate from the concrete connection management and broadcast transport.

Broadcast path: producers call ``publish``; the broker relays the envelope
to ``on_broker_event`` in every process, which fans it out to that
process's hub. Replies to inbound commands go point-to-point through
``ConnectionManager.send_to`` and never touch the broker.
"""
from __future__ import annotations

import asyncio
import json
from typing import Any, Coroutine, Dict, Optional, Set

from fastapi import WebSocket
from pydantic import ValidationError

from application.dto import MatchEventCreateDTO, MatchEventDTO
from application.ports.notifications import MatchEventNotifierPort
from application.ports.realtime import (
    ClientCommand,
    CommandErrorEnvelope,
    ConnectedEnvelope,
    CreateMatchEventOkEnvelope,
    Envelope,
    MatchEventEnvelope,
    MatchEventsEnvelope,
    PongEnvelope,
    RealtimeBrokerPort,
)
from application.services.match_service import MatchApplicationService
from core.config import settings
from core.logging_config import get_logger
from domain.common.exceptions import BusinessException
from domain.user.entity import User
from infrastructure.realtime.connection_manager import ConnectionManager


logger = get_logger(__name__)


def _format_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(part) for part in first.get("loc", ()))
    msg = first.get("msg", "invalid")
    return f"Invalid data: {loc}: {msg}" if loc else f"Invalid data: {msg}"


def _coerce_limit(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError, OverflowError):
        return None


class RealtimeService:
    def __init__(
        self,
        *,
        broker: RealtimeBrokerPort,
        connections: ConnectionManager,
        match_service: MatchApplicationService,
        notifier: Optional[MatchEventNotifierPort] = None,
        commands_require_admin: Optional[bool] = None,
    ) -> None:
        self._broker = broker
        self._conn = connections
        self._matches = match_service
        self._notifier = notifier
        self._require_admin = (
            settings.REALTIME_WS_COMMANDS_REQUIRE_ADMIN if commands_require_admin is None else commands_require_admin
        )
        # strong refs for detached tasks until they finish
        self._background: Set[asyncio.Task] = set()

    @property
    def connections(self) -> ConnectionManager:
        return self._conn

    # Connection lifecycle management
    async def connect(self, ws: WebSocket) -> None:
        """Register the subscriber, then greet it (and only it)."""
        await self._conn.add(ws)
        await self._conn.send_to(ws, ConnectedEnvelope(message=settings.REALTIME_WELCOME_MESSAGE))

    async def disconnect(self, ws: WebSocket) -> None:
        await self._conn.remove(ws)

    # Broadcast
    async def publish(self, *envelopes: Envelope) -> None:
        for envelope in envelopes:
            await self._broker.publish(envelope)

    async def publish_safely(self, *envelopes: Envelope) -> None:
        """Detached-task entry point: failures are logged, never raised."""
        for envelope in envelopes:
            try:
                await self._broker.publish(envelope)
            except Exception as exc:
                logger.error("realtime_broadcast_failed", type=envelope.type, error=str(exc), exc_info=True)

    async def on_broker_event(self, envelope: Envelope) -> None:
        await self._conn.broadcast(envelope)
        logger.debug("realtime_event_dispatched", type=envelope.type, connections=self._conn.count)

    async def match_event_created(self, event: MatchEventDTO) -> None:
        """Broadcast a new timeline event and hand the email notification off."""
        await self.publish_safely(MatchEventEnvelope(data=event))
        self.notify_match_event(event)

    def notify_match_event(self, event: MatchEventDTO) -> None:
        if self._notifier is not None and self._notifier.enabled:
            self.spawn(self._notifier.notify_match_event(event), name=f"notify-match-event-{event.id}")

    # Inbound messages
    async def handle_message(self, ws: WebSocket, raw: str, user: Optional[User] = None) -> None:
        """Dispatch one inbound text frame. Malformed frames and unknown types are ignored."""
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError, RecursionError):
            logger.debug("ws_message_unparseable")
            return
        if not isinstance(payload, dict):
            return

        mtype = payload.get("type")
        if mtype == ClientCommand.CREATE_MATCH_EVENT.value:
            await self.create_match_event(ws, payload, user)
        elif mtype == ClientCommand.GET_MATCH_EVENTS.value:
            await self.get_match_events(ws, payload)
        elif mtype == ClientCommand.PING.value:
            await self._conn.send_to(ws, PongEnvelope())
        elif mtype == ClientCommand.PONG.value:
            return
        else:
            logger.debug("ws_message_ignored", type=mtype)

    async def create_match_event(self, ws: WebSocket, payload: Dict[str, Any], user: Optional[User]) -> None:
        error_type = "create_match_event:error"
        if self._require_admin and not (user is not None and user.is_admin):
            await self._conn.send_to(ws, CommandErrorEnvelope(type=error_type, message="Forbidden: admin role required"))
            return

        try:
            data = MatchEventCreateDTO.model_validate(payload.get("data") or {})
        except ValidationError as exc:
            await self._conn.send_to(ws, CommandErrorEnvelope(type=error_type, message=_format_validation_error(exc)))
            return

        try:
            event = await self._matches.create_event(data)
        except BusinessException as exc:
            logger.warning("ws_create_match_event_rejected", match_id=data.match_id, error=exc.message)
            await self._conn.send_to(ws, CommandErrorEnvelope(type=error_type, message=exc.message))
            return
        except Exception as exc:
            logger.error("ws_create_match_event_failed", match_id=data.match_id, error=str(exc), exc_info=True)
            await self._conn.send_to(ws, CommandErrorEnvelope(type=error_type, message="Failed to create match event"))
            return

        await self.publish_safely(MatchEventEnvelope(data=event))
        self.notify_match_event(event)
        await self._conn.send_to(ws, CreateMatchEventOkEnvelope(data=event))
        logger.info("ws_match_event_created", match_id=event.match_id, event_id=event.id, user_id=getattr(user, "id", None))

    async def get_match_events(self, ws: WebSocket, payload: Dict[str, Any]) -> None:
        error_type = "get_match_events:error"
        nested = payload.get("data") if isinstance(payload.get("data"), dict) else {}
        match_id = payload.get("matchId") or nested.get("matchId")
        if not match_id:
            await self._conn.send_to(ws, CommandErrorEnvelope(type=error_type, message="matchId required"))
            return
        limit = _coerce_limit(payload.get("limit", nested.get("limit")))
        try:
            events = await self._matches.list_events(str(match_id), limit=limit)
        except Exception as exc:
            logger.error("ws_get_match_events_failed", match_id=match_id, error=str(exc), exc_info=True)
            await self._conn.send_to(ws, CommandErrorEnvelope(type=error_type, message="Failed to fetch"))
            return
        await self._conn.send_to(ws, MatchEventsEnvelope(data=events))

    # Detached tasks
    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("realtime_background_task_failed", task=task.get_name(), error=str(exc))

    async def aclose(self) -> None:
        pending = list(self._background)
        if pending:
            await asyncio.wait(pending, timeout=5)
        await self._conn.close_all()
