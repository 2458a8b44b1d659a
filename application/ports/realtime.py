"""
Realtime port and message envelopes (contracts-first).

This module defines the closed set of envelopes exchanged over ``/ws`` and
the RealtimeBrokerPort protocol so the application layer can remain
decoupled from the concrete broadcast implementations (infrastructure).

Every server -> client message is one member of the ``Envelope`` tagged
union, discriminated by ``type``. Producers construct the typed model; the
wire form is always ``{"type": ..., "data"|"message": ...}``.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Any, Awaitable, Callable, List, Literal, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from application.dto import (
    CommentDTO,
    DeletedRefDTO,
    FavoriteDTO,
    MatchDTO,
    MatchEventDTO,
    MatchStatsDTO,
    NewsDTO,
    PlayerDTO,
    TeamDTO,
)


class ClientCommand(str, Enum):
    """Inbound (client -> server) message types."""

    CREATE_MATCH_EVENT = "create_match_event"
    GET_MATCH_EVENTS = "get_match_events"
    PING = "ping"
    PONG = "pong"


class _EnvelopeBase(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- point-to-point control ---------------------------------------------------

class ConnectedEnvelope(_EnvelopeBase):
    type: Literal["connected"] = "connected"
    message: str


class PingEnvelope(_EnvelopeBase):
    type: Literal["ping"] = "ping"


class PongEnvelope(_EnvelopeBase):
    type: Literal["pong"] = "pong"


# --- broadcasts ---------------------------------------------------------------

class MatchUpdateEnvelope(_EnvelopeBase):
    """Primary score/status sync event consumed by the client reconciler."""

    type: Literal["match_update"] = "match_update"
    data: MatchDTO


class MatchEventEnvelope(_EnvelopeBase):
    type: Literal["match_event"] = "match_event"
    data: MatchEventDTO


class TeamEnvelope(_EnvelopeBase):
    type: Literal["team_created", "team_updated"]
    data: TeamDTO


class PlayerEnvelope(_EnvelopeBase):
    type: Literal["player_created", "player_updated"]
    data: PlayerDTO


class MatchEnvelope(_EnvelopeBase):
    type: Literal["match_created", "match_updated"]
    data: MatchDTO


class MatchStatsEnvelope(_EnvelopeBase):
    type: Literal["match_stats_created"] = "match_stats_created"
    data: MatchStatsDTO


class NewsEnvelope(_EnvelopeBase):
    type: Literal["news_created", "news_updated"]
    data: NewsDTO


class CommentEnvelope(_EnvelopeBase):
    type: Literal["comment_created", "comment_updated"]
    data: CommentDTO


class FavoriteEnvelope(_EnvelopeBase):
    type: Literal["favorite_created"] = "favorite_created"
    data: FavoriteDTO


class DeletedEnvelope(_EnvelopeBase):
    type: Literal[
        "team_deleted",
        "player_deleted",
        "match_deleted",
        "news_deleted",
        "comment_deleted",
        "favorite_deleted",
    ]
    data: DeletedRefDTO


# --- command replies (point-to-point) -----------------------------------------

class CreateMatchEventOkEnvelope(_EnvelopeBase):
    type: Literal["create_match_event:ok"] = "create_match_event:ok"
    data: MatchEventDTO


class MatchEventsEnvelope(_EnvelopeBase):
    type: Literal["match_events"] = "match_events"
    data: List[MatchEventDTO]


class CommandErrorEnvelope(_EnvelopeBase):
    type: Literal["create_match_event:error", "get_match_events:error"]
    message: str


Envelope = Annotated[
    Union[
        ConnectedEnvelope,
        PingEnvelope,
        PongEnvelope,
        MatchUpdateEnvelope,
        MatchEventEnvelope,
        TeamEnvelope,
        PlayerEnvelope,
        MatchEnvelope,
        MatchStatsEnvelope,
        NewsEnvelope,
        CommentEnvelope,
        FavoriteEnvelope,
        DeletedEnvelope,
        CreateMatchEventOkEnvelope,
        MatchEventsEnvelope,
        CommandErrorEnvelope,
    ],
    Field(discriminator="type"),
]

envelope_adapter: TypeAdapter[Envelope] = TypeAdapter(Envelope)


def dump_envelope(envelope: _EnvelopeBase) -> dict[str, Any]:
    """Wire form of an envelope (camelCase records, UTC-Z timestamps)."""
    return envelope.model_dump(mode="json", by_alias=True)


def encode_envelope(envelope: _EnvelopeBase) -> str:
    return json.dumps(dump_envelope(envelope), ensure_ascii=False, separators=(",", ":"))


def parse_envelope(raw: str | bytes | dict[str, Any]) -> Envelope:
    """Rehydrate a server envelope; raises pydantic.ValidationError on unknown types."""
    if isinstance(raw, (str, bytes)):
        return envelope_adapter.validate_json(raw)
    return envelope_adapter.validate_python(raw)


def deleted(entity: str, entity_id: str) -> DeletedEnvelope:
    """Build ``{entity}_deleted`` for a removed record."""
    return DeletedEnvelope(type=f"{entity}_deleted", data=DeletedRefDTO(id=entity_id))


Handler = Callable[[Envelope], Awaitable[None]]


class RealtimeBrokerPort(Protocol):
    """Abstraction for cross-process broadcast.

    Implementations may be in-memory (single process) or Redis pub/sub. Every
    process subscribes once and relays what it receives to its own hub.
    """

    async def publish(self, envelope: Envelope) -> None: ...

    async def subscribe(self, handler: Handler) -> None: ...

    async def aclose(self) -> None: ...


__all__ = [
    "ClientCommand",
    "ConnectedEnvelope",
    "PingEnvelope",
    "PongEnvelope",
    "MatchUpdateEnvelope",
    "MatchEventEnvelope",
    "TeamEnvelope",
    "PlayerEnvelope",
    "MatchEnvelope",
    "MatchStatsEnvelope",
    "NewsEnvelope",
    "CommentEnvelope",
    "FavoriteEnvelope",
    "DeletedEnvelope",
    "CreateMatchEventOkEnvelope",
    "MatchEventsEnvelope",
    "CommandErrorEnvelope",
    "Envelope",
    "envelope_adapter",
    "dump_envelope",
    "encode_envelope",
    "parse_envelope",
    "deleted",
    "Handler",
    "RealtimeBrokerPort",
]
