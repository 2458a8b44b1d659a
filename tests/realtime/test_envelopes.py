from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from application.dto import MatchEventDTO, TeamDTO
from application.ports.realtime import (
    DeletedEnvelope,
    MatchEventEnvelope,
    TeamEnvelope,
    deleted,
    dump_envelope,
    encode_envelope,
    parse_envelope,
)


def test_records_use_camel_case_and_utc_z_timestamps():
    cest = timezone(timedelta(hours=2))
    event = MatchEventDTO(
        id="e1",
        match_id="m1",
        event_type="bomb_plant",
        description="B site plant",
        timestamp=datetime(2024, 5, 1, 20, 0, tzinfo=cest),
        player_id="p1",
        metadata={"side": "T", "round": 12},
    )
    wire = dump_envelope(MatchEventEnvelope(data=event))

    assert wire["type"] == "match_event"
    assert wire["data"]["matchId"] == "m1"
    assert wire["data"]["eventType"] == "bomb_plant"
    assert wire["data"]["timestamp"] == "2024-05-01T18:00:00Z"
    assert wire["data"]["metadata"]["round"] == 12


def test_naive_timestamps_are_treated_as_utc():
    team = TeamDTO(id="t1", name="NAVI", created_at=datetime(2024, 1, 1, 12, 0))
    wire = dump_envelope(TeamEnvelope(type="team_created", data=team))
    assert wire["data"]["createdAt"] == "2024-01-01T12:00:00Z"


def test_parse_envelope_rehydrates_typed_member():
    raw = encode_envelope(deleted("comment", "c9"))
    envelope = parse_envelope(raw)

    assert isinstance(envelope, DeletedEnvelope)
    assert envelope.type == "comment_deleted"
    assert envelope.data.id == "c9"


def test_unknown_envelope_type_is_rejected():
    with pytest.raises(ValidationError):
        parse_envelope({"type": "team_archived", "data": {"id": "t1"}})


def test_entity_envelope_type_is_closed():
    with pytest.raises(ValidationError):
        TeamEnvelope(type="player_created", data=TeamDTO(id="t1", name="NAVI"))


def test_deleted_rejects_unknown_entity():
    with pytest.raises(ValidationError):
        deleted("stream", "s1")


def test_encoded_envelope_is_compact_json():
    raw = encode_envelope(deleted("team", "t1"))
    assert raw == '{"type":"team_deleted","data":{"id":"t1"}}'
