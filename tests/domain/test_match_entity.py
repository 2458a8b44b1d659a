from datetime import datetime, timezone

import pytest

from domain.match.entity import Match, MatchEvent, MatchEventType, MatchPlayerStats, MatchStatus


def test_new_match_defaults_to_upcoming_without_timestamps():
    match = Match(id=None, team1_id="t1", team2_id="t2")
    assert match.status is MatchStatus.UPCOMING
    assert match.started_at is None
    assert match.finished_at is None


def test_same_team_on_both_sides_is_rejected():
    with pytest.raises(ValueError):
        Match(id=None, team1_id="t1", team2_id="t1")


def test_going_live_stamps_started_at_once():
    match = Match(id="m1", team1_id="t1", team2_id="t2")
    match.apply_changes({"status": "live"})
    started = match.started_at
    assert started is not None
    assert match.finished_at is None

    match.apply_changes({"team1_score": 4})
    assert match.started_at == started
    assert match.updated_at is not None


def test_finishing_stamps_finished_at_and_keeps_explicit_values():
    explicit = datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc)
    match = Match(id="m1", team1_id="t1", team2_id="t2")
    match.apply_changes({"status": MatchStatus.FINISHED, "started_at": explicit})
    assert match.started_at == explicit
    assert match.finished_at is not None


def test_server_managed_fields_are_not_patchable():
    match = Match(id="m1", team1_id="t1", team2_id="t2")
    match.apply_changes({"id": "other", "tournament": "BLAST"})
    assert match.id == "m1"
    assert match.tournament == "BLAST"


def test_negative_score_is_rejected_on_update():
    match = Match(id="m1", team1_id="t1", team2_id="t2")
    with pytest.raises(ValueError):
        match.apply_changes({"team2_score": -1})


def test_event_defaults_timestamp_and_requires_description():
    event = MatchEvent(id=None, match_id="m1", event_type="clutch", description="1v3 on B")
    assert event.event_type is MatchEventType.CLUTCH
    assert event.timestamp.tzinfo is not None

    with pytest.raises(ValueError):
        MatchEvent(id=None, match_id="m1", event_type="kill", description="   ")
    with pytest.raises(ValueError):
        MatchEvent(id=None, match_id="m1", event_type="teamkill", description="x")


def test_player_stats_bounds():
    MatchPlayerStats(id=None, match_id="m1", player_id="p1", kills=25, headshot_percent=55)
    with pytest.raises(ValueError):
        MatchPlayerStats(id=None, match_id="m1", player_id="p1", headshot_percent=120)
