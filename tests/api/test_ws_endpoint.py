def _create_match(client, headers):
    team1 = client.post("/api/teams", json={"name": "Natus Vincere", "acronym": "NAVI"}, headers=headers).json()["data"]
    team2 = client.post("/api/teams", json={"name": "FaZe Clan", "acronym": "FAZE"}, headers=headers).json()["data"]
    resp = client.post(
        "/api/matches",
        json={"team1Id": team1["id"], "team2Id": team2["id"], "tournament": "IEM Katowice"},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()["data"]


def test_connect_receives_welcome(client):
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "connected", "message": "Welcome to CS2Stats WebSocket"}


def test_ping_pong(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_text("garbage that is not json")
        ws.send_json({"type": "unknown_command"})
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}


def test_create_match_event_over_websocket(client, make_token):
    admin = make_token("admin-ws", role="admin")
    headers = {"Authorization": f"Bearer {admin}"}
    match = _create_match(client, headers)

    with client.websocket_connect(f"/ws?token={admin}") as sender, client.websocket_connect("/ws") as viewer:
        sender.receive_json()
        viewer.receive_json()

        sender.send_json(
            {
                "type": "create_match_event",
                "data": {
                    "matchId": match["id"],
                    "eventType": "kill",
                    "description": "ZywOo AWP through smoke",
                    "metadata": {"weapon": "AWP", "round": 7},
                },
            }
        )
        broadcast = sender.receive_json()
        ack = sender.receive_json()
        seen_by_viewer = viewer.receive_json()

        assert broadcast["type"] == "match_event"
        assert ack["type"] == "create_match_event:ok"
        assert ack["data"]["id"]
        assert ack["data"]["matchId"] == match["id"]
        assert ack["data"]["timestamp"].endswith("Z")
        assert seen_by_viewer == broadcast

        viewer.send_json({"type": "get_match_events", "matchId": match["id"]})
        listed = viewer.receive_json()
        assert listed["type"] == "match_events"
        assert [e["id"] for e in listed["data"]] == [ack["data"]["id"]]

    events = client.get(f"/api/matches/{match['id']}/events").json()["data"]
    assert [e["description"] for e in events] == ["ZywOo AWP through smoke"]


def test_create_match_event_invalid_payload_over_websocket(client, make_token):
    admin = make_token("admin-ws-invalid", role="admin")
    with client.websocket_connect(f"/ws?token={admin}") as ws:
        ws.receive_json()
        ws.send_json({"type": "create_match_event", "data": {"eventType": "kill", "description": "x"}})
        reply = ws.receive_json()
        assert reply["type"] == "create_match_event:error"
        ws.send_json({"type": "ping"})
        # nothing was broadcast between the error and the pong
        assert ws.receive_json() == {"type": "pong"}


def test_anonymous_viewer_cannot_create_events(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"type": "create_match_event", "data": {"matchId": "m1", "eventType": "kill", "description": "x"}})
        assert ws.receive_json() == {"type": "create_match_event:error", "message": "Forbidden: admin role required"}


def test_get_match_events_requires_match_id(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"type": "get_match_events"})
        assert ws.receive_json() == {"type": "get_match_events:error", "message": "matchId required"}
