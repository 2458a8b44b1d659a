import pytest


@pytest.fixture
def admin_headers(client, make_token):
    return {"Authorization": f"Bearer {make_token('admin-http', role='admin')}"}


def _drain_welcome(ws):
    assert ws.receive_json()["type"] == "connected"


def test_team_crud_broadcasts_after_response(client, admin_headers):
    with client.websocket_connect("/ws") as ws:
        _drain_welcome(ws)

        created = client.post("/api/teams", json={"name": "Vitality", "acronym": "VIT", "country": "FRA"}, headers=admin_headers)
        assert created.status_code == 201
        team = created.json()["data"]
        assert ws.receive_json() == {"type": "team_created", "data": team}

        updated = client.patch(f"/api/teams/{team['id']}", json={"wins": 3}, headers=admin_headers).json()["data"]
        msg = ws.receive_json()
        assert msg["type"] == "team_updated"
        assert msg["data"]["wins"] == 3
        assert msg["data"] == updated

        resp = client.delete(f"/api/teams/{team['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert ws.receive_json() == {"type": "team_deleted", "data": {"id": team["id"]}}


def test_match_update_sends_match_update_then_match_updated(client, admin_headers):
    t1 = client.post("/api/teams", json={"name": "G2"}, headers=admin_headers).json()["data"]
    t2 = client.post("/api/teams", json={"name": "MOUZ"}, headers=admin_headers).json()["data"]
    match = client.post(
        "/api/matches", json={"team1Id": t1["id"], "team2Id": t2["id"], "tournament": "Major"}, headers=admin_headers
    ).json()["data"]
    assert match["status"] == "upcoming"
    assert match["startedAt"] is None

    with client.websocket_connect("/ws") as ws:
        _drain_welcome(ws)
        resp = client.patch(
            f"/api/matches/{match['id']}",
            json={"team1Score": 6, "status": "live", "currentMap": "Mirage"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        body = resp.json()["data"]

        first, second = ws.receive_json(), ws.receive_json()
        assert first["type"] == "match_update"
        assert second["type"] == "match_updated"
        assert first["data"] == second["data"] == body
        assert body["team1Score"] == 6
        assert body["currentMap"] == "Mirage"
        assert body["tournament"] == "Major"
        assert body["startedAt"].endswith("Z")


def test_http_match_event_broadcasts_match_event(client, admin_headers):
    t1 = client.post("/api/teams", json={"name": "Spirit"}, headers=admin_headers).json()["data"]
    t2 = client.post("/api/teams", json={"name": "Liquid"}, headers=admin_headers).json()["data"]
    match = client.post("/api/matches", json={"team1Id": t1["id"], "team2Id": t2["id"]}, headers=admin_headers).json()["data"]

    with client.websocket_connect("/ws") as ws:
        _drain_welcome(ws)
        resp = client.post(
            f"/api/matches/{match['id']}/events",
            json={"eventType": "ace", "description": "donk ace on Inferno"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert ws.receive_json() == {"type": "match_event", "data": resp.json()["data"]}


def test_failed_mutation_does_not_broadcast(client, admin_headers):
    with client.websocket_connect("/ws") as ws:
        _drain_welcome(ws)
        resp = client.patch("/api/teams/does-not-exist", json={"wins": 1}, headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["type"] == "TeamNotFound"
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}


def test_mutations_require_admin(client, make_token):
    viewer = {"Authorization": f"Bearer {make_token('plain-user')}"}
    assert client.post("/api/teams", json={"name": "Cloud9"}).status_code == 401
    assert client.post("/api/teams", json={"name": "Cloud9"}, headers=viewer).status_code == 403


def test_comment_permissions_and_broadcasts(client, admin_headers, make_token):
    author = {"Authorization": f"Bearer {make_token('author')}"}
    other = {"Authorization": f"Bearer {make_token('other')}"}
    moderator = {"Authorization": f"Bearer {make_token('mod', role='moderator')}"}
    article = client.post("/api/news", json={"title": "Major recap", "content": "..."}, headers=admin_headers).json()["data"]
    assert article["authorId"] == "admin-http"

    with client.websocket_connect("/ws") as ws:
        _drain_welcome(ws)
        comment = client.post(
            "/api/comments", json={"articleId": article["id"], "content": "GG"}, headers=author
        ).json()["data"]
        assert ws.receive_json()["type"] == "comment_created"

        assert client.patch(f"/api/comments/{comment['id']}", json={"content": "hacked"}, headers=other).status_code == 403
        edited = client.patch(f"/api/comments/{comment['id']}", json={"content": "GG WP"}, headers=author)
        assert edited.status_code == 200
        msg = ws.receive_json()
        assert msg["type"] == "comment_updated"
        assert msg["data"]["content"] == "GG WP"

        assert client.delete(f"/api/comments/{comment['id']}", headers=other).status_code == 403
        assert client.delete(f"/api/comments/{comment['id']}", headers=moderator).status_code == 200
        assert ws.receive_json() == {"type": "comment_deleted", "data": {"id": comment["id"]}}


def test_favorites_are_owner_scoped(client, admin_headers, make_token):
    fan = {"Authorization": f"Bearer {make_token('fan')}"}
    stranger = {"Authorization": f"Bearer {make_token('stranger')}"}
    team = client.post("/api/teams", json={"name": "Astralis"}, headers=admin_headers).json()["data"]

    favorite = client.post("/api/favorites", json={"teamId": team["id"]}, headers=fan).json()["data"]
    assert favorite["userId"] == "fan"
    assert client.delete(f"/api/favorites/{favorite['id']}", headers=stranger).status_code == 403
    assert [f["id"] for f in client.get("/api/favorites", headers=fan).json()["data"]] == [favorite["id"]]
    assert client.delete(f"/api/favorites/{favorite['id']}", headers=fan).status_code == 200
    assert client.get("/api/favorites", headers=fan).json()["data"] == []


def test_current_user_endpoint(client, make_token):
    token = make_token("someone", role="moderator")
    resp = client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == "someone"
    assert resp.json()["data"]["role"] == "moderator"
