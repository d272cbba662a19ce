import pytest
from starlette.websockets import WebSocketDisconnect

from watchd.core.dependencies import get_optional_catalog
from watchd.main import app


def _create_room(client, headers, filters=None, name=None):
    payload = {}
    if filters is not None:
        payload["filters"] = filters
    if name is not None:
        payload["name"] = name
    response = client.post("/rooms", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


def _swipe(client, headers, room_id, movie_id, direction="right"):
    return client.post(
        "/swipes", json={"movie_id": movie_id, "room_id": room_id, "direction": direction}, headers=headers
    )


def test_match_flow_over_http(client, guest, notifier):
    alice_id, alice = guest("Alice")
    bob_id, bob = guest("Bob")
    room = _create_room(client, alice)

    feed = client.get("/movies/feed", params={"room_id": room["id"], "page": 1}, headers=alice)
    assert feed.status_code == 200
    movies = feed.json()["movies"]
    assert len(movies) == 20
    assert movies[0]["id"] == 550
    assert movies[0]["streaming_options"][0]["provider_name"] == "Netflix"

    first = _swipe(client, alice, room["id"], 550)
    assert first.status_code == 201
    assert first.json()["match"] is None

    joined = client.post("/rooms/join", json={"code": room["code"].lower()}, headers=bob)
    assert joined.status_code == 200
    assert joined.json()["joined"] is True
    assert joined.json()["room"]["status"] == "active"

    second = _swipe(client, bob, room["id"], 550)
    assert second.status_code == 201
    match = second.json()["match"]
    assert match["movie_id"] == 550
    assert match["movie_title"] == "Movie 550"
    assert notifier.kinds() == ["partner_joined", "match"]
    assert notifier.events[-1][0] == room["id"]

    repeat = _swipe(client, bob, room["id"], 550)
    assert repeat.json()["match"] is None

    matches = client.get(f"/matches/{room['id']}", headers=alice)
    assert matches.status_code == 200
    assert [m["movie_id"] for m in matches.json()] == [550]
    assert matches.json()[0]["movie"]["title"] == "Movie 550"

    match_id = matches.json()[0]["id"]
    watched = client.patch(f"/matches/{room['id']}/{match_id}", json={"watched": True}, headers=bob)
    assert watched.status_code == 200
    assert watched.json()["watched"] is True


def test_feed_hides_swiped_movies(client, guest):
    _, alice = guest()
    room = _create_room(client, alice)
    _swipe(client, alice, room["id"], 550, "left")

    movies = client.get("/movies/feed", params={"room_id": room["id"]}, headers=alice).json()["movies"]

    assert 550 not in [m["id"] for m in movies]
    assert len(movies) == 20


def test_feed_and_swipes_are_closed_to_outsiders(client, guest):
    _, alice = guest()
    _, mallory = guest()
    room = _create_room(client, alice)

    assert client.get("/movies/feed", params={"room_id": room["id"]}, headers=mallory).status_code == 403
    assert client.get("/movies/feed", params={"room_id": 9999}, headers=alice).status_code == 404
    assert _swipe(client, mallory, room["id"], 550).status_code == 403
    assert _swipe(client, alice, 9999, 550).status_code == 404
    assert client.get(f"/matches/{room['id']}", headers=mallory).status_code == 403
    assert client.get(f"/rooms/{room['id']}", headers=mallory).status_code == 403


def test_swipe_validation(client, guest):
    _, alice = guest()
    room = _create_room(client, alice)

    assert _swipe(client, alice, room["id"], 550, "up").status_code == 422
    assert _swipe(client, alice, room["id"], 0).status_code == 422


def test_filter_update_rebuilds_stack_and_notifies(client, guest, catalog, notifier):
    _, alice = guest()
    room = _create_room(client, alice, filters={"genres": [35], "mood": "cozy"})
    assert room["filters"] == {"genres": [35], "mood": "cozy"}
    catalog.pages = {1: [777, 778]}

    response = client.patch(
        f"/rooms/{room['id']}/filters",
        json={"filters": {"streamingServices": ["netflix"], "yearFrom": 2015}},
        headers=alice,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["movie_count"] == 2
    assert body["room"]["filters"] == {"streamingServices": ["netflix"], "yearFrom": 2015}
    assert notifier.kinds() == ["filters_updated"]
    feed = client.get("/movies/feed", params={"room_id": room["id"]}, headers=alice).json()
    assert [m["id"] for m in feed["movies"]] == [777, 778]


def test_room_lifecycle_over_http(client, guest, notifier):
    alice_id, alice = guest("Alice")
    bob_id, bob = guest("Bob")
    _, carol = guest("Carol")
    room = _create_room(client, alice, name="Movie night")
    client.post("/rooms/join", json={"code": room["code"]}, headers=bob)

    assert client.post("/rooms/join", json={"code": room["code"]}, headers=carol).status_code == 409
    assert client.post("/rooms/join", json={"code": "ZZZZZZ"}, headers=carol).status_code == 404

    detail = client.get(f"/rooms/{room['id']}", headers=bob).json()
    assert [m["name"] for m in detail["members"]] == ["Alice", "Bob"]

    renamed = client.patch(f"/rooms/{room['id']}", json={"name": "Date night"}, headers=bob)
    assert renamed.json()["name"] == "Date night"

    left = client.delete(f"/rooms/{room['id']}/leave", headers=bob)
    assert left.json() == {"last_member": False, "room_deleted": False}
    dissolved = client.delete(f"/rooms/{room['id']}/leave", headers=alice)
    assert dissolved.json() == {"last_member": True, "room_deleted": False}
    assert notifier.kinds() == ["partner_joined", "partner_left", "room_dissolved"]

    assert client.post("/rooms/join", json={"code": room["code"]}, headers=carol).status_code == 410
    assert [r["status"] for r in client.get("/rooms", headers=alice).json()] == ["dissolved"]

    first = client.delete(f"/rooms/{room['id']}/archive", headers=alice)
    assert first.json() == {"success": True, "room_deleted": False}
    assert client.get("/rooms", headers=alice).json() == []
    second = client.delete(f"/rooms/{room['id']}/archive", headers=bob)
    assert second.json() == {"success": True, "room_deleted": True}
    assert client.get(f"/rooms/{room['id']}", headers=bob).status_code == 404


def test_create_room_without_catalog_is_unavailable(client, guest):
    _, alice = guest()
    app.dependency_overrides[get_optional_catalog] = lambda: None

    response = client.post("/rooms", json={}, headers=alice)

    assert response.status_code == 503
    assert client.get("/rooms", headers=alice).json() == []


def test_room_name_validation(client, guest):
    _, alice = guest()
    assert client.post("/rooms", json={"name": "x" * 65}, headers=alice).status_code == 422
    assert client.post("/rooms", json={"filters": {"minRating": 11}}, headers=alice).status_code == 422


def test_favorites(client, guest):
    _, alice = guest()

    first = client.post("/favorites", json={"movie_id": 550}, headers=alice)
    again = client.post("/favorites", json={"movie_id": 550}, headers=alice)
    assert first.status_code == 201
    assert first.json()["id"] == again.json()["id"]

    listed = client.get("/favorites", headers=alice).json()
    assert [f["movie_id"] for f in listed] == [550]
    assert listed[0]["movie"]["title"] == "Movie 550"

    assert client.delete("/favorites/550", headers=alice).json() == {"success": True, "removed": True}
    assert client.delete("/favorites/550", headers=alice).json() == {"success": True, "removed": False}
    assert client.get("/favorites", headers=alice).json() == []


def test_popular_movies_skip_entries_without_overview(client, guest, catalog):
    _, alice = guest()
    catalog.popular = [
        {"id": 550, "title": "Fight Club", "overview": "Rules.", "genre_ids": [18], "release_date": "1999-10-15"},
        {"id": 551, "title": "No Overview", "overview": "  ", "genre_ids": [18]},
    ]

    response = client.get("/movies/popular", headers=alice)

    assert response.status_code == 200
    movies = response.json()["movies"]
    assert [m["id"] for m in movies] == [550]
    assert movies[0]["genres"] == ["Drama"]
    assert movies[0]["streaming_options"][0]["provider_name"] == "Netflix"


def test_websocket_receives_room_events(client, guest):
    alice_id, alice = guest()
    _, bob = guest()
    room = _create_room(client, alice)
    token = alice["Authorization"].split(" ", 1)[1]

    with client.websocket_connect(f"/rooms/{room['id']}/ws?token={token}") as websocket:
        assert websocket.receive_json() == {"type": "joined", "room_id": room["id"]}
        client.post("/rooms/join", json={"code": room["code"]}, headers=bob)
        event = websocket.receive_json()

    assert event["type"] == "partner_joined"


def test_websocket_rejects_missing_token_and_outsiders(client, guest):
    _, alice = guest()
    _, mallory = guest()
    room = _create_room(client, alice)
    token = mallory["Authorization"].split(" ", 1)[1]

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/rooms/{room['id']}/ws"):
            pass
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/rooms/{room['id']}/ws?token={token}"):
            pass


def test_repeated_leave_publishes_once(client, guest, notifier):
    _, alice = guest()
    _, bob = guest()
    room = _create_room(client, alice)
    client.post("/rooms/join", json={"code": room["code"]}, headers=bob)

    first = client.delete(f"/rooms/{room['id']}/leave", headers=bob)
    second = client.delete(f"/rooms/{room['id']}/leave", headers=bob)

    assert first.json() == {"last_member": False, "room_deleted": False}
    assert second.status_code == 200
    assert second.json() == {"last_member": False, "room_deleted": False}
    assert notifier.kinds() == ["partner_joined", "partner_left"]
