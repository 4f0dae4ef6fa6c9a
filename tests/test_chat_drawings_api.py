import json

from extensions import db
from models import Room


def test_chat_messages_in_order(client, make_room):
    room_id = make_room()
    for text in ("first", "second", "third"):
        resp = client.post(
            f"/api/rooms/{room_id}/chat", json={"author_name": "park", "message": text}
        )
        assert resp.status_code == 200

    messages = client.get(f"/api/rooms/{room_id}/chat").get_json()["messages"]
    assert [m["message"] for m in messages] == ["first", "second", "third"]
    assert all(m["author_name"] == "park" for m in messages)


def test_chat_message_response(client, make_room):
    room_id = make_room()
    body = client.post(f"/api/rooms/{room_id}/chat", json={"message": "hey"}).get_json()
    assert body["room_id"] == room_id
    assert body["message"] == "hey"
    assert body["author_name"] == "Anonymous"


def test_empty_chat_message_rejected(client, make_room):
    room_id = make_room()
    resp = client.post(f"/api/rooms/{room_id}/chat", json={"message": "   "})
    assert resp.status_code == 400


def test_chat_missing_room(client):
    resp = client.post("/api/rooms/NOPE22/chat", json={"message": "hi"})
    assert resp.status_code == 404
    assert client.get("/api/rooms/NOPE22/chat").get_json() == {"messages": []}


def test_latest_drawing_wins(client, make_room):
    room_id = make_room()
    first = [{"x1": 0, "y1": 0, "x2": 5, "y2": 5, "color": "#000", "width": 2}]
    second = first + [{"x1": 5, "y1": 5, "x2": 9, "y2": 1, "color": "#f00", "width": 4}]

    client.post(
        f"/api/rooms/{room_id}/drawings",
        json={"drawing_data": json.dumps(first), "author_name": "choi"},
    )
    client.post(
        f"/api/rooms/{room_id}/drawings",
        json={"drawing_data": json.dumps(second), "author_name": "choi"},
    )

    drawings = client.get(f"/api/rooms/{room_id}/drawings").get_json()["drawings"]
    assert len(drawings) == 1
    assert json.loads(drawings[0]["drawing_data"]) == second


def test_drawing_payload_stored_verbatim(client, make_room):
    room_id = make_room()
    raw = "not even json"
    saved = client.post(
        f"/api/rooms/{room_id}/drawings", json={"drawing_data": raw}
    ).get_json()
    assert saved["drawing_data"] == raw
    assert saved["author_name"] == "Anonymous"


def test_drawing_list_payload_serialized(client, make_room):
    room_id = make_room()
    strokes = [{"x1": 1, "y1": 2, "x2": 3, "y2": 4, "color": "#123", "width": 1}]
    saved = client.post(
        f"/api/rooms/{room_id}/drawings", json={"drawing_data": strokes}
    ).get_json()
    assert json.loads(saved["drawing_data"]) == strokes


def test_drawing_requires_payload(client, make_room):
    room_id = make_room()
    resp = client.post(f"/api/rooms/{room_id}/drawings", json={"author_name": "x"})
    assert resp.status_code == 400


def test_no_drawings_yet(client, make_room):
    room_id = make_room()
    assert client.get(f"/api/rooms/{room_id}/drawings").get_json() == {"drawings": []}


def test_chat_message_updates_last_activity(app, client, make_room, backdate_activity):
    room_id = make_room()
    stale = backdate_activity(room_id)

    client.post(f"/api/rooms/{room_id}/chat", json={"message": "ping"})
    with app.app_context():
        assert db.session.get(Room, room_id).last_activity > stale


def test_drawing_save_leaves_last_activity(app, client, make_room, backdate_activity):
    room_id = make_room()
    stale = backdate_activity(room_id)

    client.post(f"/api/rooms/{room_id}/drawings", json={"drawing_data": "[]"})
    with app.app_context():
        assert db.session.get(Room, room_id).last_activity == stale
