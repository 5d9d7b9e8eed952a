import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app import app
from registry import RoomRegistry, get_registry


@pytest.fixture
def client():
    registry = RoomRegistry()
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_join_chat_and_leave(client):
    with client.websocket_connect("/chat/lobby") as alice:
        alice.send_json({"type": "join", "name": "alice"})
        assert alice.receive_json() == {"type": "note", "text": 'alice joined "lobby".'}

        with client.websocket_connect("/chat/lobby") as bob:
            bob.send_json({"type": "join", "name": "bob"})
            joined = {"type": "note", "text": 'bob joined "lobby".'}
            assert alice.receive_json() == joined
            assert bob.receive_json() == joined

            bob.send_json({"type": "chat", "text": "hi alice"})
            said = {"name": "bob", "type": "chat", "text": "hi alice"}
            assert alice.receive_json() == said
            assert bob.receive_json() == said

        assert alice.receive_json() == {"type": "note", "text": "bob left lobby."}


def test_commands_over_websocket(client):
    with client.websocket_connect("/chat/lobby") as alice:
        alice.send_json({"type": "join", "name": "alice"})
        alice.receive_json()

        alice.send_json({"type": "command", "text": "/members"})
        assert alice.receive_json() == {"name": "server", "type": "chat", "text": "In room: alice"}

        alice.send_json({"type": "command", "text": "/foo bar"})
        assert alice.receive_json()["text"] == "/foo is an unknown command."


def test_malformed_envelope_closes_connection(client):
    with client.websocket_connect("/chat/lobby") as ws:
        ws.send_text("this is not json")
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_text()
    assert exc_info.value.code == 1003


def test_unknown_envelope_type_closes_connection(client):
    with client.websocket_connect("/chat/lobby") as ws:
        ws.send_json({"type": "dance", "text": "hi"})
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_text()
    assert exc_info.value.code == 1003


def test_room_listing_and_details(client):
    assert client.get("/rooms/").json() == {"rooms": []}
    assert client.get("/rooms/lobby").status_code == 404

    with client.websocket_connect("/chat/lobby") as alice:
        alice.send_json({"type": "join", "name": "alice"})
        alice.receive_json()

        assert client.get("/rooms/").json() == {"rooms": [{"name": "lobby", "member_count": 1}]}
        assert client.get("/rooms/lobby").json() == {"name": "lobby", "member_count": 1, "members": ["alice"]}

    # rooms outlive their members
    assert client.get("/rooms/lobby").json() == {"name": "lobby", "member_count": 0, "members": []}


def test_binary_frame_with_json_envelope(client):
    with client.websocket_connect("/chat/lobby") as alice:
        alice.send_bytes(b'{"type": "join", "name": "alice"}')
        assert alice.receive_json() == {"type": "note", "text": 'alice joined "lobby".'}


def test_binary_frame_with_garbage_closes_connection(client):
    with client.websocket_connect("/chat/lobby") as ws:
        ws.send_bytes(b"\xff\x00\x01")
        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_text()
    assert exc_info.value.code == 1003
