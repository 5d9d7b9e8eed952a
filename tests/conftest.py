import json

import pytest

from chat_user import ChatUser
from errors import DeliveryFailure
from registry import RoomRegistry


class FakeConnection:
    """Stands in for a transport send: records frames, or fails like a dead socket."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.calls = 0
        self.fail = fail

    async def __call__(self, data: str):
        self.calls += 1
        if self.fail:
            raise DeliveryFailure("connection closed")
        self.sent.append(data)

    @property
    def envelopes(self):
        return [json.loads(data) for data in self.sent]

    @property
    def last(self):
        return self.envelopes[-1]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def make_user(registry):
    """Factory: make_user(room_name, fail=False) -> (ChatUser, FakeConnection)."""
    def _make_user(room_name: str = "lobby", fail: bool = False):
        conn = FakeConnection(fail=fail)
        return ChatUser(conn, room_name, registry), conn
    return _make_user


@pytest.fixture
def make_member(make_user):
    """Factory for users that have already joined; their join traffic is cleared."""
    created = []

    async def _make_member(name: str, room_name: str = "lobby", fail: bool = False):
        user, conn = make_user(room_name, fail=fail)
        await user.handle_message(json.dumps({"type": "join", "name": name}))
        created.append(conn)
        for c in created:
            c.clear()
        return user, conn

    return _make_member
