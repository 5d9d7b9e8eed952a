import uuid
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

from constants import COMMAND_MARKER, JOKE_TEXT, UNKNOWN_NAME
from errors import DeliveryFailure
from logging_config import get_logger
from registry import RoomRegistry, room_registry
from schemas.envelopes import (
    ChatEnvelope, JoinEnvelope, OutboundEnvelope,
    chat, decode_envelope, note, private_message, server_reply
)

logger = get_logger(__name__)

SendFunc = Callable[[str], Awaitable[None]]

# Failures that mean "this recipient is unreachable"; anything else propagates.
UNREACHABLE_ERRORS = (DeliveryFailure, ConnectionError)


class CommandKind(Enum):
    JOKE = COMMAND_MARKER + "joke"
    MEMBERS = COMMAND_MARKER + "members"
    PRIV = COMMAND_MARKER + "priv"
    NAME = COMMAND_MARKER + "name"

    @classmethod
    def parse(cls, token: str) -> Optional["CommandKind"]:
        try:
            return cls(token)
        except ValueError:
            return None


class ChatUser:
    """One client connection taking part in a room.

    `send` is the transport's delivery coroutine for this connection and is
    used by nobody else. The user is bound to a room at creation but only
    becomes a member once it joins.
    """

    def __init__(self, send: SendFunc, room_name: str, registry: Optional[RoomRegistry] = None):
        self._send = send
        self.id = uuid.uuid4().hex
        if registry is None:
            registry = room_registry
        self.room = registry.get(room_name)
        self.name: Optional[str] = None
        logger.info(f"Created chat user {self.id} in room {self.room.name}")

    @property
    def display_name(self) -> str:
        return self.name if self.name is not None else UNKNOWN_NAME

    async def send(self, data: str) -> bool:
        """Deliver `data` to this client. Returns False if it is unreachable."""
        try:
            await self._send(data)
        except UNREACHABLE_ERRORS as e:
            logger.debug(f"Could not deliver to user {self.id} ({self.name}): {e}")
            return False
        return True

    async def reply(self, envelope: OutboundEnvelope) -> bool:
        return await self.send(envelope.to_wire())

    async def handle_message(self, raw: Union[str, bytes]):
        """Decode one inbound frame and act on it.

        MalformedEnvelope / UnknownEnvelopeType propagate to the caller, who
        owns the connection.
        """
        envelope = decode_envelope(raw)
        logger.debug(f"Received {envelope.type} from user {self.id} in room {self.room.name}")

        if isinstance(envelope, JoinEnvelope):
            await self.handle_join(envelope.name)
        elif isinstance(envelope, ChatEnvelope):
            await self.handle_chat(envelope.text)
        else:
            await self.handle_command(envelope.text)

    async def handle_join(self, name: str):
        self.name = name
        self.room.join(self)
        await self.room.broadcast(note(f'{self.name} joined "{self.room.name}".'))

    async def handle_chat(self, text: str):
        await self.room.broadcast(chat(self.name, text))

    async def handle_command(self, text: str):
        parts = text.split()
        token = parts[0] if parts else text
        args = parts[1:]
        command = CommandKind.parse(token)

        if command is CommandKind.JOKE:
            await self.handle_joke()
        elif command is CommandKind.MEMBERS:
            await self.handle_members()
        elif command is CommandKind.PRIV:
            await self.handle_priv(args)
        elif command is CommandKind.NAME:
            await self.handle_name(args)
        else:
            logger.debug(f"Unknown command {token!r} from user {self.id}")
            await self.reply(server_reply(f"{token} is an unknown command."))

    async def handle_joke(self):
        await self.reply(server_reply(JOKE_TEXT))

    async def handle_members(self):
        names = self.room.member_names()
        await self.reply(server_reply(f"In room: {', '.join(names)}"))

    async def handle_priv(self, args: List[str]):
        """/priv <name> <message...>: deliver to the first member called <name>, echo to sender."""
        if len(args) < 2:
            await self.reply(server_reply(f"Usage: {CommandKind.PRIV.value} <name> <message>"))
            return

        target_name, words = args[0], args[1:]
        if target_name == self.name:
            await self.reply(server_reply("You cannot send a private message to yourself."))
            return

        target = next((m for m in self.room.members() if m.name == target_name), None)
        if target is None:
            await self.reply(server_reply(f"{target_name} is not in this room."))
            return

        data = private_message(self.name, target_name, " ".join(words)).to_wire()
        logger.debug(f"Private message in room {self.room.name} from {self.name} to {target_name}")
        await target.send(data)
        await self.send(data)

    async def handle_name(self, args: List[str]):
        if not args:
            await self.reply(server_reply("You must specify your new name."))
            return

        old_name, new_name = self.display_name, args[0]
        await self.room.broadcast(note(f"{old_name} changed their name to {new_name}."))
        self.name = new_name
        logger.info(f"User {self.id} renamed from {old_name} to {new_name} in room {self.room.name}")

    async def handle_close(self):
        """Connection closed: leave the room and tell the others."""
        self.room.leave(self)
        await self.room.broadcast(note(f"{self.display_name} left {self.room.name}."))

    def __repr__(self):
        return f"<ChatUser {self.id} name={self.name!r} room={self.room.name!r}>"
