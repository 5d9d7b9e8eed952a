import asyncio
import threading
from typing import TYPE_CHECKING, Dict, List

from logging_config import get_logger
from schemas.envelopes import OutboundEnvelope

if TYPE_CHECKING:
    from chat_user import ChatUser

logger = get_logger(__name__)


class Room:
    """A chat room: holds members and fans messages out to them.

    Members are keyed by ChatUser.id, so two members may share a display name
    and joining twice never yields two deliveries. The room does not own its
    members; it only holds them until they `leave`.
    """

    def __init__(self, name: str):
        self._name = name
        self._members: Dict[str, "ChatUser"] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def join(self, user: "ChatUser"):
        with self._lock:
            self._members[user.id] = user
            count = len(self._members)
        logger.info(f"User {user.id} ({user.name}) joined room {self._name} ({count} members)")

    def leave(self, user: "ChatUser"):
        with self._lock:
            removed = self._members.pop(user.id, None)
            count = len(self._members)
        if removed is not None:
            logger.info(f"User {user.id} ({user.name}) left room {self._name} ({count} members)")

    def members(self) -> List["ChatUser"]:
        """Point-in-time copy of the members, in join order."""
        with self._lock:
            return list(self._members.values())

    def member_names(self) -> List[str]:
        return [member.display_name for member in self.members()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._members)

    def __contains__(self, user: "ChatUser") -> bool:
        with self._lock:
            return user.id in self._members

    async def broadcast(self, envelope: OutboundEnvelope) -> int:
        """Send `envelope` to every member, the sender included.

        Each member gets one delivery attempt. A member that cannot be reached
        is skipped and stays in the room. Returns the number of successful
        deliveries.
        """
        data = envelope.to_wire()
        recipients = self.members()
        if not recipients:
            return 0

        # every member gets its attempt before any non-delivery error propagates
        results = await asyncio.gather(*(member.send(data) for member in recipients), return_exceptions=True)
        errors = [result for result in results if isinstance(result, BaseException)]
        delivered = sum(1 for result in results if result is True)
        logger.debug(f"Broadcast {envelope.type} to {delivered}/{len(recipients)} members of room {self._name}")
        if errors:
            raise errors[0]
        return delivered

    def __repr__(self):
        return f"<Room {self._name!r} members={len(self)}>"
