import threading
from typing import Dict, List, Optional

from logging_config import get_logger
from room import Room

logger = get_logger(__name__)


class RoomRegistry:
    """Process-wide mapping of room name to Room.

    Rooms are created on first reference and kept for the lifetime of the
    process, empty or not.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()
        logger.debug("Initializing RoomRegistry")

    def get(self, name: str) -> Room:
        """Return the room called `name`, creating it if needed."""
        with self._lock:
            room = self._rooms.get(name)
            if room is None:
                room = Room(name)
                self._rooms[name] = room
                logger.info(f"Created room {name}")
            return room

    def find(self, name: str) -> Optional[Room]:
        """Return the room called `name` without creating it."""
        with self._lock:
            return self._rooms.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._rooms)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)


room_registry = RoomRegistry()


def get_registry() -> RoomRegistry:
    """FastAPI dependency returning the process-wide registry."""
    return room_registry
