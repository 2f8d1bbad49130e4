"""
Room manager for handling multiple concurrent Shape Drop rooms.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TypeVar

import numpy as np

from schemas.game_config import RoomConfig

from .game_room import GameRoom, new_room

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RoomSession:
    """Represents an active room and the lock serializing its operations."""
    room: GameRoom
    created_at: float
    last_updated: float
    lock: threading.Lock = field(default_factory=threading.Lock)


class RoomManager:
    """
    Manages multiple concurrent rooms.

    Room ids are chosen by the caller. Every operation on a room should go
    through ``run`` so that one operation is fully applied before the next
    one on the same room starts.
    """

    def __init__(self, config: Optional[RoomConfig] = None):
        """
        Initialize room manager.

        Args:
            config: Default configuration for rooms created without one
        """
        self.config = config
        self.rooms: Dict[str, RoomSession] = {}
        self._registry_lock = threading.Lock()

    def create_room(
        self,
        room_id: str,
        is_cpu_game: bool = False,
        config: Optional[RoomConfig] = None,
        rng: Optional[np.random.RandomState] = None,
    ) -> GameRoom:
        """
        Create a new room.

        Args:
            room_id: Room identifier
            is_cpu_game: Whether the room plays against the computer
            config: Room configuration, falls back to the manager default
            rng: Random source for the room

        Returns:
            The created room

        Raises:
            ValueError: if ``room_id`` is already in use
        """
        with self._registry_lock:
            if room_id in self.rooms:
                raise ValueError(f"Room {room_id} already exists")
            room = new_room(room_id, is_cpu_game=is_cpu_game, config=config or self.config, rng=rng)
            now = time.time()
            self.rooms[room_id] = RoomSession(room=room, created_at=now, last_updated=now)
        return room

    def get_room(self, room_id: str) -> Optional[GameRoom]:
        """Get room by ID."""
        session = self.rooms.get(room_id)
        return session.room if session else None

    def run(self, room_id: str, operation: Callable[[GameRoom], T]) -> Optional[T]:
        """
        Apply ``operation`` to a room while holding that room's lock.

        Returns the operation's result, or None if the room does not exist.
        """
        session = self.rooms.get(room_id)
        if session is None:
            logger.debug(f"Room {room_id} not found")
            return None

        with session.lock:
            result = operation(session.room)
            session.last_updated = time.time()
        return result

    def remove_room(self, room_id: str) -> bool:
        with self._registry_lock:
            return self.rooms.pop(room_id, None) is not None

    def room_ids(self) -> List[str]:
        return list(self.rooms.keys())

    def cleanup_old_rooms(self, max_age_hours: float = 24) -> int:
        """Clean up rooms untouched for longer than ``max_age_hours``."""
        current_time = time.time()
        max_age_seconds = max_age_hours * 3600

        with self._registry_lock:
            rooms_to_remove = [
                room_id for room_id, session in self.rooms.items()
                if current_time - session.last_updated > max_age_seconds
            ]
            for room_id in rooms_to_remove:
                del self.rooms[room_id]

        if rooms_to_remove:
            logger.info(f"Removed {len(rooms_to_remove)} stale rooms")
        return len(rooms_to_remove)
