"""In-process room hub over FastAPI WebSockets."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Protocol

from meeting_activity.services.notifier import RealtimeChannel

logger = logging.getLogger(__name__)


class JsonSocket(Protocol):
    """The part of a WebSocket connection the hub writes to."""

    async def send_json(self, data: object) -> None:
        """Send a JSON-encoded frame."""


@dataclass
class WebSocketHub(RealtimeChannel):
    """Groups live connections into rooms and fans events out to them."""

    rooms: dict[str, set[JsonSocket]] = field(
        default_factory=lambda: defaultdict(set)
    )

    def join(self, room: str, socket: JsonSocket) -> None:
        """Subscribe a connection to a room."""
        self.rooms[room].add(socket)

    def discard(self, socket: JsonSocket) -> None:
        """Remove a connection from every room."""
        for room in list(self.rooms):
            members = self.rooms[room]
            members.discard(socket)
            if not members:
                del self.rooms[room]

    def members(self, room: str) -> set[JsonSocket]:
        return set(self.rooms.get(room, ()))

    async def emit(self, room: str, event: str, data: dict[str, object]) -> None:
        """Send an event frame to each member; failed members are dropped."""
        frame = {"event": event, "data": data}
        for socket in self.members(room):
            try:
                await socket.send_json(frame)
            except Exception:
                logger.warning(
                    "Dropping connection after failed send",
                    extra={"room": room, "event": event},
                    exc_info=True,
                )
                self.discard(socket)
