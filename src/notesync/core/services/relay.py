"""Realtime relay - fan-out of live edits to co-viewers of a note."""

import logging
import uuid
from typing import Any, Dict, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything able to push a JSON frame to one client (e.g. a WebSocket)."""

    async def send_json(self, data: Any) -> None: ...


class Relay:
    """Tracks which connections view which note and broadcasts between them.

    Delivery is best effort: nothing is stored and late joiners get no replay.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._rooms: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Set[str]] = {}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def is_registered(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def register(self, connection: Connection, connection_id: Optional[str] = None) -> str:
        connection_id = connection_id or uuid.uuid4().hex
        self._connections[connection_id] = connection
        self._memberships.setdefault(connection_id, set())
        logger.info(f"Connection {connection_id} registered")
        return connection_id

    def join(self, connection_id: str, room_id: str) -> None:
        if connection_id not in self._connections:
            raise KeyError(f"Unknown connection {connection_id}")
        self._rooms.setdefault(room_id, set()).add(connection_id)
        self._memberships[connection_id].add(room_id)
        logger.info(f"Connection {connection_id} joined note room {room_id}")

    def leave(self, connection_id: str) -> None:
        """Forget a connection and remove it from every room."""
        self._connections.pop(connection_id, None)
        for room_id in self._memberships.pop(connection_id, set()):
            members = self._rooms.get(room_id)
            if members is None:
                continue
            members.discard(connection_id)
            if not members:
                del self._rooms[room_id]
        logger.info(f"Connection {connection_id} left")

    def room_members(self, room_id: str) -> Set[str]:
        return set(self._rooms.get(room_id, ()))

    async def broadcast(
        self,
        room_id: str,
        exclude_connection_id: Optional[str],
        event: str,
        payload: Dict[str, Any],
    ) -> int:
        """Send an event to every room member except the originator.

        Returns the number of successful deliveries. Connections that fail
        to receive are dropped.
        """
        delivered = 0
        frame = {"event": event, "data": payload}
        for connection_id in self.room_members(room_id):
            if connection_id == exclude_connection_id:
                continue
            connection = self._connections.get(connection_id)
            if connection is None:
                continue
            try:
                await connection.send_json(frame)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping connection {connection_id} after failed send: {e}")
                self.leave(connection_id)
        return delivered
