import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from watchd.core.enums import RoomEvent

logger = logging.getLogger(__name__)


def room_channel(room_id: int) -> str:
    return f"room:{room_id}"


class ConnectionManager:
    """Manages active WebSocket connections grouped by room channel."""

    def __init__(self):
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, room_id: int):
        self.active_connections.setdefault(room_channel(room_id), []).append(websocket)

    def disconnect(self, websocket: WebSocket, room_id: int):
        channel = room_channel(room_id)
        connections = self.active_connections.get(channel)
        if connections and websocket in connections:
            connections.remove(websocket)
            if not connections:
                del self.active_connections[channel]

    async def publish(self, room_id: int, event: RoomEvent, payload: Optional[Dict[str, Any]] = None):
        """Send ``event`` to every socket in the room's channel; dead sockets are dropped."""
        message = {"type": event.value, **(payload or {})}
        for connection in list(self.active_connections.get(room_channel(room_id), [])):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Failed to send {event.value} to a WebSocket client in room {room_id}: {e}")
                self.disconnect(connection, room_id)

    def connection_count(self, room_id: int) -> int:
        return len(self.active_connections.get(room_channel(room_id), []))


manager = ConnectionManager()
