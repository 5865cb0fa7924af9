"""
In-process fan-out for chat messages.

Each room is keyed by the chat id as a string and holds the sockets that sent
a ``join_chat`` for it. Membership lives only in this process; a restart drops
every room and clients have to join again.
"""
import json
import logging
from typing import Any, Dict

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

logger = logging.getLogger(__name__)


class ChatRoomRegistry:
    def __init__(self):
        # room id -> {id(socket): socket}; starlette sockets are not hashable
        self.rooms: Dict[str, Dict[int, WebSocket]] = {}

    def join(self, chat_id: Any, websocket: WebSocket) -> None:
        room_id = str(chat_id)
        self.rooms.setdefault(room_id, {})[id(websocket)] = websocket
        logger.debug(f"Socket {id(websocket)} joined chat {room_id}")

    def leave(self, websocket: WebSocket) -> None:
        """Drop a socket from every room it joined."""
        for room_id, members in list(self.rooms.items()):
            members.pop(id(websocket), None)
            if not members:
                del self.rooms[room_id]

    def room_size(self, chat_id: Any) -> int:
        return len(self.rooms.get(str(chat_id), {}))

    def clear(self) -> None:
        self.rooms.clear()

    async def broadcast(self, chat_id: Any, payload: Dict[str, Any]) -> int:
        """Send payload to every open socket in the room. Returns how many sends went out."""
        members = self.rooms.get(str(chat_id))
        if not members:
            return 0

        data = json.dumps(payload, default=str)
        sent = 0
        for websocket in list(members.values()):
            if websocket.client_state != WebSocketState.CONNECTED:
                continue
            try:
                await websocket.send_text(data)
                sent += 1
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.warning(f"Dropping message for socket {id(websocket)} in chat {chat_id}: {e}")
        return sent


chat_rooms = ChatRoomRegistry()
