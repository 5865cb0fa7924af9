import json
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from moturn.realtime import chat_rooms

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


def frame_text(message: dict) -> Optional[str]:
    """Text payload of a websocket.receive message; binary frames are read as UTF-8."""
    if message.get("text") is not None:
        return message["text"]
    if message.get("bytes") is not None:
        try:
            return message["bytes"].decode("utf-8")
        except UnicodeDecodeError:
            logger.error("WebSocket message error: binary frame is not UTF-8")
    return None


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket):
    """
    Clients send {"type": "join_chat", "chatId": ...} for each chat they are viewing
    and receive {"type": "new_message", "message": ...} whenever one is posted there.
    """
    await websocket.accept()
    logger.info("WebSocket client connected")
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info("WebSocket client disconnected")
                break

            raw = frame_text(message)
            if raw is None:
                continue
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                logger.error(f"WebSocket message error: not JSON: {raw[:100]!r}")
                continue
            if not isinstance(frame, dict):
                logger.error("WebSocket message error: expected an object")
                continue

            if frame.get("type") == "join_chat" and frame.get("chatId") is not None:
                chat_rooms.join(frame["chatId"], websocket)
    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
    finally:
        chat_rooms.leave(websocket)
