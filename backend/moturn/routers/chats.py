import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from moturn.auth.dependencies import get_current_user
from moturn.models.chat import ChatCreate, ChatRead, ChatWithDetails, MessageCreate, MessageRead
from moturn.realtime import chat_rooms
from moturn.storage import storage
from moturn.validation import parse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chats", tags=["Chats"])


def _participant_chat(chat_id: int, user: str) -> ChatRead:
    chat = storage.get_chat(chat_id)
    if not chat:
        raise HTTPException(status_code=404, detail="Chat not found")
    if user not in (chat.seller_id, chat.buyer_id):
        raise HTTPException(status_code=403, detail="Not a participant of this chat")
    return chat


@router.get("", response_model=List[ChatWithDetails])
def list_chats(user=Depends(get_current_user)):
    try:
        return storage.get_chats_by_user(user)
    except SQLAlchemyError:
        logger.exception("Error fetching chats")
        raise HTTPException(status_code=500, detail="Failed to fetch chats")


@router.post("", response_model=ChatRead)
def open_chat(payload: dict = Body(...), user=Depends(get_current_user)):
    """
    Open the caller's chat with the seller of an item, reusing it if it already exists.
    """
    data = parse(ChatCreate, payload, "Invalid chat data")
    item = storage.get_item_by_id(data.item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    if item.seller_id == user:
        raise HTTPException(status_code=400, detail="Cannot start a chat on your own item")

    try:
        chat, created = storage.get_or_create_chat(item.id, item.seller_id, user)
    except SQLAlchemyError:
        logger.exception("Error creating chat")
        raise HTTPException(status_code=500, detail="Failed to create chat")
    if created:
        logger.info(f"Chat {chat.id} opened on item {item.id} by {user}")
    return chat


@router.get("/{chat_id}", response_model=ChatWithDetails)
def get_chat(chat_id: int, user=Depends(get_current_user)):
    _participant_chat(chat_id, user)
    try:
        return storage.get_chat_with_messages(chat_id)
    except SQLAlchemyError:
        logger.exception(f"Error fetching chat {chat_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch chat")


@router.post("/{chat_id}/messages", response_model=MessageRead)
async def send_message(chat_id: int, payload: dict = Body(...), user=Depends(get_current_user)):
    data = parse(MessageCreate, payload, "Invalid message data")
    await run_in_threadpool(_participant_chat, chat_id, user)
    try:
        message = await run_in_threadpool(storage.create_message, chat_id, user, data)
    except SQLAlchemyError:
        logger.exception(f"Error creating message in chat {chat_id}")
        raise HTTPException(status_code=500, detail="Failed to create message")

    await chat_rooms.broadcast(chat_id, {
        "type": "new_message",
        "message": message.model_dump(mode="json", by_alias=True),
    })
    return message
