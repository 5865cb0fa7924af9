from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from moturn.models.api import ApiModel
from moturn.models.item import ItemRead
from moturn.models.user import UserRead


class ChatRead(ApiModel):
    id: int
    item_id: int
    seller_id: str
    buyer_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChatCreate(ApiModel):
    item_id: int
    # ignored in favour of the item's seller; accepted for older clients
    seller_id: Optional[str] = None


class MessageRead(ApiModel):
    id: int
    chat_id: int
    sender_id: str
    content: str
    message_type: str = "text"
    created_at: Optional[datetime] = None


class MessageCreate(ApiModel):
    content: str = Field(min_length=1, max_length=2000)
    message_type: Literal["text", "image"] = "text"


class ChatWithDetails(ChatRead):
    item: Optional[ItemRead] = None
    seller: Optional[UserRead] = None
    buyer: Optional[UserRead] = None
    messages: List[MessageRead] = []
    last_message: Optional[MessageRead] = None
