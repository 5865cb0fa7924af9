from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from moturn.config import DEFAULT_REGION_CODE
from moturn.models.api import ApiModel
from moturn.models.category import CategoryRead
from moturn.models.user import UserRead

ItemStatus = Literal["active", "sold", "hidden"]


class ItemRead(ApiModel):
    id: int
    seller_id: str
    title: str
    description: Optional[str] = None
    price: int
    category_id: int
    region_code: str
    images: List[str] = []
    status: str = "active"
    views: int = 0
    is_negotiable: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ItemCounts(ApiModel):
    likes: int = 0
    chats: int = 0


class ItemWithDetails(ItemRead):
    seller: Optional[UserRead] = None
    category: Optional[CategoryRead] = None
    counts: ItemCounts = Field(default_factory=ItemCounts, alias="_count")
    is_liked: bool = False


class ItemCreate(ApiModel):
    """Fields accepted from the listing form; images arrive separately as files."""

    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    price: int = Field(ge=0)
    category_id: int
    region_code: str = Field(default=DEFAULT_REGION_CODE, min_length=1)
    is_negotiable: bool = False
    status: ItemStatus = "active"


class ItemStatusUpdate(ApiModel):
    status: ItemStatus


class LikeToggle(ApiModel):
    is_liked: bool
