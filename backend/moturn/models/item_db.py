from sqlalchemy import Column, DateTime, JSON
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import List, Optional

from moturn.db import utcnow


class Item(SQLModel, table=True):
    __tablename__ = "items"

    id: Optional[int] = Field(default=None, primary_key=True)
    seller_id: str = Field(foreign_key="users.id", index=True)
    title: str
    description: Optional[str] = None
    price: int
    category_id: int = Field(foreign_key="categories.id", index=True)
    # administrative neighborhood, e.g. 성수동
    region_code: str = Field(index=True)
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    status: str = Field(default="active", index=True)  # active, sold, hidden
    views: int = Field(default=0)
    is_negotiable: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)


class Like(SQLModel, table=True):
    __tablename__ = "likes"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    item_id: int = Field(foreign_key="items.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
