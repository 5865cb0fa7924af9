from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional

from moturn.config import DEFAULT_REGION_CODE
from moturn.db import utcnow


class User(SQLModel, table=True):
    __tablename__ = "users"

    # subject claim from the identity provider
    id: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, unique=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    nickname: Optional[str] = None
    location: Optional[str] = Field(default=DEFAULT_REGION_CODE)
    phone_verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
