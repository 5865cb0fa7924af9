from datetime import datetime
from typing import Optional

from moturn.models.api import ApiModel


class UserRead(ApiModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    nickname: Optional[str] = None
    location: Optional[str] = None
    phone_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserUpsert(ApiModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    nickname: Optional[str] = None
    location: Optional[str] = None
    phone_verified: Optional[bool] = None
