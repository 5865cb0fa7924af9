from datetime import datetime
from typing import Optional

from pydantic import Field

from moturn.models.api import ApiModel


class CategoryRead(ApiModel):
    id: int
    name: str
    slug: str
    created_at: Optional[datetime] = None


class CategoryCreate(ApiModel):
    name: str = Field(min_length=1, max_length=50)
    slug: str = Field(min_length=1, max_length=50, pattern=r"^[a-z0-9-]+$")
