from sqlalchemy import Column, DateTime, JSON
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Any, Dict


class AuthSession(SQLModel, table=True):
    __tablename__ = "sessions"

    sid: str = Field(primary_key=True)
    sess: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    expire: datetime = Field(index=True, sa_type=DateTime)
