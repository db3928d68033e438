from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import ARRAY, DateTime, JSON, String, Text
from sqlmodel import SQLModel, Field

from dishdash.utils.dates import now_utc


class Restaurant(SQLModel, table=True):
    __tablename__ = "restaurants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=200)
    location: str = Field(max_length=200)
    # ARRAY on PostgreSQL, JSON elsewhere (tests run on SQLite)
    cuisine_tags: list[str] = Field(
        default_factory=list,
        sa_type=ARRAY(String).with_variant(JSON(), "sqlite"),
    )
    photo_url: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, sa_type=Text)
    created_by: UUID = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
