from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from dishdash.utils.dates import now_utc


class Friend(SQLModel, table=True):
    __tablename__ = "friends"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    email: Optional[str] = Field(default=None, max_length=255, unique=True)
    photo_url: Optional[str] = Field(default=None, max_length=500)
    # set when the friend also has an account
    user_id: Optional[UUID] = Field(default=None, foreign_key="users.id", unique=True, index=True)
    created_by: UUID = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
