from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum
from sqlmodel import SQLModel, Field

from dishdash.models.enums import UserRole
from dishdash.utils.dates import now_utc


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, index=True, unique=True)
    name: str = Field(max_length=255)
    # None until the first successful sign-in provisions it
    role: Optional[UserRole] = Field(default=None, sa_type=Enum(UserRole, name="user_role"))
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
