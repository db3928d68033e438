from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field

from dishdash.utils.dates import now_utc


class Invite(SQLModel, table=True):
    __tablename__ = "invites"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code: str = Field(max_length=8, unique=True, index=True)
    email: Optional[str] = Field(default=None, max_length=255)
    created_by: UUID = Field(foreign_key="users.id")
    expires_at: datetime = Field(sa_type=DateTime(timezone=True), index=True)
    used_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    claimed_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
