from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum, Index, Text, UniqueConstraint
from sqlmodel import SQLModel, Field

from dishdash.models.enums import PriceBand
from dishdash.utils.dates import now_utc


class Visit(SQLModel, table=True):
    __tablename__ = "visits"
    __table_args__ = (
        Index("visits_user_id_visited_at_idx", "user_id", "visited_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    restaurant_id: UUID = Field(foreign_key="restaurants.id", ondelete="CASCADE", index=True)
    user_id: UUID = Field(foreign_key="users.id", ondelete="CASCADE")
    visited_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
    rating: Optional[int] = None  # 1-5
    price_band: Optional[PriceBand] = Field(
        default=None,
        sa_type=Enum(PriceBand, name="price_band", values_callable=lambda bands: [b.value for b in bands]),
    )
    notes: Optional[str] = Field(default=None, sa_type=Text)
    photo_url: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))


class VisitCompanion(SQLModel, table=True):
    __tablename__ = "visit_companions"
    __table_args__ = (
        UniqueConstraint("visit_id", "friend_id", name="visit_companions_visit_friend_idx"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    visit_id: UUID = Field(foreign_key="visits.id", ondelete="CASCADE", index=True)
    friend_id: UUID = Field(foreign_key="friends.id", ondelete="CASCADE", index=True)
    created_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
