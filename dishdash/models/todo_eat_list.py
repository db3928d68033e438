from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum, Index, UniqueConstraint
from sqlmodel import SQLModel, Field

from dishdash.models.enums import TodoStatus
from dishdash.utils.dates import now_utc


class TodoEatListItem(SQLModel, table=True):
    __tablename__ = "todo_eat_list"
    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id", name="todo_eat_list_user_restaurant_idx"),
        Index("todo_eat_list_user_status_idx", "user_id", "status"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", ondelete="CASCADE")
    restaurant_id: UUID = Field(foreign_key="restaurants.id", ondelete="CASCADE", index=True)
    status: TodoStatus = Field(default=TodoStatus.todo, sa_type=Enum(TodoStatus, name="todo_status"))
    added_at: datetime = Field(default_factory=now_utc, sa_type=DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
