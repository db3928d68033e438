from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr

from dishdash.models.enums import UserRole


class UserRead(BaseModel):
    id: UUID
    email: EmailStr
    name: str
    role: Optional[UserRole] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
