from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from dishdash.models.enums import UserRole


class Principal(BaseModel):
    """Authenticated identity rebuilt from the session on every request."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str
    name: Optional[str] = None
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


class MagicLinkRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    callback_url: str = Field(default="/dashboard", alias="callbackUrl")


class MagicLinkResponse(BaseModel):
    url: str
