from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class VerificationToken(SQLModel, table=True):
    """Single-use magic link token, keyed by (identifier, token).

    ``token`` holds the hash of the value sent by email, never the raw value.
    """

    __tablename__ = "verification_tokens"

    identifier: str = Field(primary_key=True)
    token: str = Field(primary_key=True, unique=True)
    expires: datetime = Field(sa_type=DateTime(timezone=True))
