from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class VerificationToken(SQLModel, table=True):
    """One-time sign-in token sent by email. Only a hash of the token is kept."""
    __tablename__ = "verification_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    identifier: str = Field(index=True, nullable=False)  # email address
    token_hash: str = Field(nullable=False)
    expires: datetime = Field(nullable=False)
