from typing import Optional

from pydantic import BaseModel, EmailStr


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    email: Optional[str] = None


class MagicLinkRequest(BaseModel):
    email: EmailStr


class MagicLinkSent(BaseModel):
    message: str
    email: str
