"""
Security Utilities Module

JWT access tokens for API and browser sessions, plus hashing for the one-time
sign-in tokens that are emailed to users.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from jose import jwt
from passlib.context import CryptContext

from frame.core.config import settings

# Sign-in tokens are long random strings, so a fast salted hash is sufficient
token_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def create_access_token(
    subject: Union[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed JWT whose subject is the user's email address.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def generate_token() -> str:
    """32 random bytes, hex encoded."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return token_context.hash(token)


def verify_token(token: str, hashed: str) -> bool:
    return token_context.verify(token, hashed)
