"""
User Model Module

This module defines the User model and UserRole enumeration for authentication
and authorization throughout the application.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field, AutoString

from frame.core.dates import utcnow


class UserRole(str, Enum):
    """
    Enumeration of user roles defining permission levels in the system.

    Role hierarchy (from least to most privileged):
    - MEMBER: Tracks their own time and sees basic project health
    - MANAGER: Plans allocations, manages rates and sees full financials
    - OWNER: Everything a manager can do plus team and organization administration

    The permissions each role grants live in frame.core.permissions.
    """
    MEMBER = "member"
    MANAGER = "manager"
    OWNER = "owner"


class User(SQLModel, table=True):
    """
    User model representing a person inside one organization.

    Users sign in with emailed one-time links, so no password is stored.

    Attributes:
        id: Auto-incrementing primary key
        org_id: Organization the user belongs to
        name: Display name
        email: Sign-in address (unique across the system)
        role: One UserRole value
        cost_rate_cents: Internal hourly cost used for profitability
        bill_rate_cents: Per-user default bill rate (stored for rate management)
        active: Inactive users cannot sign in and are left out of planning
        created_at: UTC timestamp of account creation
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)

    name: str = Field(nullable=False)
    email: str = Field(unique=True, index=True, nullable=False)

    role: UserRole = Field(default=UserRole.MEMBER, sa_type=AutoString)

    # Rates in cents per hour
    cost_rate_cents: Optional[int] = 0
    bill_rate_cents: Optional[int] = 0

    active: bool = True
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_manager(self) -> bool:
        """Helper to check if user has manager-level access."""
        return self.role in (UserRole.MANAGER, UserRole.OWNER)
