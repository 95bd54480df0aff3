"""
Organization Model Module

Organizations are the tenants of the system. Every other record carries the
id of the organization it belongs to, and every query is filtered by it.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field, AutoString

from frame.core.dates import utcnow


class WeekStart(str, Enum):
    MON = "Mon"
    SUN = "Sun"


class OrganizationBase(SQLModel):
    name: str = Field(nullable=False)
    timezone: str = Field(default="UTC")
    # First day of the week used by weekly views and the planning grid
    week_start: WeekStart = Field(default=WeekStart.MON, sa_type=AutoString)


class Organization(OrganizationBase, table=True):
    """
    Organization table model.

    Attributes:
        id: Auto-incrementing primary key
        name: Display name of the organization
        timezone: IANA timezone name (informational)
        week_start: "Mon" or "Sun"
        created_at: UTC timestamp of creation
    """
    __tablename__ = "organizations"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow)


class OrganizationRead(OrganizationBase):
    id: int


class OrganizationUpdate(SQLModel):
    name: Optional[str] = None
    timezone: Optional[str] = None
    week_start: Optional[WeekStart] = None
