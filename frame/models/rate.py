"""
Rate Model Module

Three kinds of rate records:

1. ProjectUserRateOverride: bill rate for one user on one project (highest precedence)
2. ProjectRoleRateOverride: bill rate for one role on one project
3. RoleDefaultRate: organization-wide default cost and bill rates per role

When neither override applies, the project's default_bill_rate_cents is used.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, AutoString

from frame.core.dates import utcnow
from frame.models.user import UserRole


class ProjectUserRateOverride(SQLModel, table=True):
    __tablename__ = "project_user_rate_overrides"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_user_rate_override"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    user_id: int = Field(foreign_key="users.id")
    bill_rate_cents: int = Field(nullable=False)


class ProjectRoleRateOverride(SQLModel, table=True):
    __tablename__ = "project_role_rate_overrides"
    __table_args__ = (
        UniqueConstraint("project_id", "role_name", name="uq_role_rate_override"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    role_name: UserRole = Field(sa_type=AutoString)
    bill_rate_cents: int = Field(nullable=False)


class RoleDefaultRate(SQLModel, table=True):
    """
    Organization-level default rates by role, shown on the rates settings page.
    """
    __tablename__ = "role_default_rates"
    __table_args__ = (
        UniqueConstraint("org_id", "role_name", name="uq_role_default_rate"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)
    role_name: UserRole = Field(sa_type=AutoString)
    cost_rate_cents: Optional[int] = 0
    bill_rate_cents: Optional[int] = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class UserRateRead(SQLModel):
    id: int
    name: str
    email: str
    role: UserRole
    cost_rate_cents: Optional[int] = 0
    bill_rate_cents: Optional[int] = 0
    active: bool


class UserRateUpdate(SQLModel):
    user_id: int
    cost_rate_cents: int = Field(ge=0)
    bill_rate_cents: int = Field(ge=0)


class RoleRateUpdate(SQLModel):
    role_name: UserRole
    cost_rate_cents: int = Field(ge=0)
    bill_rate_cents: int = Field(ge=0)


class OverrideRateWrite(SQLModel):
    bill_rate_cents: int = Field(ge=0)


class ProjectRatesRead(SQLModel):
    project_id: int
    default_bill_rate_cents: Optional[int] = None
    user_overrides: List[ProjectUserRateOverride] = []
    role_overrides: List[ProjectRoleRateOverride] = []
