"""
Allocation Model Module

Planned hours for one user on one project in one week. The table is sparse:
a missing row means zero hours, and writing zero hours deletes the row.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from frame.core.dates import utcnow


class Allocation(SQLModel, table=True):
    """
    Allocation table model.

    Attributes:
        id: Auto-incrementing primary key
        org_id: Owning organization
        user_id: Planned team member
        project_id: Project the hours are planned on
        week_start_date: First day of the planned week
        planned_hours: Hours with one decimal place
        created_at: UTC timestamp of creation
    """
    __tablename__ = "allocations"
    __table_args__ = (
        UniqueConstraint(
            "org_id", "user_id", "project_id", "week_start_date",
            name="uq_allocations_user_project_week",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)
    user_id: int = Field(foreign_key="users.id")
    project_id: int = Field(foreign_key="projects.id")
    week_start_date: date = Field(index=True)
    planned_hours: Decimal = Field(default=Decimal("0"), max_digits=5, decimal_places=1)
    created_at: datetime = Field(default_factory=utcnow)


class AllocationWrite(SQLModel):
    user_id: int
    project_id: int
    week_start_date: date
    planned_hours: float = Field(ge=0, le=80)
