"""
Project Model Module

This module defines the Project model: the unit that time is logged against,
budgets are tracked on and rates are configured for.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field, Relationship, AutoString

from frame.core.dates import utcnow
from frame.models.client import Client, ClientRead


class BudgetType(str, Enum):
    HOURS = "hours"
    AMOUNT = "amount"  # cents


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class ProjectBase(SQLModel):
    """
    Base Project fields shared by the table and its read schema.
    """
    name: str = Field(nullable=False)
    status: ProjectStatus = Field(default=ProjectStatus.ACTIVE, sa_type=AutoString)

    # Budget - budget_type and budget_value are either both set or both null.
    # budget_value is hours for an hours budget and cents for an amount budget.
    budget_type: Optional[BudgetType] = Field(default=None, sa_type=AutoString)
    budget_value: Optional[int] = None

    # Fallback bill rate when no user or role override applies
    default_bill_rate_cents: Optional[int] = None

    is_retainer: bool = False


class Project(ProjectBase, table=True):
    """
    Project table model.

    Attributes:
        id: Auto-incrementing primary key
        org_id: Owning organization
        client_id: Optional client the project is billed to
        name: Project name
        status: "active" or "archived"; archived projects drop out of lists and reports
        budget_type: "hours", "amount" or None
        budget_value: Budget size in hours or cents
        default_bill_rate_cents: Project-wide bill rate
        is_retainer: Retainer projects are flagged in profitability views
        created_at: UTC timestamp of creation
    """
    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)
    client_id: Optional[int] = Field(default=None, foreign_key="clients.id")
    created_at: datetime = Field(default_factory=utcnow)

    client: Optional[Client] = Relationship()


class ProjectRead(ProjectBase):
    id: int
    client_id: Optional[int] = None
    client: Optional[ClientRead] = None


class ProjectCreate(SQLModel):
    name: str = Field(min_length=1)
    client_name: Optional[str] = None
    default_bill_rate_cents: Optional[int] = Field(default=None, ge=0)
    budget_type: Optional[BudgetType] = None
    budget_value: Optional[int] = Field(default=None, ge=0)
    is_retainer: bool = False


class ProjectUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ProjectStatus] = None
    is_retainer: Optional[bool] = None


class ProjectBudgetUpdate(SQLModel):
    budget_type: Optional[BudgetType] = None
    budget_value: Optional[int] = Field(default=None, ge=0)
    default_bill_rate_cents: Optional[int] = Field(default=None, ge=0)
