"""
Profitability response schemas.

The report returns one of two shapes per project depending on the caller's
role. The `view` field tags which one it is.
"""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from frame.models.client import ClientRead
from frame.models.project import BudgetType


class ProjectViewBase(BaseModel):
    id: int
    name: str
    client: Optional[ClientRead] = None
    budget_type: Optional[BudgetType] = None
    burn_hours: float
    budget_health: Literal["Healthy", "Tight", "Over"]
    is_retainer: bool = False


class MemberProjectView(ProjectViewBase):
    view: Literal["member"] = "member"


class ManagerProjectView(ProjectViewBase):
    view: Literal["manager"] = "manager"
    budget_value: Optional[int] = None
    burn_amount: Optional[float] = None
    remaining_budget: Optional[float] = None
    total_revenue_cents: float
    total_cost_cents: float
    gross_margin_cents: float
    gross_margin_percent: float
    effective_hourly_rate: int
    default_bill_rate_cents: Optional[int] = None
    entry_count: int


ProjectView = Annotated[Union[MemberProjectView, ManagerProjectView], Field(discriminator="view")]


class ProfitabilitySummary(BaseModel):
    total_projects: int
    healthy_projects: int
    tight_projects: int
    over_budget_projects: int


class ProfitabilityReport(BaseModel):
    projects: List[ProjectView]
    summary: ProfitabilitySummary
