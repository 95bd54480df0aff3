"""
Project profitability.

All monetary values are in CENTS. Cost accrues for every closed entry at the
user's cost rate; revenue accrues only for billable entries at the bill rate
chosen by RateResolver. Budget health compares what is left of the budget with
the budget itself:

    remaining / budget * 100 < 0   -> Over
    remaining / budget * 100 < 25  -> Tight   (exactly 0% is Tight)
    otherwise                      -> Healthy (exactly 25% is Healthy)
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from frame.models.client import ClientRead
from frame.models.project import BudgetType, Project
from frame.models.user import UserRole
from frame.schemas.profitability import (
    ManagerProjectView,
    MemberProjectView,
    ProfitabilitySummary,
    ProjectView,
)
from frame.services.rates import RateResolver
from frame.services.rounding import round_half_up, round_int

TIGHT_THRESHOLD_PERCENT = 25


class BudgetHealth(str, Enum):
    HEALTHY = "Healthy"
    TIGHT = "Tight"
    OVER = "Over"


@dataclass
class EntryLine:
    """The parts of a time entry and its user that profitability needs."""
    user_id: int
    role: str
    cost_rate_cents: Optional[int]
    minutes: Optional[int]
    billable: bool


@dataclass
class ProjectProfitability:
    burn_hours: float
    total_cost_cents: float
    total_revenue_cents: float
    gross_margin_cents: float
    gross_margin_percent: float
    effective_hourly_rate: float
    remaining_budget: Optional[float]
    budget_health: BudgetHealth
    entry_count: int


def classify_budget_health(remaining_percent: float) -> BudgetHealth:
    if remaining_percent < 0:
        return BudgetHealth.OVER
    if remaining_percent < TIGHT_THRESHOLD_PERCENT:
        return BudgetHealth.TIGHT
    return BudgetHealth.HEALTHY


def has_budget(project: Project) -> bool:
    # A zero budget value cannot be divided by, so it counts as no budget
    return bool(project.budget_type) and bool(project.budget_value)


def compute_profitability(
    project: Project, entries: Iterable[EntryLine], resolver: RateResolver
) -> ProjectProfitability:
    burn_hours = 0.0
    total_cost_cents = 0.0
    total_revenue_cents = 0.0
    entry_count = 0

    for entry in entries:
        entry_count += 1
        if entry.minutes is None:
            # Running timers have no duration yet
            continue
        hours = entry.minutes / 60
        burn_hours += hours

        total_cost_cents += hours * (entry.cost_rate_cents or 0)

        if entry.billable:
            bill_rate = resolver.resolve(project.id, entry.user_id, entry.role)
            total_revenue_cents += hours * bill_rate

    gross_margin_cents = total_revenue_cents - total_cost_cents
    gross_margin_percent = (
        gross_margin_cents / total_revenue_cents * 100 if total_revenue_cents > 0 else 0
    )
    effective_hourly_rate = total_revenue_cents / burn_hours if burn_hours > 0 else 0

    remaining_budget = None
    health = BudgetHealth.HEALTHY
    if has_budget(project):
        if project.budget_type == BudgetType.HOURS:
            remaining_budget = project.budget_value - burn_hours
        else:
            remaining_budget = project.budget_value - total_revenue_cents
        health = classify_budget_health(remaining_budget / project.budget_value * 100)

    return ProjectProfitability(
        burn_hours=burn_hours,
        total_cost_cents=total_cost_cents,
        total_revenue_cents=total_revenue_cents,
        gross_margin_cents=gross_margin_cents,
        gross_margin_percent=gross_margin_percent,
        effective_hourly_rate=effective_hourly_rate,
        remaining_budget=remaining_budget,
        budget_health=health,
        entry_count=entry_count,
    )


def build_project_view(role, project: Project, result: ProjectProfitability) -> ProjectView:
    """Members get budget health only; managers and owners get the financials."""
    base = dict(
        id=project.id,
        name=project.name,
        client=ClientRead.model_validate(project.client) if project.client else None,
        budget_type=project.budget_type,
        burn_hours=round_half_up(result.burn_hours, 1),
        budget_health=result.budget_health.value,
        is_retainer=project.is_retainer,
    )
    if getattr(role, "value", role) == UserRole.MEMBER.value:
        return MemberProjectView(**base)

    return ManagerProjectView(
        **base,
        budget_value=project.budget_value,
        burn_amount=(
            result.total_revenue_cents if project.budget_type == BudgetType.AMOUNT else None
        ),
        remaining_budget=result.remaining_budget,
        total_revenue_cents=result.total_revenue_cents,
        total_cost_cents=result.total_cost_cents,
        gross_margin_cents=result.gross_margin_cents,
        gross_margin_percent=round_half_up(result.gross_margin_percent, 1),
        effective_hourly_rate=round_int(result.effective_hourly_rate),
        default_bill_rate_cents=project.default_bill_rate_cents,
        entry_count=result.entry_count,
    )


def summarize(views: List[ProjectView]) -> ProfitabilitySummary:
    health = [v.budget_health for v in views]
    return ProfitabilitySummary(
        total_projects=len(views),
        healthy_projects=health.count(BudgetHealth.HEALTHY.value),
        tight_projects=health.count(BudgetHealth.TIGHT.value),
        over_budget_projects=health.count(BudgetHealth.OVER.value),
    )
