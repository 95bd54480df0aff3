"""
Resource planning.

Capacity is a fixed number of hours per user per week. For one user and one
week the planned hours of every project are added up and compared with it;
across a window of weeks the per-week utilization is averaged. Percentages
round half up.
"""
import logging
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from sqlmodel import Session, select

from frame.core.config import settings
from frame.models.allocation import Allocation, AllocationWrite
from frame.models.user import User
from frame.schemas.planning import (
    AllocationCell,
    AllocationRead,
    AllocationWriteResult,
    PlannedUser,
    UserPlanRow,
    WeekHeader,
    WeekUtilization,
)
from frame.services.rounding import round_int

logger = logging.getLogger(__name__)

WEEKLY_CAPACITY_HOURS = 40


def summarize_week(
    week_start: date,
    cells: Iterable[AllocationCell] = (),
    capacity: float = WEEKLY_CAPACITY_HOURS,
) -> WeekUtilization:
    cells = list(cells)
    total_planned = sum(c.planned_hours for c in cells)
    utilization = round_int(total_planned / capacity * 100) if capacity else 0
    return WeekUtilization(
        week_start=week_start,
        allocations=cells,
        total_planned=total_planned,
        capacity=capacity,
        variance=capacity - total_planned,
        utilization_percent=utilization,
    )


def average_utilization(weeks: Sequence[WeekUtilization]) -> int:
    if not weeks:
        return 0
    return round_int(sum(w.utilization_percent for w in weeks) / len(weeks))


def week_starts(first_week: date, weeks: int) -> List[date]:
    return [first_week + timedelta(weeks=i) for i in range(weeks)]


def build_week_headers(starts: Iterable[date], current_week: date) -> List[WeekHeader]:
    # Labels read like "Mar 03"
    return [
        WeekHeader(week_start=s, label=s.strftime("%b %d"), is_current_week=s == current_week)
        for s in starts
    ]


def build_grid(
    users: Iterable[User],
    allocations: Iterable[Allocation],
    starts: Sequence[date],
    capacity: Optional[float] = None,
) -> List[UserPlanRow]:
    """One row per user with a utilization summary for every week in `starts`."""
    if capacity is None:
        capacity = settings.WEEKLY_CAPACITY_HOURS

    cells: Dict[tuple, List[AllocationCell]] = {}
    for a in allocations:
        cells.setdefault((a.user_id, a.week_start_date), []).append(
            AllocationCell(id=a.id, project_id=a.project_id, planned_hours=float(a.planned_hours))
        )

    rows = []
    for user in users:
        weeks = [summarize_week(s, cells.get((user.id, s), ()), capacity) for s in starts]
        rows.append(
            UserPlanRow(
                user=PlannedUser(id=user.id, name=user.name, role=getattr(user.role, "value", user.role)),
                capacity=capacity,
                weeks=weeks,
                total_planned=sum(w.total_planned for w in weeks),
                average_utilization=average_utilization(weeks),
            )
        )
    return rows


def _to_read(allocation: Allocation) -> AllocationRead:
    return AllocationRead(
        id=allocation.id,
        user_id=allocation.user_id,
        project_id=allocation.project_id,
        week_start_date=allocation.week_start_date,
        planned_hours=float(allocation.planned_hours),
    )


def upsert_allocation(db: Session, org_id: int, data: AllocationWrite) -> AllocationWriteResult:
    """
    Write planned hours for one (user, project, week) cell.

    Hours are rounded half up to one decimal. Zero hours removes the row if
    there is one. Any other value creates the row or updates it in place.
    Callers check that the user and project belong to the organization.
    """
    existing = db.exec(
        select(Allocation).where(
            Allocation.org_id == org_id,
            Allocation.user_id == data.user_id,
            Allocation.project_id == data.project_id,
            Allocation.week_start_date == data.week_start_date,
        )
    ).first()

    # Stored with one decimal; anything that rounds to zero is no allocation
    hours = Decimal(str(data.planned_hours)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    if hours == 0:
        if existing is None:
            return AllocationWriteResult(action="unchanged")
        db.delete(existing)
        db.commit()
        logger.info(
            "Removed allocation user=%s project=%s week=%s",
            data.user_id, data.project_id, data.week_start_date,
        )
        return AllocationWriteResult(action="deleted")

    if existing is not None:
        existing.planned_hours = hours
        action = "updated"
    else:
        existing = Allocation(
            org_id=org_id,
            user_id=data.user_id,
            project_id=data.project_id,
            week_start_date=data.week_start_date,
            planned_hours=hours,
        )
        action = "created"

    db.add(existing)
    db.commit()
    db.refresh(existing)
    logger.info(
        "Allocation %s user=%s project=%s week=%s hours=%s",
        action, data.user_id, data.project_id, data.week_start_date, hours,
    )
    return AllocationWriteResult(action=action, allocation=_to_read(existing))
