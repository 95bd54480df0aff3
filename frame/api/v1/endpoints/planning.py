"""
Planning Endpoints Module

The weekly allocation grid and the single-cell upsert used to edit it.
"""
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select

from frame.api import deps
from frame.api.lookups import get_project_or_404, get_user_or_404
from frame.core.config import settings
from frame.core.dates import start_of_week, utcnow
from frame.core.permissions import Permission
from frame.db.session import get_db
from frame.models.allocation import Allocation, AllocationWrite
from frame.models.organization import Organization
from frame.models.project import Project, ProjectRead, ProjectStatus
from frame.models.user import User
from frame.schemas.planning import AllocationWriteResult, PlanningGrid, PlanningPeriod
from frame.services.allocations import build_grid, build_week_headers, upsert_allocation, week_starts

router = APIRouter()


def _week_start_setting(org: Organization) -> str:
    return getattr(org.week_start, "value", org.week_start)


@router.get("/allocations", response_model=PlanningGrid)
def read_allocations(
    start_week: Optional[date] = None,
    weeks: int = Query(5, ge=1, le=12),
    user_id: Optional[int] = None,
    project_id: Optional[int] = None,
    db: Session = Depends(get_db),
    org: Organization = Depends(deps.get_current_organization),
    current_user: User = Depends(deps.RequirePermission(Permission.PLANNING_READ)),
):
    """
    Planned hours per team member and week, with utilization against capacity.

    Args:
        start_week: Any day of the first week shown; defaults to the current week
        weeks: Number of weeks shown (1-12)
        user_id: Only this team member
        project_id: Only allocations on this project
    """
    week_start = _week_start_setting(org)
    current_week = start_of_week(utcnow().date(), week_start)
    first_week = start_of_week(start_week, week_start) if start_week else current_week
    starts = week_starts(first_week, weeks)
    end_date = first_week + timedelta(weeks=weeks)

    user_statement = select(User).where(User.org_id == org.id, User.active == True)  # noqa: E712
    if user_id is not None:
        user_statement = user_statement.where(User.id == user_id)
    users = db.exec(user_statement.order_by(User.name)).all()

    project_statement = select(Project).where(
        Project.org_id == org.id, Project.status == ProjectStatus.ACTIVE
    )
    if project_id is not None:
        project_statement = project_statement.where(Project.id == project_id)
    projects = db.exec(project_statement.order_by(Project.name)).all()

    allocation_statement = select(Allocation).where(
        Allocation.org_id == org.id,
        Allocation.week_start_date >= first_week,
        Allocation.week_start_date < end_date,
    )
    if user_id is not None:
        allocation_statement = allocation_statement.where(Allocation.user_id == user_id)
    if project_id is not None:
        allocation_statement = allocation_statement.where(Allocation.project_id == project_id)
    allocations = db.exec(allocation_statement).all()

    return PlanningGrid(
        grid_data=build_grid(users, allocations, starts, settings.WEEKLY_CAPACITY_HOURS),
        week_headers=build_week_headers(starts, current_week),
        projects=[ProjectRead.model_validate(p) for p in projects],
        period=PlanningPeriod(start_date=first_week, end_date=end_date, weeks=weeks),
    )


@router.post("/allocations", response_model=AllocationWriteResult)
def write_allocation(
    allocation_in: AllocationWrite,
    db: Session = Depends(get_db),
    org: Organization = Depends(deps.get_current_organization),
    current_user: User = Depends(deps.RequirePermission(Permission.PLANNING_WRITE)),
):
    """
    Set the planned hours of one user on one project for one week.

    Zero hours clears the cell. The week date is moved back to the first day
    of its week.

    Raises:
        HTTPException 404: If the user or project is not in the caller's organization
    """
    get_user_or_404(db, org.id, allocation_in.user_id)
    get_project_or_404(db, org.id, allocation_in.project_id)

    allocation_in.week_start_date = start_of_week(
        allocation_in.week_start_date, _week_start_setting(org)
    )
    return upsert_allocation(db, org.id, allocation_in)
