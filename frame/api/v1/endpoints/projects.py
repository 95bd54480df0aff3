"""
Project Endpoints Module

This module provides endpoints for projects, their tasks and budgets, and the
profitability report. Every query is scoped to the caller's organization.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from frame.api import deps
from frame.api.lookups import get_project_or_404
from frame.core.permissions import Permission
from frame.db.session import get_db
from frame.models.allocation import Allocation
from frame.models.client import Client
from frame.models.project import (
    Project,
    ProjectBudgetUpdate,
    ProjectCreate,
    ProjectRead,
    ProjectStatus,
    ProjectUpdate,
)
from frame.models.rate import ProjectRoleRateOverride, ProjectUserRateOverride
from frame.models.task import Task, TaskCreate, TaskRead
from frame.models.time_entry import TimeEntry
from frame.models.user import User
from frame.schemas.profitability import ProfitabilityReport
from frame.services.profitability import (
    EntryLine,
    build_project_view,
    compute_profitability,
    summarize,
)
from frame.services.rates import load_rate_resolver

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ProjectRead])
def list_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Retrieve the active projects of the caller's organization, ordered by name.
    """
    statement = (
        select(Project)
        .where(Project.org_id == current_user.org_id, Project.status == ProjectStatus.ACTIVE)
        .order_by(Project.name)
    )
    return db.exec(statement).all()


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    project_in: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.PROJECT_CREATE)),
):
    """
    Create a new project.

    When a client name is given, the organization's client with that name is
    reused, or created if there is none.

    Raises:
        HTTPException 400: If only one of budget_type and budget_value is given
    """
    if (project_in.budget_type is None) != (project_in.budget_value is None):
        raise HTTPException(
            status_code=400,
            detail="budget_type and budget_value must be provided together",
        )

    client_id = None
    client_name = (project_in.client_name or "").strip()
    if client_name:
        client = db.exec(
            select(Client).where(Client.org_id == current_user.org_id, Client.name == client_name)
        ).first()
        if not client:
            client = Client(org_id=current_user.org_id, name=client_name)
            db.add(client)
            db.flush()
        client_id = client.id

    project = Project(
        org_id=current_user.org_id,
        client_id=client_id,
        name=project_in.name,
        default_bill_rate_cents=project_in.default_bill_rate_cents,
        budget_type=project_in.budget_type,
        budget_value=project_in.budget_value,
        is_retainer=project_in.is_retainer,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Project %s created in org %s", project.id, project.org_id)
    return project


@router.get("/profitability", response_model=ProfitabilityReport)
def read_profitability(
    project_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Profitability of the organization's active projects.

    Members receive budget health only. Managers and owners receive revenue,
    cost, margin and remaining budget as well.

    Args:
        project_id: Restrict the report to one project

    Returns:
        ProfitabilityReport: One view per project plus health counts
    """
    statement = select(Project).where(
        Project.org_id == current_user.org_id,
        Project.status == ProjectStatus.ACTIVE,
    )
    if project_id is not None:
        statement = statement.where(Project.id == project_id)
    projects = db.exec(statement.order_by(Project.name)).all()

    resolver = load_rate_resolver(db, current_user.org_id, projects)

    lines = {p.id: [] for p in projects}
    if lines:
        rows = db.exec(
            select(TimeEntry, User)
            .join(User, TimeEntry.user_id == User.id)
            .where(
                TimeEntry.org_id == current_user.org_id,
                TimeEntry.project_id.in_(list(lines)),
            )
        ).all()
        for entry, user in rows:
            lines[entry.project_id].append(
                EntryLine(
                    user_id=user.id,
                    role=user.role,
                    cost_rate_cents=user.cost_rate_cents,
                    minutes=entry.minutes,
                    billable=entry.billable,
                )
            )

    views = [
        build_project_view(
            current_user.role, project, compute_profitability(project, lines[project.id], resolver)
        )
        for project in projects
    ]
    return ProfitabilityReport(projects=views, summary=summarize(views))


@router.get("/{project_id}", response_model=ProjectRead)
def read_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return get_project_or_404(db, current_user.org_id, project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    project_update: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.PROJECT_UPDATE)),
):
    """
    Update the name, status or retainer flag of a project.

    Raises:
        HTTPException 404: If the project doesn't exist in the caller's organization
    """
    project = get_project_or_404(db, current_user.org_id, project_id)

    for key, value in project_update.model_dump(exclude_unset=True).items():
        setattr(project, key, value)

    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@router.patch("/{project_id}/budget", response_model=ProjectRead)
def update_project_budget(
    project_id: int,
    budget_update: ProjectBudgetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.PROJECT_UPDATE)),
):
    """
    Set or clear the budget and default bill rate of a project.

    Raises:
        HTTPException 400: If the result would have a budget type without a
            value, or a value without a type
    """
    project = get_project_or_404(db, current_user.org_id, project_id)

    update_data = budget_update.model_dump(exclude_unset=True)
    budget_type = update_data.get("budget_type", project.budget_type)
    budget_value = update_data.get("budget_value", project.budget_value)
    if (budget_type is None) != (budget_value is None):
        raise HTTPException(
            status_code=400,
            detail="budget_type and budget_value must both be set or both be null",
        )

    for key, value in update_data.items():
        setattr(project, key, value)

    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Budget of project %s set to %s %s", project.id, budget_type, budget_value)
    return project


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.PROJECT_DELETE)),
):
    """
    Delete a project together with its tasks, rate overrides and allocations.

    Raises:
        HTTPException 404: If the project doesn't exist in the caller's organization
        HTTPException 409: If time has been logged against the project
    """
    project = get_project_or_404(db, current_user.org_id, project_id)

    has_entries = db.exec(
        select(TimeEntry.id).where(TimeEntry.project_id == project.id).limit(1)
    ).first()
    if has_entries is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Project has time entries; archive it instead",
        )

    for model in (Task, ProjectUserRateOverride, ProjectRoleRateOverride, Allocation):
        for row in db.exec(select(model).where(model.project_id == project.id)).all():
            db.delete(row)
    db.delete(project)
    db.commit()
    logger.info("Project %s deleted from org %s", project_id, current_user.org_id)
    return {"status": "success", "detail": "Project deleted"}


@router.get("/{project_id}/tasks", response_model=List[TaskRead])
def list_project_tasks(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    project = get_project_or_404(db, current_user.org_id, project_id)
    statement = (
        select(Task)
        .where(Task.project_id == project.id, Task.active == True)  # noqa: E712
        .order_by(Task.name)
    )
    return db.exec(statement).all()


@router.post("/{project_id}/tasks", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_project_task(
    project_id: int,
    task_in: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.PROJECT_UPDATE)),
):
    project = get_project_or_404(db, current_user.org_id, project_id)
    task = Task(org_id=current_user.org_id, project_id=project.id, name=task_in.name)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task
