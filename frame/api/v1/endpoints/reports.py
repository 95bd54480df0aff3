"""
Report Endpoints Module

Time summaries for managers, grouped by project, user or day.
"""
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select

from frame.api import deps
from frame.db.session import get_db
from frame.models.client import Client
from frame.models.project import Project
from frame.models.task import Task
from frame.models.time_entry import TimeEntry
from frame.models.user import User
from frame.services import reports

router = APIRouter()


@router.get("/projects", response_model=Dict[str, Any])
def project_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    project_id: Optional[int] = None,
    user_id: Optional[int] = None,
    group_by: str = Query("project", pattern="^(project|user|date)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    """
    Summaries of completed time entries.

    Args:
        start_date: Entries starting on or after this day
        end_date: Entries starting on or before this day
        project_id: Only this project
        user_id: Only this team member
        group_by: "project", "user" or "date"

    Returns:
        dict: summaries, overall totals, the entries themselves and metadata
    """
    statement = (
        select(TimeEntry, Project, User, Client, Task)
        .join(Project, TimeEntry.project_id == Project.id)
        .join(User, TimeEntry.user_id == User.id)
        .outerjoin(Client, Project.client_id == Client.id)
        .outerjoin(Task, TimeEntry.task_id == Task.id)
        .where(
            TimeEntry.org_id == current_user.org_id,
            TimeEntry.ended_at != None,  # noqa: E711
        )
    )
    if start_date is not None:
        statement = statement.where(TimeEntry.started_at >= datetime.combine(start_date, time.min))
    if end_date is not None:
        statement = statement.where(TimeEntry.started_at <= datetime.combine(end_date, time.max))
    if project_id is not None:
        statement = statement.where(TimeEntry.project_id == project_id)
    if user_id is not None:
        statement = statement.where(TimeEntry.user_id == user_id)

    rows = db.exec(statement.order_by(TimeEntry.started_at.desc())).all()
    lines = [
        reports.ReportLine(
            entry_id=entry.id,
            started_at=entry.started_at,
            ended_at=entry.ended_at,
            minutes=entry.minutes or 0,
            billable=entry.billable,
            note=entry.note,
            project_id=project.id,
            project_name=project.name,
            client_name=client.name if client else None,
            user_id=user.id,
            user_name=user.name,
            task_id=task.id if task else None,
            task_name=task.name if task else None,
        )
        for entry, project, user, client, task in rows
    ]

    return {
        "summaries": reports.summarize(lines, group_by),
        "totals": reports.totals(lines),
        "entries": [reports.flatten(line) for line in lines],
        "metadata": {
            "total_entries": len(lines),
            "date_range": (
                {"start": lines[-1].started_at, "end": lines[0].started_at} if lines else None
            ),
            "group_by": group_by,
            "filters": {
                "start_date": start_date,
                "end_date": end_date,
                "project_id": project_id,
                "user_id": user_id,
            },
        },
    }
