"""
Time Entries Endpoints Module

Manual time entry and a filtered list of the organization's entries.
"""
from datetime import date, datetime, time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from frame.api import deps
from frame.api.lookups import get_project_or_404, get_task_or_404
from frame.core.dates import as_naive_utc, elapsed_minutes
from frame.core.permissions import Permission, can_read_all_time_entries
from frame.db.session import get_db
from frame.models.time_entry import TimeEntry, TimeEntryCreate, TimeEntryReadWithRelations
from frame.models.user import User

router = APIRouter()


@router.get("", response_model=List[TimeEntryReadWithRelations])
def list_time_entries(
    project_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Retrieve the organization's entries, newest first.

    Members only ever see their own entries.

    Args:
        project_id: Only entries of this project
        start_date: Entries starting on or after this day
        end_date: Entries starting on or before this day
        limit: Maximum number of records to return (at most 100)
    """
    statement = select(TimeEntry).where(TimeEntry.org_id == current_user.org_id)
    if not can_read_all_time_entries(current_user.role):
        statement = statement.where(TimeEntry.user_id == current_user.id)
    if project_id is not None:
        statement = statement.where(TimeEntry.project_id == project_id)
    if start_date is not None:
        statement = statement.where(TimeEntry.started_at >= datetime.combine(start_date, time.min))
    if end_date is not None:
        statement = statement.where(TimeEntry.started_at <= datetime.combine(end_date, time.max))

    statement = statement.order_by(TimeEntry.started_at.desc()).limit(min(limit, 100))
    return db.exec(statement).all()


@router.post("", response_model=TimeEntryReadWithRelations, status_code=status.HTTP_201_CREATED)
def create_time_entry(
    entry_in: TimeEntryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.TIME_ENTRY_CREATE)),
):
    """
    Log a finished block of work.

    Raises:
        HTTPException 400: If the entry ends before it starts
        HTTPException 404: If the project or task is not in the caller's organization
    """
    started_at = as_naive_utc(entry_in.started_at)
    ended_at = as_naive_utc(entry_in.ended_at)
    if ended_at <= started_at:
        raise HTTPException(status_code=400, detail="ended_at must be after started_at")

    project = get_project_or_404(db, current_user.org_id, entry_in.project_id)
    if entry_in.task_id is not None:
        get_task_or_404(db, current_user.org_id, entry_in.task_id, project_id=project.id)

    entry = TimeEntry(
        org_id=current_user.org_id,
        user_id=current_user.id,
        project_id=project.id,
        task_id=entry_in.task_id,
        started_at=started_at,
        ended_at=ended_at,
        minutes=elapsed_minutes(started_at, ended_at),
        note=entry_in.note or None,
        billable=entry_in.billable,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry
