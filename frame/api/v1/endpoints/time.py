"""
Timer and Time Entry Endpoints Module

This module provides the timer (start, stop, switch, running) and the editing
of logged entries (day and week lists, updates, deletion and splitting).

A user has at most one running entry. The check below answers the common case
with a clear message; the partial unique index on time_entries settles the
race between two concurrent starts.
"""
import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from frame.api import deps
from frame.api.lookups import get_entry_or_404, get_project_or_404, get_task_or_404
from frame.core.dates import as_naive_utc, day_bounds, elapsed_minutes, utcnow, week_bounds
from frame.core.permissions import (
    Permission,
    can_delete_time_entry,
    can_modify_time_entry,
    can_read_all_time_entries,
)
from frame.db.session import get_db
from frame.models.organization import Organization
from frame.models.time_entry import (
    TimeEntry,
    TimeEntryReadWithRelations,
    TimeEntrySplit,
    TimeEntryUpdate,
    TimerStart,
    TimerStop,
    TimerSwitch,
)
from frame.models.user import User
from frame.schemas.time import EntryPeriod, HoursTotals, SplitResult, TimeEntryList
from frame.services.rounding import round_half_up

logger = logging.getLogger(__name__)

router = APIRouter()

# A timer switched within this many seconds of starting is replaced rather than kept
SWITCH_MERGE_SECONDS = 15

NON_NULLABLE_FIELDS = ("project_id", "started_at", "minutes", "billable")


def _running_entry(db: Session, user: User) -> Optional[TimeEntry]:
    return db.exec(
        select(TimeEntry).where(
            TimeEntry.org_id == user.org_id,
            TimeEntry.user_id == user.id,
            TimeEntry.ended_at == None,  # noqa: E711
        )
    ).first()


def _commit_new_entry(db: Session, entry: TimeEntry) -> TimeEntry:
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Timer is already running")
    db.refresh(entry)
    return entry


def _own_entry_or_404(db: Session, user: User, entry_id: int) -> TimeEntry:
    entry = get_entry_or_404(db, user.org_id, entry_id)
    if entry.user_id != user.id:
        raise HTTPException(status_code=404, detail="Time entry not found")
    return entry


def _stop(entry: TimeEntry, now) -> None:
    entry.ended_at = now
    entry.minutes = elapsed_minutes(entry.started_at, now)


@router.post("/start", response_model=TimeEntryReadWithRelations)
def start_timer(
    timer_in: TimerStart,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.TIME_ENTRY_CREATE)),
):
    """
    Start a timer on a project (and optionally one of its tasks).

    Raises:
        HTTPException 400: If the user already has a running timer
        HTTPException 404: If the project or task is not in the caller's organization
    """
    project = get_project_or_404(db, current_user.org_id, timer_in.project_id)
    if timer_in.task_id is not None:
        get_task_or_404(db, current_user.org_id, timer_in.task_id, project_id=project.id)

    if _running_entry(db, current_user):
        raise HTTPException(status_code=400, detail="Timer is already running")

    entry = _commit_new_entry(
        db,
        TimeEntry(
            org_id=current_user.org_id,
            user_id=current_user.id,
            project_id=project.id,
            task_id=timer_in.task_id,
            started_at=utcnow(),
            note=timer_in.note or None,
            billable=True,
        ),
    )
    logger.info("Timer %s started by user %s on project %s", entry.id, current_user.id, project.id)
    return entry


@router.post("/stop", response_model=TimeEntryReadWithRelations)
def stop_timer(
    timer_in: TimerStop,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Stop one of the caller's running timers.

    Raises:
        HTTPException 404: If the entry is not the caller's
        HTTPException 400: If the timer is already stopped
    """
    entry = _own_entry_or_404(db, current_user, timer_in.entry_id)
    if entry.ended_at is not None:
        raise HTTPException(status_code=400, detail="Timer is already stopped")

    _stop(entry, utcnow())
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("Timer %s stopped after %s minutes", entry.id, entry.minutes)
    return entry


@router.get("/running", response_model=Optional[TimeEntryReadWithRelations])
def read_running_timer(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    return _running_entry(db, current_user)


@router.post("/switch", response_model=TimeEntryReadWithRelations)
def switch_timer(
    switch_in: TimerSwitch,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.TIME_ENTRY_CREATE)),
):
    """
    Stop the running timer and start another one in a single step.

    A timer that ran for less than 15 seconds is treated as a mis-click: it is
    removed and the new timer inherits its start time.
    """
    entry = _own_entry_or_404(db, current_user, switch_in.from_entry_id)
    if entry.ended_at is not None:
        raise HTTPException(status_code=400, detail="Timer is already stopped")

    project = get_project_or_404(db, current_user.org_id, switch_in.to_project_id)
    if switch_in.to_task_id is not None:
        get_task_or_404(db, current_user.org_id, switch_in.to_task_id, project_id=project.id)

    now = utcnow()
    if (now - entry.started_at).total_seconds() < SWITCH_MERGE_SECONDS:
        started_at = entry.started_at
        db.delete(entry)
        logger.info("Timer %s discarded on switch", entry.id)
    else:
        started_at = now
        _stop(entry, now)
        db.add(entry)
    # The old entry must be closed or gone before the new one is inserted
    db.flush()

    new_entry = _commit_new_entry(
        db,
        TimeEntry(
            org_id=current_user.org_id,
            user_id=current_user.id,
            project_id=project.id,
            task_id=switch_in.to_task_id,
            started_at=started_at,
            note=switch_in.note or None,
            billable=True,
        ),
    )
    logger.info("Timer switched to %s on project %s", new_entry.id, project.id)
    return new_entry


@router.get("/entries", response_model=TimeEntryList)
def list_entries(
    view: str = Query("today", pattern="^(today|week)$"),
    day: Optional[date] = Query(None, alias="date"),
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Entries of one day or one week, newest first, with hour totals.

    Managers and owners may pass user_id to look at a team member's entries;
    for members the parameter is ignored.
    """
    target_user_id = current_user.id
    if user_id is not None and can_read_all_time_entries(current_user.role):
        target_user_id = user_id

    day = day or utcnow().date()
    if view == "week":
        org = db.get(Organization, current_user.org_id)
        week_start = getattr(org.week_start, "value", org.week_start) if org else "Mon"
        start, end = week_bounds(day, week_start)
    else:
        start, end = day_bounds(day)

    entries = db.exec(
        select(TimeEntry)
        .where(
            TimeEntry.org_id == current_user.org_id,
            TimeEntry.user_id == target_user_id,
            TimeEntry.started_at >= start,
            TimeEntry.started_at <= end,
        )
        .order_by(TimeEntry.started_at.desc())
    ).all()

    total_minutes = sum(e.minutes or 0 for e in entries)
    billable_minutes = sum(e.minutes or 0 for e in entries if e.billable)

    return TimeEntryList(
        entries=[TimeEntryReadWithRelations.model_validate(e) for e in entries],
        totals=HoursTotals(
            total_hours=round_half_up(total_minutes / 60, 1),
            billable_hours=round_half_up(billable_minutes / 60, 1),
            non_billable_hours=round_half_up((total_minutes - billable_minutes) / 60, 1),
        ),
        period=EntryPeriod(view=view, start_date=start, end_date=end),
    )


@router.patch("/entries/{entry_id}", response_model=TimeEntryReadWithRelations)
def update_entry(
    entry_id: int,
    entry_update: TimeEntryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Edit a logged entry.

    Closed entries keep ended_at equal to started_at plus minutes, so moving
    the start or changing the duration moves the end with it.

    Raises:
        HTTPException 403: If the caller may not edit this entry
        HTTPException 404: If the entry, project or task is not in the organization
    """
    entry = get_entry_or_404(db, current_user.org_id, entry_id)
    if not can_modify_time_entry(current_user.role, current_user.id, entry.user_id):
        raise HTTPException(status_code=403, detail="Permission denied")

    update_data = entry_update.model_dump(exclude_unset=True)
    # Only task and note can be cleared; a null for any other field leaves it as is
    for key in NON_NULLABLE_FIELDS:
        if key in update_data and update_data[key] is None:
            del update_data[key]

    if "project_id" in update_data:
        get_project_or_404(db, current_user.org_id, update_data["project_id"])
    if update_data.get("task_id") is not None:
        get_task_or_404(
            db, current_user.org_id, update_data["task_id"],
            project_id=update_data.get("project_id", entry.project_id),
        )
    if "started_at" in update_data:
        update_data["started_at"] = as_naive_utc(update_data["started_at"])

    for key, value in update_data.items():
        setattr(entry, key, value)

    if entry.ended_at is not None and ("started_at" in update_data or "minutes" in update_data):
        entry.ended_at = entry.started_at + timedelta(minutes=entry.minutes)

    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.delete("/entries/{entry_id}")
def delete_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Delete an entry. Members and managers may delete their own entries; owners any.
    """
    entry = get_entry_or_404(db, current_user.org_id, entry_id)
    if not can_delete_time_entry(current_user.role, current_user.id, entry.user_id):
        raise HTTPException(status_code=403, detail="Permission denied")

    db.delete(entry)
    db.commit()
    logger.info("Time entry %s deleted by user %s", entry_id, current_user.id)
    return {"success": True}


@router.post("/entries/{entry_id}/split", response_model=SplitResult)
def split_entry(
    entry_id: int,
    split_in: TimeEntrySplit,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Split a closed entry in two.

    The original keeps first_entry_minutes and ends split_at_minutes after its
    start. The new entry starts there, holds the remaining minutes, and copies
    every field the request leaves out from the original.

    Raises:
        HTTPException 400: If the entry is still running or the first part is
            not shorter than the whole
    """
    entry = get_entry_or_404(db, current_user.org_id, entry_id)
    if not can_modify_time_entry(current_user.role, current_user.id, entry.user_id):
        raise HTTPException(status_code=403, detail="Permission denied")
    if entry.ended_at is None or not entry.minutes:
        raise HTTPException(status_code=400, detail="Only completed entries can be split")
    if split_in.first_entry_minutes >= entry.minutes:
        raise HTTPException(
            status_code=400,
            detail="first_entry_minutes must be less than the entry's minutes",
        )

    second = split_in.second_entry.model_dump(exclude_unset=True)
    project_id = second.get("project_id") or entry.project_id
    if project_id != entry.project_id:
        get_project_or_404(db, current_user.org_id, project_id)
    task_id = second["task_id"] if "task_id" in second else entry.task_id
    if task_id is not None and task_id != entry.task_id:
        get_task_or_404(db, current_user.org_id, task_id, project_id=project_id)

    split_time = entry.started_at + timedelta(minutes=split_in.split_at_minutes)
    second_minutes = entry.minutes - split_in.first_entry_minutes

    split_off = TimeEntry(
        org_id=entry.org_id,
        user_id=entry.user_id,
        project_id=project_id,
        task_id=task_id,
        started_at=split_time,
        ended_at=split_time + timedelta(minutes=second_minutes),
        minutes=second_minutes,
        note=second["note"] if "note" in second else entry.note,
        billable=second["billable"] if second.get("billable") is not None else entry.billable,
    )

    entry.minutes = split_in.first_entry_minutes
    entry.ended_at = split_time
    db.add(entry)
    db.add(split_off)
    db.commit()
    db.refresh(entry)
    db.refresh(split_off)

    return SplitResult(
        original_entry=TimeEntryReadWithRelations.model_validate(entry),
        split_entry=TimeEntryReadWithRelations.model_validate(split_off),
    )
