"""
Export Endpoints Module

Download time entries as CSV or JSON.
"""
import logging
from datetime import date, datetime, time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from sqlmodel import Session, select

from frame.api import deps
from frame.core.dates import utcnow
from frame.core.permissions import can_read_all_time_entries
from frame.db.session import get_db
from frame.models.time_entry import TimeEntry
from frame.models.user import User
from frame.services.export import EXPORT_LIMIT, export_filename, export_rows, rows_to_csv

logger = logging.getLogger(__name__)

router = APIRouter()


def _id_filter(value: Optional[str], name: str) -> Optional[int]:
    # "all" and an empty value both mean no filter
    if value is None or value in ("", "all"):
        return None
    try:
        return int(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}")


@router.get("/time-entries")
def export_time_entries(
    format: str = Query("csv", pattern="^(csv|json)$"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    project_id: Optional[str] = None,
    user_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Export the organization's time entries, newest first.

    Members can only export their own entries; a user_id filter naming
    someone else is ignored for them.
    """
    statement = select(TimeEntry).where(TimeEntry.org_id == current_user.org_id)
    if start_date is not None:
        statement = statement.where(TimeEntry.started_at >= datetime.combine(start_date, time.min))
    if end_date is not None:
        statement = statement.where(TimeEntry.started_at <= datetime.combine(end_date, time.max))

    project_filter = _id_filter(project_id, "project_id")
    if project_filter is not None:
        statement = statement.where(TimeEntry.project_id == project_filter)

    user_filter = _id_filter(user_id, "user_id")
    if not can_read_all_time_entries(current_user.role):
        user_filter = current_user.id
    if user_filter is not None:
        statement = statement.where(TimeEntry.user_id == user_filter)

    entries = db.exec(statement.order_by(TimeEntry.started_at.desc()).limit(EXPORT_LIMIT)).all()
    rows = export_rows(entries)
    filename = export_filename(start_date, end_date, utcnow().date())
    logger.info("User %s exported %s time entries as %s", current_user.id, len(rows), format)

    if format == "json":
        return JSONResponse(
            content=rows,
            headers={"Content-Disposition": f'attachment; filename="{filename}.json"'},
        )

    return Response(
        content=rows_to_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}.csv"'},
    )
