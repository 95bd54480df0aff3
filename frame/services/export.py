"""
Time entry export as CSV or JSON rows.
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from frame.models.time_entry import TimeEntry
from frame.services.rounding import round_half_up

EXPORT_COLUMNS = [
    "Date",
    "Start Time",
    "End Time",
    "Duration",
    "Duration (Minutes)",
    "Duration (Hours)",
    "User",
    "User Email",
    "Client",
    "Project",
    "Task",
    "Description",
    "Billable",
    "Created At",
]

EXPORT_LIMIT = 10000


def format_duration(minutes: int) -> str:
    """Minutes as H:MM, e.g. 95 -> "1:35"."""
    return f"{minutes // 60}:{minutes % 60:02d}"


def export_row(entry: TimeEntry) -> Dict[str, Any]:
    minutes = entry.minutes or 0
    project = entry.project
    client = project.client if project else None
    return {
        "Date": entry.started_at.strftime("%Y-%m-%d"),
        "Start Time": entry.started_at.strftime("%H:%M"),
        "End Time": entry.ended_at.strftime("%H:%M") if entry.ended_at else "",
        "Duration": format_duration(minutes),
        "Duration (Minutes)": minutes,
        "Duration (Hours)": round_half_up(minutes / 60, 2),
        "User": entry.user.name if entry.user else "",
        "User Email": entry.user.email if entry.user else "",
        "Client": client.name if client else "",
        "Project": project.name if project else "",
        "Task": entry.task.name if entry.task else "",
        "Description": entry.note or "",
        "Billable": "Yes" if entry.billable else "No",
        "Created At": entry.created_at.strftime("%Y-%m-%d %H:%M:%S") if entry.created_at else "",
    }


def export_rows(entries: Iterable[TimeEntry]) -> List[Dict[str, Any]]:
    return [export_row(e) for e in entries]


def rows_to_csv(rows: List[Dict[str, Any]]) -> str:
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    return df.to_csv(index=False)


def export_filename(start: Optional[date], end: Optional[date], today: date) -> str:
    if start and end:
        return f"time-entries-{start.isoformat()}_to_{end.isoformat()}"
    return f"time-entries-{today.isoformat()}"
