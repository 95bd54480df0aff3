"""
Time reports.

Entries are summarized by project, by user or by calendar day. Hours are
rounded to two decimals; minutes stay exact.
"""
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from frame.services.rounding import round_half_up

GROUP_BY_CHOICES = ("project", "user", "date")

# Grouping column and the name lists each summary carries
GROUPINGS = {
    "project": ("project_id", {"users": "user_name"}),
    "user": ("user_id", {"projects": "project_name"}),
    "date": ("date", {"projects": "project_name", "users": "user_name"}),
}


@dataclass
class ReportLine:
    entry_id: int
    started_at: datetime
    ended_at: Optional[datetime]
    minutes: int
    billable: bool
    note: Optional[str]
    project_id: int
    project_name: str
    client_name: Optional[str]
    user_id: int
    user_name: str
    task_id: Optional[int] = None
    task_name: Optional[str] = None


LINE_COLUMNS = [f.name for f in fields(ReportLine)]


def hours(minutes: int) -> float:
    return round_half_up(minutes / 60, 2)


def _tally(total: int, billable: int, count: int) -> Dict[str, Any]:
    non_billable = total - billable
    return {
        "total_minutes": total,
        "billable_minutes": billable,
        "non_billable_minutes": non_billable,
        "entry_count": count,
        "total_hours": hours(total),
        "billable_hours": hours(billable),
        "non_billable_hours": hours(non_billable),
    }


def build_line_frame(lines: List[ReportLine]) -> pd.DataFrame:
    """One row per entry, with the billable minutes and the calendar day split out."""
    df = pd.DataFrame([asdict(line) for line in lines], columns=LINE_COLUMNS)
    df["started_at"] = pd.to_datetime(df["started_at"])
    df["billable"] = df["billable"].astype(bool)
    df["billable_minutes"] = df["minutes"].where(df["billable"], 0)
    df["date"] = df["started_at"].dt.strftime("%Y-%m-%d")
    return df


def _head(group_by: str, value: Any, head: pd.Series) -> Dict[str, Any]:
    if group_by == "user":
        return {"user": {"id": int(value), "name": head["user_name"]}}
    if group_by == "date":
        return {"date": value}
    client = head["client_name"]
    return {
        "project": {
            "id": int(value),
            "name": head["project_name"],
            "client": client if pd.notna(client) else None,
        }
    }


def summarize(lines: List[ReportLine], group_by: str) -> List[Dict[str, Any]]:
    """
    Summaries in the order each group first appears, except by date which
    runs newest first and carries no date range.
    """
    lines = list(lines)
    if not lines:
        return []
    key, name_columns = GROUPINGS.get(group_by, GROUPINGS["project"])
    df = build_line_frame(lines)

    grouped = df.groupby(key, sort=False)
    summary = grouped.agg(
        total_minutes=("minutes", "sum"),
        billable_minutes=("billable_minutes", "sum"),
        entry_count=("entry_id", "count"),
        first_started=("started_at", "min"),
        last_started=("started_at", "max"),
    )
    heads = df.drop_duplicates(key).set_index(key)
    names = {field: grouped[column].unique() for field, column in name_columns.items()}

    summaries = []
    for value, row in summary.iterrows():
        item = _head(group_by, value, heads.loc[value])
        item.update(
            _tally(int(row["total_minutes"]), int(row["billable_minutes"]), int(row["entry_count"]))
        )
        for field, per_group in names.items():
            item[field] = list(per_group[value])
        if group_by != "date":
            item["date_range"] = {
                "start": row["first_started"].to_pydatetime(),
                "end": row["last_started"].to_pydatetime(),
            }
        summaries.append(item)

    if group_by == "date":
        summaries.sort(key=lambda s: s["date"], reverse=True)
    return summaries


def totals(lines: Iterable[ReportLine]) -> Dict[str, Any]:
    lines = list(lines)
    if not lines:
        return _tally(0, 0, 0)
    df = build_line_frame(lines)
    return _tally(int(df["minutes"].sum()), int(df["billable_minutes"].sum()), len(df))


def flatten(line: ReportLine) -> Dict[str, Any]:
    return {
        "id": line.entry_id,
        "started_at": line.started_at,
        "ended_at": line.ended_at,
        "minutes": line.minutes,
        "hours": hours(line.minutes),
        "note": line.note,
        "billable": line.billable,
        "project": {"id": line.project_id, "name": line.project_name, "client": line.client_name},
        "user": {"id": line.user_id, "name": line.user_name},
        "task": {"id": line.task_id, "name": line.task_name} if line.task_id else None,
    }
