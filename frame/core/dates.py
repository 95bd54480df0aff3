from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every datetime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_week(day: date, week_start: str = "Mon") -> date:
    # Monday is weekday 0; a Sunday week start shifts everything by one
    offset = (day.weekday() + 1) % 7 if week_start == "Sun" else day.weekday()
    return day - timedelta(days=offset)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def week_bounds(day: date, week_start: str = "Mon") -> Tuple[datetime, datetime]:
    first = start_of_week(day, week_start)
    return datetime.combine(first, time.min), datetime.combine(first + timedelta(days=6), time.max)


def elapsed_minutes(started_at: datetime, ended_at: datetime) -> int:
    """Whole minutes between two instants, never less than one."""
    seconds = (ended_at - started_at).total_seconds()
    return max(1, int(seconds // 60))


def as_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
