from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel

from frame.models.time_entry import TimeEntryReadWithRelations


class HoursTotals(BaseModel):
    total_hours: float
    billable_hours: float
    non_billable_hours: float


class EntryPeriod(BaseModel):
    view: Literal["today", "week"]
    start_date: datetime
    end_date: datetime


class TimeEntryList(BaseModel):
    entries: List[TimeEntryReadWithRelations]
    totals: HoursTotals
    period: EntryPeriod


class SplitResult(BaseModel):
    original_entry: TimeEntryReadWithRelations
    split_entry: TimeEntryReadWithRelations
