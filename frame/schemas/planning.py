from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel

from frame.models.project import ProjectRead


class WeekHeader(BaseModel):
    week_start: date
    label: str
    is_current_week: bool


class AllocationCell(BaseModel):
    id: int
    project_id: int
    planned_hours: float


class WeekUtilization(BaseModel):
    week_start: date
    allocations: List[AllocationCell] = []
    total_planned: float
    capacity: float
    variance: float
    utilization_percent: int


class PlannedUser(BaseModel):
    id: int
    name: str
    role: str


class UserPlanRow(BaseModel):
    user: PlannedUser
    capacity: float
    weeks: List[WeekUtilization]
    total_planned: float
    average_utilization: int


class PlanningPeriod(BaseModel):
    start_date: date
    end_date: date
    weeks: int


class PlanningGrid(BaseModel):
    grid_data: List[UserPlanRow]
    week_headers: List[WeekHeader]
    projects: List[ProjectRead]
    period: PlanningPeriod


class AllocationRead(BaseModel):
    id: int
    user_id: int
    project_id: int
    week_start_date: date
    planned_hours: float


class AllocationWriteResult(BaseModel):
    action: Literal["created", "updated", "deleted", "unchanged"]
    allocation: Optional[AllocationRead] = None
