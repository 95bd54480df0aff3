"""
Time Entry Model Module

A time entry records work by one user on one project. Entries created by the
timer start out running (ended_at and minutes are null) and are closed when the
timer stops; manual entries are saved closed.

The partial unique index on user_id enforces at most one running entry per
user in the database itself, so two concurrent start requests cannot both
succeed.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field, Relationship

from frame.core.dates import utcnow
from frame.models.project import Project, ProjectRead
from frame.models.task import Task, TaskRead
from frame.models.user import User


class TimeEntryBase(SQLModel):
    project_id: int = Field(foreign_key="projects.id", index=True)
    task_id: Optional[int] = Field(default=None, foreign_key="tasks.id")

    started_at: datetime = Field(nullable=False)
    ended_at: Optional[datetime] = None
    # Whole minutes; set once the entry is closed
    minutes: Optional[int] = None

    note: Optional[str] = None
    billable: bool = True


class TimeEntry(TimeEntryBase, table=True):
    """
    Time entry table model.

    Attributes:
        id: Auto-incrementing primary key
        org_id: Owning organization
        user_id: User who did the work
        project_id: Project the time is logged against
        task_id: Optional task of that project
        started_at: UTC start
        ended_at: UTC end, null while the timer runs
        minutes: Duration in minutes, null while the timer runs
        note: Free text description
        billable: Whether the client is charged for the time
        created_at: UTC timestamp of creation
    """
    __tablename__ = "time_entries"
    __table_args__ = (
        Index(
            "uq_time_entries_running_user",
            "user_id",
            unique=True,
            sqlite_where=text("ended_at IS NULL"),
            postgresql_where=text("ended_at IS NULL"),
        ),
        Index("ix_time_entries_org_started", "org_id", "started_at"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id")
    user_id: int = Field(foreign_key="users.id")
    created_at: datetime = Field(default_factory=utcnow)

    user: Optional[User] = Relationship()
    project: Optional[Project] = Relationship()
    task: Optional[Task] = Relationship()

    @property
    def is_running(self) -> bool:
        return self.ended_at is None


class TimeEntryRead(TimeEntryBase):
    id: int
    user_id: int
    created_at: Optional[datetime] = None


class TimeEntryReadWithRelations(TimeEntryRead):
    """Entry together with its project (and client) and task."""
    project: Optional[ProjectRead] = None
    task: Optional[TaskRead] = None


class TimeEntryCreate(SQLModel):
    """Manual entry of a finished block of work."""
    project_id: int
    task_id: Optional[int] = None
    started_at: datetime
    ended_at: datetime
    note: Optional[str] = None
    billable: bool = True


class TimeEntryUpdate(SQLModel):
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    minutes: Optional[int] = Field(default=None, ge=1)
    note: Optional[str] = None
    billable: Optional[bool] = None
    started_at: Optional[datetime] = None


class SplitSecondEntry(SQLModel):
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    note: Optional[str] = None
    billable: Optional[bool] = None


class TimeEntrySplit(SQLModel):
    split_at_minutes: int = Field(ge=1)
    first_entry_minutes: int = Field(ge=1)
    second_entry: SplitSecondEntry = SplitSecondEntry()


class TimerStart(SQLModel):
    project_id: int
    task_id: Optional[int] = None
    note: Optional[str] = None


class TimerStop(SQLModel):
    entry_id: int


class TimerSwitch(SQLModel):
    from_entry_id: int
    to_project_id: int
    to_task_id: Optional[int] = None
    note: Optional[str] = None
