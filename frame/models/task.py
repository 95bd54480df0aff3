"""
Task Model Module

Tasks subdivide a project. A time entry may optionally name one task of its
project.
"""
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from frame.core.dates import utcnow


class TaskBase(SQLModel):
    """
    Base Task model containing common fields.
    """
    name: str = Field(nullable=False)
    # Inactive tasks are hidden from pickers but kept for historical entries
    active: bool = True


class Task(TaskBase, table=True):
    """
    Task table model.
    """
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)


class TaskRead(TaskBase):
    """Schema for reading basic task data."""
    id: int
    project_id: int


class TaskCreate(SQLModel):
    name: str = Field(min_length=1)
