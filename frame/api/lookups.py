"""
Organization scoped lookups shared by the endpoint modules.

A record that exists but belongs to another organization is reported exactly
like a missing one.
"""
from typing import Optional

from fastapi import HTTPException
from sqlmodel import Session

from frame.models.project import Project
from frame.models.task import Task
from frame.models.time_entry import TimeEntry
from frame.models.user import User


def get_project_or_404(db: Session, org_id: int, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if not project or project.org_id != org_id:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def get_task_or_404(db: Session, org_id: int, task_id: int, project_id: Optional[int] = None) -> Task:
    task = db.get(Task, task_id)
    if not task or task.org_id != org_id:
        raise HTTPException(status_code=404, detail="Task not found")
    if project_id is not None and task.project_id != project_id:
        raise HTTPException(status_code=400, detail="Task does not belong to the project")
    return task


def get_user_or_404(db: Session, org_id: int, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user or user.org_id != org_id:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_entry_or_404(db: Session, org_id: int, entry_id: int) -> TimeEntry:
    entry = db.get(TimeEntry, entry_id)
    if not entry or entry.org_id != org_id:
        raise HTTPException(status_code=404, detail="Time entry not found")
    return entry
