"""
User Management Endpoints Module

This module provides endpoints for the caller's own profile and for managing
the team. Reading the team requires team:read; changing a member's role,
name or active flag requires team:manage.
"""
import logging
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from frame.api import deps
from frame.api.lookups import get_user_or_404
from frame.core.permissions import Permission
from frame.db.session import get_db
from frame.models.user import User, UserRole
from frame.schemas.user import UserRead, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserRead)
def read_user_me(
    current_user: User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Get the current authenticated user's profile.
    """
    return current_user


@router.get("", response_model=List[UserRead])
def read_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.RequirePermission(Permission.TEAM_READ)),
) -> Any:
    """
    Retrieve every member of the caller's organization, ordered by name.
    """
    statement = select(User).where(User.org_id == current_user.org_id).order_by(User.name)
    return db.exec(statement).all()


@router.patch("/{user_id}", response_model=UserRead)
def update_user(
    *,
    db: Session = Depends(get_db),
    user_id: int,
    user_in: UserUpdate,
    current_user: User = Depends(deps.RequirePermission(Permission.TEAM_MANAGE)),
) -> Any:
    """
    Update a team member's name, role or active flag.

    Args:
        user_id: ID of the user to update
        user_in: Updated user data (only provided fields are updated)

    Raises:
        HTTPException 404: If the user is not in the caller's organization
        HTTPException 400: If an owner tries to demote or deactivate themselves
    """
    db_user = get_user_or_404(db, current_user.org_id, user_id)

    update_data = user_in.model_dump(exclude_unset=True)

    # Prevent an organization from locking out its own owner
    if db_user.id == current_user.id:
        if update_data.get("role", UserRole.OWNER) != UserRole.OWNER:
            raise HTTPException(status_code=400, detail="Owners cannot change their own role")
        if update_data.get("active", True) is False:
            raise HTTPException(status_code=400, detail="Owners cannot deactivate themselves")

    for field, value in update_data.items():
        if value is not None:
            setattr(db_user, field, value)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("User %s updated by %s: %s", db_user.id, current_user.id, sorted(update_data))
    return db_user
