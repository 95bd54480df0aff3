"""
Rate Management Endpoints Module

Cost and bill rates of team members, role defaults, and per-project bill rate
overrides. All endpoints require manager access.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from frame.api import deps
from frame.api.lookups import get_project_or_404, get_user_or_404
from frame.core.dates import utcnow
from frame.db.session import get_db
from frame.models.rate import (
    OverrideRateWrite,
    ProjectRatesRead,
    ProjectRoleRateOverride,
    ProjectUserRateOverride,
    RoleDefaultRate,
    RoleRateUpdate,
    UserRateRead,
    UserRateUpdate,
)
from frame.models.user import User, UserRole
from frame.services.rates import ensure_role_default_rates

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users", response_model=List[UserRateRead])
def list_user_rates(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    statement = select(User).where(User.org_id == current_user.org_id).order_by(User.name)
    return db.exec(statement).all()


@router.put("/users", response_model=UserRateRead)
def update_user_rates(
    rates_in: UserRateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    """
    Set a team member's cost and bill rates.

    Raises:
        HTTPException 404: If the user is not in the caller's organization
    """
    user = get_user_or_404(db, current_user.org_id, rates_in.user_id)
    user.cost_rate_cents = rates_in.cost_rate_cents
    user.bill_rate_cents = rates_in.bill_rate_cents
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Rates of user %s updated by %s", user.id, current_user.id)
    return user


@router.get("/roles", response_model=List[RoleDefaultRate])
def list_role_rates(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    """
    Default rates per role, ordered member, manager, owner.

    Roles without a stored default get one on first read.
    """
    return ensure_role_default_rates(db, current_user.org_id)


@router.put("/roles", response_model=RoleDefaultRate)
def update_role_rates(
    rates_in: RoleRateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    rate = db.exec(
        select(RoleDefaultRate).where(
            RoleDefaultRate.org_id == current_user.org_id,
            RoleDefaultRate.role_name == rates_in.role_name,
        )
    ).first()
    if not rate:
        rate = RoleDefaultRate(org_id=current_user.org_id, role_name=rates_in.role_name)

    rate.cost_rate_cents = rates_in.cost_rate_cents
    rate.bill_rate_cents = rates_in.bill_rate_cents
    rate.updated_at = utcnow()
    db.add(rate)
    db.commit()
    db.refresh(rate)
    return rate


@router.get("/projects/{project_id}", response_model=ProjectRatesRead)
def read_project_rates(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    """
    The project's default bill rate and every override defined on it.
    """
    project = get_project_or_404(db, current_user.org_id, project_id)
    user_overrides = db.exec(
        select(ProjectUserRateOverride).where(ProjectUserRateOverride.project_id == project.id)
    ).all()
    role_overrides = db.exec(
        select(ProjectRoleRateOverride).where(ProjectRoleRateOverride.project_id == project.id)
    ).all()
    return ProjectRatesRead(
        project_id=project.id,
        default_bill_rate_cents=project.default_bill_rate_cents,
        user_overrides=user_overrides,
        role_overrides=role_overrides,
    )


@router.put("/projects/{project_id}/users/{user_id}", response_model=ProjectUserRateOverride)
def set_user_override(
    project_id: int,
    user_id: int,
    rate_in: OverrideRateWrite,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    project = get_project_or_404(db, current_user.org_id, project_id)
    user = get_user_or_404(db, current_user.org_id, user_id)

    override = db.exec(
        select(ProjectUserRateOverride).where(
            ProjectUserRateOverride.project_id == project.id,
            ProjectUserRateOverride.user_id == user.id,
        )
    ).first()
    if not override:
        override = ProjectUserRateOverride(
            org_id=current_user.org_id, project_id=project.id, user_id=user.id,
            bill_rate_cents=rate_in.bill_rate_cents,
        )
    override.bill_rate_cents = rate_in.bill_rate_cents
    db.add(override)
    db.commit()
    db.refresh(override)
    logger.info("User override on project %s for user %s set", project.id, user.id)
    return override


@router.delete("/projects/{project_id}/users/{user_id}")
def delete_user_override(
    project_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    project = get_project_or_404(db, current_user.org_id, project_id)
    override = db.exec(
        select(ProjectUserRateOverride).where(
            ProjectUserRateOverride.project_id == project.id,
            ProjectUserRateOverride.user_id == user_id,
        )
    ).first()
    if not override:
        raise HTTPException(status_code=404, detail="Rate override not found")
    db.delete(override)
    db.commit()
    return {"success": True}


@router.put("/projects/{project_id}/roles/{role_name}", response_model=ProjectRoleRateOverride)
def set_role_override(
    project_id: int,
    role_name: UserRole,
    rate_in: OverrideRateWrite,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    project = get_project_or_404(db, current_user.org_id, project_id)

    override = db.exec(
        select(ProjectRoleRateOverride).where(
            ProjectRoleRateOverride.project_id == project.id,
            ProjectRoleRateOverride.role_name == role_name,
        )
    ).first()
    if not override:
        override = ProjectRoleRateOverride(
            org_id=current_user.org_id, project_id=project.id, role_name=role_name,
            bill_rate_cents=rate_in.bill_rate_cents,
        )
    override.bill_rate_cents = rate_in.bill_rate_cents
    db.add(override)
    db.commit()
    db.refresh(override)
    logger.info("Role override on project %s for %s set", project.id, role_name.value)
    return override


@router.delete("/projects/{project_id}/roles/{role_name}")
def delete_role_override(
    project_id: int,
    role_name: UserRole,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    project = get_project_or_404(db, current_user.org_id, project_id)
    override = db.exec(
        select(ProjectRoleRateOverride).where(
            ProjectRoleRateOverride.project_id == project.id,
            ProjectRoleRateOverride.role_name == role_name,
        )
    ).first()
    if not override:
        raise HTTPException(status_code=404, detail="Rate override not found")
    db.delete(override)
    db.commit()
    return {"success": True}
