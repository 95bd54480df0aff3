"""
Organization Endpoints Module

Read and update the caller's organization.
"""
from typing import Any

from fastapi import APIRouter, Depends
from sqlmodel import Session

from frame.api import deps
from frame.core.permissions import Permission
from frame.db.session import get_db
from frame.models.organization import Organization, OrganizationRead, OrganizationUpdate
from frame.models.user import User

router = APIRouter()


@router.get("", response_model=OrganizationRead)
def read_organization(
    org: Organization = Depends(deps.get_current_organization),
    current_user: User = Depends(deps.RequirePermission(Permission.ORG_READ)),
) -> Any:
    return org


@router.patch("", response_model=OrganizationRead)
def update_organization(
    org_in: OrganizationUpdate,
    db: Session = Depends(get_db),
    org: Organization = Depends(deps.get_current_organization),
    current_user: User = Depends(deps.RequirePermission(Permission.ORG_UPDATE)),
) -> Any:
    """
    Update the name, timezone or week start of the caller's organization.
    """
    for key, value in org_in.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(org, key, value)

    db.add(org)
    db.commit()
    db.refresh(org)
    return org
