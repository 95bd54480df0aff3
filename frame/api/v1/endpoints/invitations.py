"""
Invitation Endpoints Module

Managers invite people into their organization by email. The invitee follows
the emailed link, and signs in with a magic link; the account is created from
the invitation at that point (see the auth endpoints).
"""
import logging
from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from frame.api import deps
from frame.core.config import settings
from frame.core.dates import utcnow
from frame.core.security import generate_token
from frame.db.session import get_db
from frame.models.invitation import (
    Invitation,
    InvitationCreate,
    InvitationRead,
    InvitationValidation,
)
from frame.models.organization import Organization
from frame.models.user import User, UserRole
from frame.services.email import EmailService, get_email_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_read(invitation: Invitation, inviter: User = None) -> InvitationRead:
    return InvitationRead(
        id=invitation.id,
        email=invitation.email,
        role=invitation.role,
        expires_at=invitation.expires_at,
        created_at=invitation.created_at,
        invited_by_name=(inviter.name or inviter.email) if inviter else None,
    )


@router.post("", response_model=InvitationRead, status_code=status.HTTP_201_CREATED)
def create_invitation(
    invitation_in: InvitationCreate,
    db: Session = Depends(get_db),
    org: Organization = Depends(deps.get_current_organization),
    current_user: User = Depends(deps.get_current_manager),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Invite an email address into the caller's organization.

    Raises:
        HTTPException 400: If the role is unknown, the address already has an
            account in any organization, or a pending invitation exists
        HTTPException 502: If the invitation email could not be sent
    """
    email = invitation_in.email.lower()
    try:
        role = UserRole(invitation_in.role)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid role")

    # Emails are unique across organizations, so a user elsewhere cannot join
    existing_user = db.exec(select(User).where(User.email == email)).first()
    if existing_user:
        if existing_user.org_id == org.id:
            detail = "User with this email already exists in your organization"
        else:
            detail = "User with this email already belongs to another organization"
        raise HTTPException(status_code=400, detail=detail)

    now = utcnow()
    previous = db.exec(
        select(Invitation).where(Invitation.email == email, Invitation.org_id == org.id)
    ).first()
    if previous:
        if previous.accepted_at is None and not previous.is_expired(now):
            raise HTTPException(status_code=400, detail="Invitation already sent to this email")
        # One invitation per address and organization; a stale one is replaced
        db.delete(previous)
        db.flush()

    invitation = Invitation(
        org_id=org.id,
        email=email,
        role=role,
        invited_by=current_user.id,
        token=generate_token(),
        expires_at=now + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)

    invite_url = f"{settings.APP_URL}/auth/invite/{invitation.token}"
    sent = email_service.send_invitation(
        email, org.name, current_user.name or current_user.email, invite_url, role.value
    )
    if not sent:
        db.delete(invitation)
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to send invitation email",
        )

    logger.info("Invitation %s sent to %s for org %s", invitation.id, email, org.id)
    return _to_read(invitation, current_user)


@router.get("", response_model=List[InvitationRead])
def list_invitations(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_manager),
):
    """
    Pending invitations of the caller's organization, newest first.
    """
    rows = db.exec(
        select(Invitation, User)
        .join(User, Invitation.invited_by == User.id)
        .where(Invitation.org_id == current_user.org_id, Invitation.accepted_at == None)  # noqa: E711
        .order_by(Invitation.created_at.desc(), Invitation.id.desc())
    ).all()
    return [_to_read(invitation, inviter) for invitation, inviter in rows]


@router.get("/validate", response_model=InvitationValidation)
def validate_invitation(token: str, db: Session = Depends(get_db)):
    """
    Look up an invitation by its token. Needs no authentication.

    Raises:
        HTTPException 404: If the token is unknown or the invitation was accepted
        HTTPException 400: If the invitation has expired
    """
    invitation = db.exec(
        select(Invitation).where(Invitation.token == token, Invitation.accepted_at == None)  # noqa: E711
    ).first()
    if not invitation:
        raise HTTPException(status_code=404, detail="Invitation not found or already accepted")
    if invitation.is_expired(utcnow()):
        raise HTTPException(status_code=400, detail="Invitation has expired")

    org = db.get(Organization, invitation.org_id)
    inviter = db.get(User, invitation.invited_by)
    return InvitationValidation(
        id=invitation.id,
        email=invitation.email,
        role=invitation.role,
        organization_name=org.name if org else "",
        inviter_name=(inviter.name or inviter.email) if inviter else "",
        expires_at=invitation.expires_at,
    )
