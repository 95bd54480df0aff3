"""
Authentication Endpoints Module

This module provides passwordless sign-in. A user asks for a magic link, the
emailed link carries a one-time token, and verifying it issues a JWT access
token. The token is returned in the body for API clients and set as an
HTTP-only cookie for browser clients.
"""
import logging
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session, select

from frame.core.config import settings
from frame.core.dates import utcnow
from frame.core.security import create_access_token, generate_token, hash_token, verify_token
from frame.db.session import get_db
from frame.models.auth_models import VerificationToken
from frame.models.invitation import Invitation
from frame.models.organization import Organization
from frame.models.user import User, UserRole
from frame.schemas.auth import MagicLinkRequest, MagicLinkSent, Token
from frame.services.email import EmailService, get_email_service

logger = logging.getLogger(__name__)

router = APIRouter()

# Cost rate given to accounts created at first sign-in
NEW_USER_COST_RATE_CENTS = 5000


def _pending_invitation(db: Session, email: str) -> Optional[Invitation]:
    now = utcnow()
    invitations = db.exec(
        select(Invitation).where(
            Invitation.email == email,
            Invitation.accepted_at == None,  # noqa: E711
        ).order_by(Invitation.created_at.desc())
    ).all()
    for invitation in invitations:
        if not invitation.is_expired(now):
            return invitation
    return None


def _default_organization(db: Session) -> Optional[Organization]:
    return db.exec(select(Organization).order_by(Organization.id)).first()


@router.post("/magic-link", response_model=MagicLinkSent)
def request_magic_link(
    request_in: MagicLinkRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Email a one-time sign-in link.

    Earlier links for the same address stop working. Only a hash of the token
    is stored.

    Raises:
        HTTPException 400: If the address has no account, no pending invitation,
            and open sign-up is disabled
        HTTPException 502: If the email could not be sent
    """
    email = request_in.email.lower()

    user = db.exec(select(User).where(User.email == email)).first()
    if not user and not _pending_invitation(db, email):
        if not settings.ALLOW_OPEN_SIGNUP or not _default_organization(db):
            raise HTTPException(
                status_code=400,
                detail="No account or pending invitation for this email",
            )

    for old in db.exec(select(VerificationToken).where(VerificationToken.identifier == email)).all():
        db.delete(old)

    token = generate_token()
    verification = VerificationToken(
        identifier=email,
        token_hash=hash_token(token),
        expires=utcnow() + timedelta(minutes=settings.MAGIC_LINK_EXPIRE_MINUTES),
    )
    db.add(verification)
    db.commit()

    query = urlencode({"token": token, "email": email})
    sign_in_url = f"{settings.APP_URL}{settings.API_V1_STR}/auth/verify-magic-link?{query}"
    if not email_service.send_magic_link(email, sign_in_url):
        db.delete(verification)
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to send magic link email",
        )

    logger.info("Magic link issued for %s", email)
    return MagicLinkSent(message="Magic link sent successfully", email=email)


@router.get("/verify-magic-link", response_model=Token)
def verify_magic_link(
    token: str,
    email: str,
    response: Response,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Exchange a magic link token for an access token.

    First-time visitors get an account: from their pending invitation when
    there is one, otherwise as a member of the default organization when open
    sign-up is enabled.

    Raises:
        HTTPException 400: If the token is unknown, used or expired, or no
            account can be created for the address
        HTTPException 403: If the account is deactivated
    """
    email = email.lower()
    now = utcnow()

    verification = None
    for candidate in db.exec(
        select(VerificationToken).where(VerificationToken.identifier == email)
    ).all():
        if verify_token(token, candidate.token_hash):
            verification = candidate
            break
    if not verification or now > verification.expires:
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    # Tokens are single use
    db.delete(verification)
    db.commit()

    user = db.exec(select(User).where(User.email == email)).first()
    if not user:
        invitation = _pending_invitation(db, email)
        if invitation:
            user = User(
                org_id=invitation.org_id,
                name=email.split("@")[0],
                email=email,
                role=invitation.role,
                cost_rate_cents=NEW_USER_COST_RATE_CENTS,
            )
            invitation.accepted_at = now
            db.add(invitation)
        elif settings.ALLOW_OPEN_SIGNUP and _default_organization(db):
            user = User(
                org_id=_default_organization(db).id,
                name=email.split("@")[0],
                email=email,
                role=UserRole.MEMBER,
                cost_rate_cents=NEW_USER_COST_RATE_CENTS,
            )
        else:
            raise HTTPException(status_code=400, detail="No invitation found for this email")

        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("User %s created for %s in org %s", user.id, email, user.org_id)

        org = db.get(Organization, user.org_id)
        if not email_service.send_welcome(email, user.name, org.name if org else ""):
            logger.warning("Welcome email to %s was not sent", email)

    if not user.active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    access_token = create_access_token(
        subject=user.email,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    # httponly=True prevents JavaScript access to the cookie
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
    )
    logger.info("User %s signed in", user.id)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/logout")
def logout(response: Response):
    """
    Log out by clearing the authentication cookie. API clients simply discard their token.
    """
    response.delete_cookie("access_token")
    return {"status": "success", "detail": "Logged out"}
