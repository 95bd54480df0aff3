"""
Invitation Model Module

Invitations bring new people into an organization with a preset role. The
invitee signs in with a magic link; on first sign-in the user account is
created from the pending invitation and the invitation is marked accepted.
"""
from datetime import datetime
from typing import Optional

from pydantic import EmailStr
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, AutoString

from frame.core.dates import utcnow
from frame.models.user import UserRole


class Invitation(SQLModel, table=True):
    """
    Invitation table model.

    Attributes:
        id: Auto-incrementing primary key
        org_id: Organization the invitee will join
        email: Invitee address
        role: Role the new user receives
        invited_by: User who sent the invitation
        token: Random token carried by the invitation link
        expires_at: UTC expiry
        accepted_at: UTC acceptance time, null while pending
        created_at: UTC timestamp of creation
    """
    __tablename__ = "invitations"
    __table_args__ = (
        UniqueConstraint("email", "org_id", name="uq_invitations_email_org"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)
    email: str = Field(nullable=False, index=True)
    role: UserRole = Field(default=UserRole.MEMBER, sa_type=AutoString)
    invited_by: int = Field(foreign_key="users.id")
    token: str = Field(unique=True, index=True)
    expires_at: datetime = Field(nullable=False)
    accepted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class InvitationCreate(SQLModel):
    email: EmailStr
    role: str = "member"


class InvitationRead(SQLModel):
    id: int
    email: str
    role: UserRole
    expires_at: datetime
    created_at: Optional[datetime] = None
    invited_by_name: Optional[str] = None


class InvitationValidation(SQLModel):
    id: int
    email: str
    role: UserRole
    organization_name: str
    inviter_name: str
    expires_at: datetime
