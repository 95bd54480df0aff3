"""
Client Model Module

Clients are the companies projects are billed to. They are created on demand
when a project names a client that the organization does not have yet.
"""
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from frame.core.dates import utcnow


class ClientBase(SQLModel):
    name: str = Field(nullable=False)


class Client(ClientBase, table=True):
    """
    Client table model.

    Attributes:
        id: Auto-incrementing primary key
        org_id: Owning organization
        name: Client name, unique per organization by convention
        created_at: UTC timestamp of creation
    """
    __tablename__ = "clients"

    id: Optional[int] = Field(default=None, primary_key=True)
    org_id: int = Field(foreign_key="organizations.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)


class ClientRead(ClientBase):
    id: int
