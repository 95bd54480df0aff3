from __future__ import annotations

import os

# Point the app at a private in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_BACKEND"] = "console"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from frame.core.security import create_access_token
from frame.db.session import engine
from frame.main import app
from frame.models import (
    BudgetType,
    Client,
    Organization,
    Project,
    Task,
    User,
    UserRole,
)


@pytest.fixture(autouse=True)
def _reset_database():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def org(db: Session) -> Organization:
    org = Organization(name="Studio", timezone="UTC", week_start="Mon")
    db.add(org)
    db.commit()
    db.refresh(org)
    return org


def _make_user(db: Session, org: Organization, name: str, email: str, role: UserRole, cost: int) -> User:
    user = User(org_id=org.id, name=name, email=email, role=role, cost_rate_cents=cost)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def owner(db, org) -> User:
    return _make_user(db, org, "Olivia Owner", "owner@studio.io", UserRole.OWNER, 8000)


@pytest.fixture
def manager(db, org) -> User:
    return _make_user(db, org, "Mark Manager", "manager@studio.io", UserRole.MANAGER, 6000)


@pytest.fixture
def member(db, org) -> User:
    return _make_user(db, org, "Dana Designer", "member@studio.io", UserRole.MEMBER, 5000)


@pytest.fixture
def project(db, org) -> Project:
    acme = Client(org_id=org.id, name="ACME Corp")
    db.add(acme)
    db.commit()
    db.refresh(acme)
    project = Project(
        org_id=org.id,
        client_id=acme.id,
        name="Website Redesign",
        budget_type=BudgetType.HOURS,
        budget_value=100,
        default_bill_rate_cents=10000,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture
def task(db, project) -> Task:
    task = Task(org_id=project.org_id, project_id=project.id, name="Wireframes")
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@pytest.fixture
def other_org_project(db) -> Project:
    other = Organization(name="Elsewhere")
    db.add(other)
    db.commit()
    db.refresh(other)
    project = Project(org_id=other.id, name="Secret Project", default_bill_rate_cents=9000)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@pytest.fixture
def auth():
    """Bearer headers for a user: auth(member)."""
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.email)}"}
    return _headers
