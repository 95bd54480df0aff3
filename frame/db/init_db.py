"""
Database bootstrap: table creation and demo data.
"""
import logging

from sqlmodel import SQLModel, Session, select

# Importing the package registers every table on the metadata
from frame.models import Client, Organization, Project, Task, User, UserRole, BudgetType

logger = logging.getLogger(__name__)

DEMO_ORG_NAME = "Frame Design Studio"


def create_tables(engine) -> None:
    SQLModel.metadata.create_all(engine)


def seed_demo_data(session: Session) -> Organization:
    """
    Create the demo organization with an owner, a manager, a member, two
    clients and two budgeted projects. Does nothing if it already exists.
    """
    org = session.exec(select(Organization).where(Organization.name == DEMO_ORG_NAME)).first()
    if org:
        logger.info("Demo organization already present (id=%s)", org.id)
        return org

    org = Organization(name=DEMO_ORG_NAME, timezone="America/New_York", week_start="Mon")
    session.add(org)
    session.flush()

    session.add_all([
        User(org_id=org.id, name="John Owner", email="owner@demo.com",
             role=UserRole.OWNER, cost_rate_cents=8000),
        User(org_id=org.id, name="Sarah Manager", email="manager@demo.com",
             role=UserRole.MANAGER, cost_rate_cents=6000),
        User(org_id=org.id, name="Mike Designer", email="designer@demo.com",
             role=UserRole.MEMBER, cost_rate_cents=5000),
    ])

    acme = Client(org_id=org.id, name="ACME Corp")
    techstart = Client(org_id=org.id, name="TechStart Inc")
    session.add_all([acme, techstart])
    session.flush()

    acme_project = Project(
        org_id=org.id, client_id=acme.id, name="ACME Website Redesign",
        budget_type=BudgetType.AMOUNT, budget_value=5000000,  # $50,000
        default_bill_rate_cents=10000,
    )
    tech_project = Project(
        org_id=org.id, client_id=techstart.id, name="TechStart Brand Identity",
        budget_type=BudgetType.HOURS, budget_value=120,
        default_bill_rate_cents=12000,
    )
    session.add_all([acme_project, tech_project])
    session.flush()

    for name in ("Homepage Design", "User Research", "Wireframes"):
        session.add(Task(org_id=org.id, project_id=acme_project.id, name=name))
    for name in ("Logo Design", "Brand Guidelines", "Marketing Materials"):
        session.add(Task(org_id=org.id, project_id=tech_project.id, name=name))

    session.commit()
    session.refresh(org)
    logger.info("Seeded demo organization %r (id=%s)", org.name, org.id)
    return org


def init_db(engine, seed: bool = False) -> None:
    create_tables(engine)
    if seed:
        with Session(engine) as session:
            seed_demo_data(session)
