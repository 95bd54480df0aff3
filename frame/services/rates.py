"""
Bill rate resolution.

A bill rate for a user on a project is chosen from three tiers, first match
wins: the user's override on the project, the override for the user's role
on the project, then the project's default bill rate (0 when unset).

RateResolver works on rows loaded up front, so resolving a rate for each time
entry of a report costs no further queries.
"""
from typing import Dict, Iterable, List, Optional, Tuple

from sqlmodel import Session, select

from frame.models.project import Project
from frame.models.rate import ProjectRoleRateOverride, ProjectUserRateOverride, RoleDefaultRate
from frame.models.user import UserRole


def _role_name(role) -> str:
    return getattr(role, "value", role)


class RateResolver:
    def __init__(
        self,
        default_rates: Optional[Dict[int, Optional[int]]] = None,
        user_overrides: Optional[Dict[Tuple[int, int], int]] = None,
        role_overrides: Optional[Dict[Tuple[int, str], int]] = None,
    ):
        self.default_rates = default_rates or {}
        self.user_overrides = user_overrides or {}
        self.role_overrides = role_overrides or {}

    @classmethod
    def from_rows(
        cls,
        projects: Iterable[Project],
        user_overrides: Iterable[ProjectUserRateOverride] = (),
        role_overrides: Iterable[ProjectRoleRateOverride] = (),
    ) -> "RateResolver":
        return cls(
            default_rates={p.id: p.default_bill_rate_cents for p in projects},
            user_overrides={(o.project_id, o.user_id): o.bill_rate_cents for o in user_overrides},
            role_overrides={
                (o.project_id, _role_name(o.role_name)): o.bill_rate_cents for o in role_overrides
            },
        )

    def resolve_with_source(self, project_id: int, user_id: int, user_role) -> Tuple[int, str]:
        """Bill rate in cents per hour and the tier it came from."""
        rate = self.user_overrides.get((project_id, user_id))
        if rate is not None:
            return rate, "user"

        rate = self.role_overrides.get((project_id, _role_name(user_role)))
        if rate is not None:
            return rate, "role"

        return self.default_rates.get(project_id) or 0, "project"

    def resolve(self, project_id: int, user_id: int, user_role) -> int:
        return self.resolve_with_source(project_id, user_id, user_role)[0]


def load_rate_resolver(db: Session, org_id: int, projects: Iterable[Project]) -> RateResolver:
    """Load the overrides of the given projects in two queries."""
    projects = list(projects)
    project_ids = [p.id for p in projects]
    if not project_ids:
        return RateResolver()

    user_overrides = db.exec(
        select(ProjectUserRateOverride).where(
            ProjectUserRateOverride.org_id == org_id,
            ProjectUserRateOverride.project_id.in_(project_ids),
        )
    ).all()
    role_overrides = db.exec(
        select(ProjectRoleRateOverride).where(
            ProjectRoleRateOverride.org_id == org_id,
            ProjectRoleRateOverride.project_id.in_(project_ids),
        )
    ).all()
    return RateResolver.from_rows(projects, user_overrides, role_overrides)



# Cost and bill rates in cents per hour given to roles that have no default yet
DEFAULT_ROLE_RATES = {
    UserRole.MEMBER: (5000, 10000),
    UserRole.MANAGER: (8000, 15000),
    UserRole.OWNER: (12000, 20000),
}


def ensure_role_default_rates(db: Session, org_id: int) -> List[RoleDefaultRate]:
    """Role defaults of an organization in role order, creating the missing ones."""
    existing = {
        _role_name(r.role_name): r
        for r in db.exec(select(RoleDefaultRate).where(RoleDefaultRate.org_id == org_id)).all()
    }

    created = False
    for role, (cost, bill) in DEFAULT_ROLE_RATES.items():
        if role.value not in existing:
            rate = RoleDefaultRate(
                org_id=org_id, role_name=role, cost_rate_cents=cost, bill_rate_cents=bill
            )
            db.add(rate)
            existing[role.value] = rate
            created = True
    if created:
        db.commit()
        for rate in existing.values():
            db.refresh(rate)

    return [existing[role.value] for role in DEFAULT_ROLE_RATES]
