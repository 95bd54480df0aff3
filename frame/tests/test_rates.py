from __future__ import annotations

from frame.models import Project, ProjectRoleRateOverride, ProjectUserRateOverride, UserRole
from frame.services.rates import RateResolver


def _resolver(default=10000, user_rate=None, role_rate=None) -> RateResolver:
    project = Project(id=1, org_id=1, name="P", default_bill_rate_cents=default)
    user_overrides = []
    role_overrides = []
    if user_rate is not None:
        user_overrides.append(
            ProjectUserRateOverride(org_id=1, project_id=1, user_id=7, bill_rate_cents=user_rate)
        )
    if role_rate is not None:
        role_overrides.append(
            ProjectRoleRateOverride(org_id=1, project_id=1, role_name=UserRole.MEMBER, bill_rate_cents=role_rate)
        )
    return RateResolver.from_rows([project], user_overrides, role_overrides)


def test_user_override_wins_over_role_and_default():
    resolver = _resolver(user_rate=20000, role_rate=15000)
    assert resolver.resolve_with_source(1, 7, UserRole.MEMBER) == (20000, "user")


def test_role_override_applies_without_user_override():
    resolver = _resolver(role_rate=15000)
    assert resolver.resolve_with_source(1, 7, UserRole.MEMBER) == (15000, "role")
    # Plain strings work the same as the enum
    assert resolver.resolve(1, 7, "member") == 15000


def test_role_override_only_matches_its_role():
    resolver = _resolver(role_rate=15000)
    assert resolver.resolve_with_source(1, 7, UserRole.MANAGER) == (10000, "project")


def test_user_override_only_matches_its_user():
    resolver = _resolver(user_rate=20000)
    assert resolver.resolve(1, 8, UserRole.MEMBER) == 10000


def test_project_default_and_zero_fallback():
    assert _resolver(default=12000).resolve(1, 7, UserRole.OWNER) == 12000
    assert _resolver(default=None).resolve(1, 7, UserRole.OWNER) == 0
    # Unknown project
    assert RateResolver().resolve(99, 7, UserRole.OWNER) == 0


def test_zero_override_is_still_an_override():
    resolver = _resolver(user_rate=0, role_rate=15000)
    assert resolver.resolve_with_source(1, 7, UserRole.MEMBER) == (0, "user")


def test_role_defaults_are_created_on_first_read(client, auth, manager):
    response = client.get("/api/v1/rates/roles", headers=auth(manager))
    assert response.status_code == 200
    rates = response.json()
    assert [r["role_name"] for r in rates] == ["member", "manager", "owner"]
    assert rates[0]["cost_rate_cents"] == 5000
    assert rates[0]["bill_rate_cents"] == 10000

    response = client.put(
        "/api/v1/rates/roles",
        json={"role_name": "member", "cost_rate_cents": 5500, "bill_rate_cents": 11000},
        headers=auth(manager),
    )
    assert response.status_code == 200

    rates = client.get("/api/v1/rates/roles", headers=auth(manager)).json()
    assert len(rates) == 3
    assert rates[0]["bill_rate_cents"] == 11000


def test_user_rates(client, auth, manager, member):
    response = client.put(
        "/api/v1/rates/users",
        json={"user_id": member.id, "cost_rate_cents": 5200, "bill_rate_cents": 9000},
        headers=auth(manager),
    )
    assert response.status_code == 200
    assert response.json()["cost_rate_cents"] == 5200

    rates = {r["email"]: r for r in client.get("/api/v1/rates/users", headers=auth(manager)).json()}
    assert rates["member@studio.io"]["bill_rate_cents"] == 9000


def test_rates_need_manager(client, auth, member):
    assert client.get("/api/v1/rates/users", headers=auth(member)).status_code == 403
    assert client.get("/api/v1/rates/roles", headers=auth(member)).status_code == 403


def test_project_rates_listing(client, auth, manager, member, project):
    client.put(
        f"/api/v1/rates/projects/{project.id}/users/{member.id}",
        json={"bill_rate_cents": 15000},
        headers=auth(manager),
    )

    body = client.get(f"/api/v1/rates/projects/{project.id}", headers=auth(manager)).json()
    assert body["default_bill_rate_cents"] == 10000
    assert [o["user_id"] for o in body["user_overrides"]] == [member.id]
    assert body["role_overrides"] == []

    response = client.delete(f"/api/v1/rates/projects/{project.id}/roles/manager", headers=auth(manager))
    assert response.status_code == 404
