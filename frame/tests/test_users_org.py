from __future__ import annotations

from frame.core.security import create_access_token


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_bad_tokens(client, member):
    response = client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 403

    token = create_access_token("ghost@studio.io")
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404


def test_cookie_auth(client, member):
    token = create_access_token(member.email)
    response = client.get("/api/v1/users/me", headers={"Cookie": f"access_token=Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["email"] == "member@studio.io"


def test_inactive_user_is_locked_out(client, auth, db, member):
    member.active = False
    db.add(member)
    db.commit()
    response = client.get("/api/v1/users/me", headers=auth(member))
    assert response.status_code == 403


def test_team_listing(client, auth, owner, manager, member):
    assert client.get("/api/v1/users", headers=auth(member)).status_code == 403

    team = client.get("/api/v1/users", headers=auth(manager)).json()
    assert [u["name"] for u in team] == ["Dana Designer", "Mark Manager", "Olivia Owner"]


def test_owner_manages_team(client, auth, owner, manager, member):
    response = client.patch(
        f"/api/v1/users/{member.id}", json={"role": "manager", "name": "Dana D."}, headers=auth(owner)
    )
    assert response.status_code == 200
    assert response.json()["role"] == "manager"
    assert response.json()["name"] == "Dana D."

    assert client.patch(
        f"/api/v1/users/{member.id}", json={"active": False}, headers=auth(manager)
    ).status_code == 403


def test_owner_cannot_lock_themselves_out(client, auth, owner):
    url = f"/api/v1/users/{owner.id}"
    assert client.patch(url, json={"role": "member"}, headers=auth(owner)).status_code == 400
    assert client.patch(url, json={"active": False}, headers=auth(owner)).status_code == 400
    assert client.patch(url, json={"name": "Liv"}, headers=auth(owner)).status_code == 200


def test_organization_settings(client, auth, owner, manager):
    response = client.get("/api/v1/organization", headers=auth(manager))
    assert response.status_code == 200
    assert response.json()["week_start"] == "Mon"

    assert client.patch(
        "/api/v1/organization", json={"week_start": "Sun"}, headers=auth(manager)
    ).status_code == 403

    response = client.patch("/api/v1/organization", json={"week_start": "Sun"}, headers=auth(owner))
    assert response.status_code == 200
    assert response.json()["week_start"] == "Sun"
