from __future__ import annotations

from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest
from sqlmodel import select

from frame.core.config import settings
from frame.core.dates import utcnow
from frame.main import app
from frame.models import Invitation, User, UserRole
from frame.services.email import EmailService, get_email_service


class RecordingEmailService:
    """Stands in for the mail backend and remembers what would have been sent."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent = []

    def send_magic_link(self, email, sign_in_url):
        self.sent.append(("magic_link", email, sign_in_url))
        return self.succeed

    def send_invitation(self, email, organization_name, inviter_name, invite_url, role):
        self.sent.append(("invitation", email, invite_url))
        return self.succeed

    def send_welcome(self, email, user_name, organization_name):
        self.sent.append(("welcome", email, organization_name))
        return self.succeed

    def last(self, kind):
        return [m for m in self.sent if m[0] == kind][-1]


@pytest.fixture
def outbox():
    service = RecordingEmailService()
    app.dependency_overrides[get_email_service] = lambda: service
    return service


@pytest.fixture
def broken_outbox():
    service = RecordingEmailService(succeed=False)
    app.dependency_overrides[get_email_service] = lambda: service
    return service


def _sign_in(client, outbox, email):
    response = client.post("/api/v1/auth/magic-link", json={"email": email})
    assert response.status_code == 200, response.text
    query = parse_qs(urlparse(outbox.last("magic_link")[2]).query)
    return client.get(
        "/api/v1/auth/verify-magic-link",
        params={"token": query["token"][0], "email": query["email"][0]},
    )


def test_magic_link_sign_in(client, outbox, member):
    response = client.post("/api/v1/auth/magic-link", json={"email": "Member@Studio.io"})
    assert response.status_code == 200
    assert response.json()["email"] == "member@studio.io"

    url = outbox.last("magic_link")[2]
    assert url.startswith(f"{settings.APP_URL}{settings.API_V1_STR}/auth/verify-magic-link?")
    query = parse_qs(urlparse(url).query)
    params = {"token": query["token"][0], "email": "member@studio.io"}

    response = client.get("/api/v1/auth/verify-magic-link", params=params)
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert "access_token" in response.cookies

    me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Dana Designer"

    # Links work once
    response = client.get("/api/v1/auth/verify-magic-link", params=params)
    assert response.status_code == 400


def test_new_link_replaces_old_one(client, outbox, member):
    client.post("/api/v1/auth/magic-link", json={"email": "member@studio.io"})
    first = parse_qs(urlparse(outbox.last("magic_link")[2]).query)["token"][0]
    client.post("/api/v1/auth/magic-link", json={"email": "member@studio.io"})

    response = client.get(
        "/api/v1/auth/verify-magic-link", params={"token": first, "email": "member@studio.io"}
    )
    assert response.status_code == 400


def test_wrong_token_is_rejected(client, outbox, member):
    client.post("/api/v1/auth/magic-link", json={"email": "member@studio.io"})
    response = client.get(
        "/api/v1/auth/verify-magic-link", params={"token": "0" * 64, "email": "member@studio.io"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired token"


def test_magic_link_for_unknown_address(client, outbox, org):
    response = client.post("/api/v1/auth/magic-link", json={"email": "stranger@studio.io"})
    assert response.status_code == 400
    assert outbox.sent == []


def test_magic_link_send_failure(client, broken_outbox, member):
    response = client.post("/api/v1/auth/magic-link", json={"email": "member@studio.io"})
    assert response.status_code == 502


def test_inactive_user_cannot_sign_in(client, outbox, db, member):
    member.active = False
    db.add(member)
    db.commit()

    response = _sign_in(client, outbox, "member@studio.io")
    assert response.status_code == 403


def test_open_signup_joins_default_org(client, outbox, db, org, monkeypatch):
    monkeypatch.setattr(settings, "ALLOW_OPEN_SIGNUP", True)

    response = _sign_in(client, outbox, "stranger@studio.io")
    assert response.status_code == 200

    db.expire_all()
    user = db.exec(select(User).where(User.email == "stranger@studio.io")).first()
    assert user.org_id == org.id
    assert user.role == UserRole.MEMBER
    assert outbox.last("welcome")[1] == "stranger@studio.io"


def test_invitation_flow(client, outbox, auth, manager):
    response = client.post(
        "/api/v1/invitations", json={"email": "new.hire@studio.io", "role": "manager"}, headers=auth(manager)
    )
    assert response.status_code == 201
    invitation = response.json()
    assert invitation["role"] == "manager"
    assert invitation["invited_by_name"] == "Mark Manager"

    invite_url = outbox.last("invitation")[2]
    token = invite_url.rsplit("/", 1)[1]

    pending = client.get("/api/v1/invitations", headers=auth(manager)).json()
    assert [i["email"] for i in pending] == ["new.hire@studio.io"]

    response = client.get("/api/v1/invitations/validate", params={"token": token})
    assert response.status_code == 200
    assert response.json()["organization_name"] == "Studio"
    assert response.json()["inviter_name"] == "Mark Manager"

    response = _sign_in(client, outbox, "new.hire@studio.io")
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    me = client.get("/api/v1/users/me", headers=headers).json()
    assert me["role"] == "manager"
    assert me["org_id"] == manager.org_id
    assert outbox.last("welcome")[2] == "Studio"

    assert client.get("/api/v1/invitations", headers=auth(manager)).json() == []
    assert client.get("/api/v1/invitations/validate", params={"token": token}).status_code == 404


def test_invitation_rejections(client, outbox, auth, manager, member):
    def invite(email, role="member"):
        return client.post("/api/v1/invitations", json={"email": email, "role": role}, headers=auth(manager))

    assert invite("someone@studio.io", role="admin").status_code == 400
    assert invite("member@studio.io").status_code == 400
    assert invite("someone@studio.io").status_code == 201
    response = invite("someone@studio.io")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invitation already sent to this email"


def test_members_cannot_invite(client, outbox, auth, member):
    response = client.post(
        "/api/v1/invitations", json={"email": "friend@studio.io"}, headers=auth(member)
    )
    assert response.status_code == 403


def test_failed_invitation_email_is_rolled_back(client, broken_outbox, auth, manager):
    response = client.post(
        "/api/v1/invitations", json={"email": "someone@studio.io"}, headers=auth(manager)
    )
    assert response.status_code == 502
    assert client.get("/api/v1/invitations", headers=auth(manager)).json() == []


def test_expired_invitation(client, outbox, auth, db, org, manager):
    db.add(
        Invitation(
            org_id=org.id,
            email="late@studio.io",
            role=UserRole.MEMBER,
            invited_by=manager.id,
            token="expired-token",
            expires_at=utcnow() - timedelta(days=1),
        )
    )
    db.commit()

    response = client.get("/api/v1/invitations/validate", params={"token": "expired-token"})
    assert response.status_code == 400
    assert client.get("/api/v1/invitations/validate", params={"token": "nope"}).status_code == 404

    # An expired invitation can be sent again
    response = client.post(
        "/api/v1/invitations", json={"email": "late@studio.io"}, headers=auth(manager)
    )
    assert response.status_code == 201


def test_console_backend_renders_templates():
    service = EmailService(backend="console")
    html = service.render("magic_link.html", sign_in_url="http://localhost:8000/verify", expires_minutes=10)
    assert "http://localhost:8000/verify" in html
    assert "10 minutes" in html
    assert service.send_invitation("a@studio.io", "Studio", "Mark", "http://localhost:8000/invite", "member")


def test_logout_clears_cookie(client):
    response = client.get("/api/v1/auth/logout")
    assert response.status_code == 200
    assert response.json()["detail"] == "Logged out"


def test_user_of_another_org_cannot_be_invited(client, outbox, auth, db, manager, other_org_project):
    db.add(User(org_id=other_org_project.org_id, name="Elsa", email="elsa@elsewhere.io"))
    db.commit()

    response = client.post(
        "/api/v1/invitations", json={"email": "elsa@elsewhere.io"}, headers=auth(manager)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email already belongs to another organization"
    assert outbox.sent == []
