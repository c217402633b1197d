from datetime import timedelta
import uuid

import pytest

from app.core.exceptions import IdentityProviderError
from app.models import Invitation, InvitationStatus, User, UserRole
from app.models.base import utcnow
from app.schemas.invitation import InvitationAccept
from app.services.invitation_service import invitation_service
from tests.conftest import API, auth, make_user


def send(client, owner, email="new@x.com", **extra):
    return client.post(f"{API}/invitations", json={"email": email, **extra}, headers=auth(owner))


def force_expiry(db, invitation_id):
    invitation = db.get(Invitation, invitation_id)
    invitation.expires_at = utcnow() - timedelta(minutes=1)
    db.commit()
    return invitation


@pytest.fixture
def invitation(client, db, owner):
    response = send(client, owner, role="tester")
    assert response.status_code == 201
    return db.get(Invitation, response.json()["invitation"]["id"])


def test_invite_conflict_then_expiry_scenario(client, db, owner):
    first = send(client, owner)
    assert first.status_code == 201
    body = first.json()["invitation"]
    assert body["role"] == "member"
    assert "/register?token=" in body["invite_link"]

    assert send(client, owner).status_code == 409

    force_expiry(db, body["id"])
    third = send(client, owner)
    assert third.status_code == 201

    statuses = {i.id: i.status for i in db.query(Invitation).all()}
    assert statuses[body["id"]] == InvitationStatus.EXPIRED
    assert statuses[third.json()["invitation"]["id"]] == InvitationStatus.PENDING


def test_cannot_invite_existing_tenant_user(client, owner, tester):
    assert send(client, owner, email=tester.email).status_code == 409


def test_owner_role_cannot_be_granted(client, owner):
    assert send(client, owner, role="owner").status_code == 422


def test_only_owners_invite(client, tester):
    assert send(client, tester).status_code == 403


def test_invitation_expiry_window(client, db, owner):
    response = send(client, owner)
    invitation = db.get(Invitation, response.json()["invitation"]["id"])
    window = invitation.expires_at - invitation.created_at
    assert timedelta(minutes=59) < window <= timedelta(minutes=61)
    assert len(invitation.token) >= 32


def test_validate_token(client, owner, invitation):
    response = client.get(f"{API}/invitations/validate/{invitation.token}")
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["email"] == "new@x.com"
    assert body["role"] == "tester"
    assert body["organization"] == "Acme"
    assert body["invited_by"] == owner.email


def test_validate_unknown_token(client, db):
    response = client.get(f"{API}/invitations/validate/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid invitation token"


def test_validate_expired_token_marks_it_expired(client, db, invitation):
    force_expiry(db, invitation.id)
    response = client.get(f"{API}/invitations/validate/{invitation.token}")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invitation has expired"

    db.refresh(invitation)
    assert invitation.status == InvitationStatus.EXPIRED

    again = client.get(f"{API}/invitations/validate/{invitation.token}")
    assert again.json()["detail"] == "Invitation has already been expired"


def test_accept_creates_user_in_inviting_tenant(client, db, identity, owner, invitation):
    response = client.post(
        f"{API}/invitations/accept", json={"token": invitation.token, "password": "s3cret!"}
    )
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "new@x.com"
    assert user["role"] == "tester"
    assert user["tenant_id"] == owner.tenant_id

    assert identity.users["new@x.com"]["user_metadata"] == {"role": "tester", "accountId": owner.tenant_id}

    db.refresh(invitation)
    assert invitation.status == InvitationStatus.ACCEPTED
    assert invitation.accepted_at is not None

    second = client.post(f"{API}/invitations/accept", json={"token": invitation.token, "password": "s3cret!"})
    assert second.status_code == 400


def test_accept_after_expiry_fails(client, db, invitation):
    force_expiry(db, invitation.id)
    response = client.post(f"{API}/invitations/accept", json={"token": invitation.token, "password": "s3cret!"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invitation has expired"
    assert db.query(User).filter(User.email == "new@x.com").first() is None
    db.refresh(invitation)
    assert invitation.status == InvitationStatus.EXPIRED


def test_accept_conflicts_with_existing_email(client, db, other_account, invitation):
    make_user(db, other_account, UserRole.TESTER, "new@x.com")
    response = client.post(f"{API}/invitations/accept", json={"token": invitation.token, "password": "s3cret!"})
    assert response.status_code == 409


def test_accept_surfaces_provider_rejection(client, db, identity, invitation):
    identity.create_error = IdentityProviderError("Password should be at least 6 characters", upstream_status=422)
    response = client.post(f"{API}/invitations/accept", json={"token": invitation.token, "password": "s3cret!"})
    assert response.status_code == 400
    db.refresh(invitation)
    assert invitation.status == InvitationStatus.PENDING


def test_revoke(client, db, owner, invitation):
    url = f"{API}/invitations/{invitation.id}"
    assert client.delete(url, headers=auth(owner)).status_code == 200
    db.refresh(invitation)
    assert invitation.status == InvitationStatus.REVOKED

    response = client.delete(url, headers=auth(owner))
    assert response.status_code == 404
    assert response.json()["detail"] == "Pending invitation not found"


def test_revoke_other_tenant_invitation(client, other_owner, invitation):
    assert client.delete(f"{API}/invitations/{invitation.id}", headers=auth(other_owner)).status_code == 404


def test_resend_reopens_with_new_token(client, db, owner, invitation):
    old_token = invitation.token
    client.delete(f"{API}/invitations/{invitation.id}", headers=auth(owner))

    response = client.post(f"{API}/invitations/{invitation.id}/resend", headers=auth(owner))
    assert response.status_code == 200
    db.refresh(invitation)
    assert invitation.status == InvitationStatus.PENDING
    assert invitation.token != old_token
    assert invitation.token in response.json()["invite_link"]
    assert invitation.expires_at > utcnow()


def test_resend_unknown_invitation(client, owner):
    assert client.post(f"{API}/invitations/{uuid.uuid4()}/resend", headers=auth(owner)).status_code == 404


def test_list_expires_stale_invitations(client, db, owner, invitation):
    send(client, owner, email="second@x.com")
    force_expiry(db, invitation.id)

    response = client.get(f"{API}/invitations", headers=auth(owner))
    assert response.status_code == 200
    statuses = {item["email"]: item["status"] for item in response.json()}
    assert statuses == {"new@x.com": "expired", "second@x.com": "pending"}
    assert response.json()[0]["invited_by"]["email"] == owner.email

    pending = client.get(f"{API}/invitations", params={"status": "pending"}, headers=auth(owner)).json()
    assert [item["email"] for item in pending] == ["second@x.com"]


def test_list_is_tenant_scoped(client, other_owner, invitation):
    assert client.get(f"{API}/invitations", headers=auth(other_owner)).json() == []


def test_resend_refused_while_newer_invitation_is_pending(client, db, owner, invitation):
    client.delete(f"{API}/invitations/{invitation.id}", headers=auth(owner))
    assert send(client, owner).status_code == 201

    response = client.post(f"{API}/invitations/{invitation.id}/resend", headers=auth(owner))
    assert response.status_code == 409
    db.refresh(invitation)
    assert invitation.status == InvitationStatus.REVOKED
    pending = db.query(Invitation).filter(
        Invitation.email == "new@x.com", Invitation.status == InvitationStatus.PENDING
    ).count()
    assert pending == 1


def test_resend_after_newer_invitation_expired(client, db, owner, invitation):
    client.delete(f"{API}/invitations/{invitation.id}", headers=auth(owner))
    newer = send(client, owner).json()["invitation"]["id"]
    force_expiry(db, newer)

    response = client.post(f"{API}/invitations/{invitation.id}/resend", headers=auth(owner))
    assert response.status_code == 200
    assert db.get(Invitation, newer).status == InvitationStatus.EXPIRED


def test_resend_of_own_expired_invitation(client, db, owner, invitation):
    force_expiry(db, invitation.id)
    response = client.post(f"{API}/invitations/{invitation.id}/resend", headers=auth(owner))
    assert response.status_code == 200
    db.refresh(invitation)
    assert invitation.status == InvitationStatus.PENDING


def test_resend_refused_once_email_joined(client, db, owner, invitation):
    accepted = client.post(
        f"{API}/invitations/accept", json={"token": invitation.token, "password": "s3cret!"}
    )
    assert accepted.status_code == 201

    response = client.post(f"{API}/invitations/{invitation.id}/resend", headers=auth(owner))
    assert response.status_code == 409
    db.refresh(invitation)
    assert invitation.status == InvitationStatus.ACCEPTED


def test_accept_rolls_back_when_local_write_fails(db, monkeypatch, identity, invitation):
    real_flush = db.flush

    def failing_commit():
        real_flush()
        raise RuntimeError("connection lost")

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        invitation_service.accept(db, identity, InvitationAccept(token=invitation.token, password="s3cret!"))
    monkeypatch.undo()

    db.refresh(invitation)
    assert invitation.status == InvitationStatus.PENDING
    assert invitation.accepted_at is None
    assert db.query(User).filter(User.email == "new@x.com").first() is None


def test_accept_rejects_short_password_before_provider(client, db, identity, invitation):
    response = client.post(f"{API}/invitations/accept", json={"token": invitation.token, "password": "pw"})
    assert response.status_code == 422
    assert identity.users == {}
    db.refresh(invitation)
    assert invitation.status == InvitationStatus.PENDING
