import uuid

from app import crud
from app.core.exceptions import IdentityProviderError
from app.models import Account, User, UserRole
from tests.conftest import API, auth, make_project


def signup(client, **overrides):
    payload = {"email": "founder@x.com", "password": "s3cret!", "role": "owner", "account_name": "Founders"}
    payload.update(overrides)
    return client.post(f"{API}/auth/signup", json=payload)


def test_owner_signup_creates_account_and_user(client, db, identity):
    response = signup(client)
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "founder@x.com"
    assert user["role"] == "owner"

    account = db.get(Account, user["tenant_id"])
    assert account.name == "Founders"
    assert identity.users["founder@x.com"]["user_metadata"] == {"role": "owner", "accountId": account.id}
    assert db.query(User).filter(User.external_id == identity.users["founder@x.com"]["id"]).count() == 1


def test_owner_signup_requires_account_name(client, db):
    response = signup(client, account_name=None)
    assert response.status_code == 400
    assert db.query(Account).count() == 0


def test_tester_signup_gets_default_account_name(client, db):
    response = signup(client, email="solo@x.com", role="tester", account_name=None)
    assert response.status_code == 201
    assert db.get(Account, response.json()["user"]["tenant_id"]).name == "solo@x.com's Account"


def test_signup_with_existing_email_conflicts(client, owner):
    assert signup(client, email=owner.email).status_code == 409


def test_signup_removes_account_when_provider_fails(client, db, identity):
    identity.create_error = IdentityProviderError("User already registered", upstream_status=422)
    response = signup(client)
    assert response.status_code == 400
    assert response.json()["detail"] == "User already registered"
    assert db.query(Account).count() == 0
    assert db.query(User).count() == 0


def test_build_mirror_relinks_trigger_row(db, account, other_account):
    # The database trigger may have inserted the row before the API does
    external_id = str(uuid.uuid4())
    db.add(User(external_id=external_id, email="founder@x.com", role=UserRole.TESTER, tenant_id=account.id))
    db.commit()

    user = crud.user.build_mirror(
        db, external_id=external_id, email="founder@x.com", role=UserRole.OWNER, tenant_id=other_account.id
    )
    db.commit()

    assert db.query(User).count() == 1
    assert user.role == UserRole.OWNER
    assert user.tenant_id == other_account.id


def test_signup_validation(client):
    assert signup(client, email="not-an-email").status_code == 422
    assert signup(client, password="123").status_code == 422


def test_login_returns_tokens(client):
    signup(client)
    response = client.post(f"{API}/auth/login", json={"email": "founder@x.com", "password": "s3cret!"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "founder@x.com"
    assert body["access_token"]
    assert body["refresh_token"]
    assert body["expires_at"] == 1900000000


def test_login_with_bad_password(client):
    signup(client)
    response = client.post(f"{API}/auth/login", json={"email": "founder@x.com", "password": "wrong!"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_without_local_user(client, identity):
    identity.create_user("ghost@x.com", "s3cret!", {})
    response = client.post(f"{API}/auth/login", json={"email": "ghost@x.com", "password": "s3cret!"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found in database"


def test_me_returns_profile_with_account(client, owner):
    response = client.get(f"{API}/auth/me", headers=auth(owner))
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == owner.id
    assert body["account"] == {"id": owner.tenant_id, "name": "Acme"}


def test_missing_token_is_unauthenticated(client):
    response = client.get(f"{API}/auth/me")
    assert response.status_code == 401


def test_unknown_subject_is_unauthenticated(client, db):
    response = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {uuid.uuid4()}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found in database"


def test_logout(client, identity, owner):
    response = client.post(f"{API}/auth/logout", headers=auth(owner))
    assert response.status_code == 200
    assert identity.signed_out == [owner.external_id]


def test_logout_swallows_provider_errors(client, identity, owner):
    identity.sign_out_error = IdentityProviderError("Provider down")
    response = client.post(f"{API}/auth/logout", headers=auth(owner))
    assert response.status_code == 200
    assert response.json() == {"message": "Logout successful"}


def test_member_write_block_covers_every_authenticated_write(client, db, owner, member):
    project = make_project(db, owner, members=[member])
    some_id = str(uuid.uuid4())
    writes = [
        ("post", f"{API}/auth/logout"),
        ("post", f"{API}/projects"),
        ("put", f"{API}/projects/{project.id}"),
        ("delete", f"{API}/projects/{project.id}"),
        ("post", f"{API}/projects/{project.id}/members/{member.id}"),
        ("delete", f"{API}/projects/{project.id}/members/{member.id}"),
        ("post", f"{API}/evaluations"),
        ("put", f"{API}/evaluations/{some_id}"),
        ("delete", f"{API}/evaluations/{some_id}"),
        ("post", f"{API}/evaluations/{some_id}/questions"),
        ("post", f"{API}/evaluations/{some_id}/join"),
        ("post", f"{API}/evaluations/{some_id}/feedback"),
        ("post", f"{API}/invitations"),
        ("delete", f"{API}/invitations/{some_id}"),
        ("post", f"{API}/invitations/{some_id}/resend"),
    ]
    for method, url in writes:
        kwargs = {"headers": auth(member)}
        if method != "delete":
            kwargs["json"] = {}
        response = client.request(method.upper(), url, **kwargs)
        assert response.status_code == 403, (method, url, response.status_code)

    # Reads stay open
    assert client.get(f"{API}/projects", headers=auth(member)).status_code == 200
