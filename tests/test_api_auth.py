"""Account endpoints."""

from datetime import timedelta

from atsboost.db import User, utcnow
from tests.conftest import auth_headers, make_user
from tests.test_security import legacy_hash


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_register_and_me(client, db):
    response = client.post(
        "/auth/register",
        json={"username": "lerato", "email": "Lerato@Example.co.za", "password": "s3cure-pass", "name": "Lerato Khumalo"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "lerato@example.co.za"
    assert data["user"]["role"] == "user"
    assert not data["user"]["email_verified"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "lerato"

    stored = db.query(User).filter(User.username == "lerato").one()
    assert stored.password.startswith("$2")
    assert stored.verification_token


def test_register_rejects_duplicates_and_bad_input(client, user):
    duplicate = client.post(
        "/auth/register", json={"username": "THANDI", "email": "other@example.co.za", "password": "password123"}
    )
    assert duplicate.status_code == 409

    assert client.post("/auth/register", json={"username": "x", "email": "a@b.co.za", "password": "password123"}).status_code == 422
    assert client.post("/auth/register", json={"username": "newbie", "email": "not-an-email", "password": "password123"}).status_code == 422
    assert client.post("/auth/register", json={"username": "newbie", "email": "n@example.co.za", "password": "short"}).status_code == 422


def test_login_with_email_or_username(client, user, db):
    for login in ("thandi@example.co.za", "Thandi"):
        response = client.post("/auth/login", json={"login": login, "password": "password123"})
        assert response.status_code == 200
        assert response.json()["user"]["id"] == user.id

    db.refresh(user)
    assert user.last_login is not None


def test_login_failures(client, user, db):
    assert client.post("/auth/login", json={"login": "thandi", "password": "wrong"}).status_code == 401
    assert client.post("/auth/login", json={"login": "nobody", "password": "password123"}).status_code == 401

    user.is_active = False
    db.commit()
    response = client.post("/auth/login", json={"login": "thandi", "password": "password123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Account is disabled"


def test_login_upgrades_legacy_hash(client, db):
    legacy = make_user(db, username="legacy", email="legacy@example.co.za")
    legacy.password = legacy_hash("old-password")
    db.commit()

    response = client.post("/auth/login", json={"login": "legacy", "password": "old-password"})
    assert response.status_code == 200
    db.refresh(legacy)
    assert legacy.password.startswith("$2")


def test_me_requires_valid_token(client, user, db):
    assert client.get("/auth/me").status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"}).status_code == 401

    headers = auth_headers(user)
    user.is_active = False
    db.commit()
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_verify_email(client, user, db):
    user.verification_token = "verify-me"
    user.verification_expires = utcnow() + timedelta(hours=1)
    db.commit()

    assert client.post("/auth/verify-email", json={"token": "wrong"}).status_code == 400
    assert client.post("/auth/verify-email", json={"token": "verify-me"}).json() == {"status": "verified"}
    db.refresh(user)
    assert user.email_verified
    assert user.verification_token is None


def test_expired_verification_token(client, user, db):
    user.verification_token = "stale"
    user.verification_expires = utcnow() - timedelta(minutes=1)
    db.commit()
    assert client.post("/auth/verify-email", json={"token": "stale"}).status_code == 400


def test_password_reset_flow(client, user, db):
    assert client.post("/auth/forgot-password", json={"email": "nobody@example.co.za"}).json() == {"status": "ok"}
    assert client.post("/auth/forgot-password", json={"email": "thandi@example.co.za"}).json() == {"status": "ok"}

    db.refresh(user)
    token = user.reset_token
    assert token

    response = client.post("/auth/reset-password", json={"token": token, "password": "new-password-1"})
    assert response.status_code == 200
    assert client.post("/auth/reset-password", json={"token": token, "password": "new-password-2"}).status_code == 400

    assert client.post("/auth/login", json={"login": "thandi", "password": "password123"}).status_code == 401
    assert client.post("/auth/login", json={"login": "thandi", "password": "new-password-1"}).status_code == 200
