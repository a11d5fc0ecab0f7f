from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from fastapi.testclient import TestClient

from watchswipe.app import app
from watchswipe.config import DEFAULT_APP_CONFIG
from watchswipe.swipe.session import sessions

client = TestClient(app)


def _signup(c, email=None, password="secret123"):
    email = email or f"{uuid.uuid4().hex[:10]}@example.com"
    resp = c.post("/auth/signup", json={
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": email,
        "password": password,
    })
    return email, resp


def _id_token(sub, email, name, expires_in=300, secret=None):
    claims = {
        "sub": sub,
        "email": email,
        "name": name,
        "aud": DEFAULT_APP_CONFIG.federated_jwt_audience,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret or DEFAULT_APP_CONFIG.federated_jwt_secret, algorithm="HS256")


# ── Sign-up / Log-in / Log-out ───────────────────────────────────────────


def test_signup_creates_profile_and_requires_onboarding():
    c = TestClient(app)
    email, resp = _signup(c)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"]["email"] == email
    assert body["onboarding_required"] is True

    profile = c.get("/profile").json()
    assert profile["first_name"] == "Ada"
    assert profile["last_name"] == "Lovelace"
    assert profile["onboarding_complete"] is False


def test_signup_duplicate_email_is_rejected():
    c = TestClient(app)
    email, _ = _signup(c)
    _, resp = _signup(TestClient(app), email=email)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Sign-up failed"


def test_signup_validation_rejects_short_password():
    resp = client.post("/auth/signup", json={
        "first_name": "A", "last_name": "B", "email": "short@example.com", "password": "123",
    })
    assert resp.status_code == 422


def test_login_success():
    email, _ = _signup(TestClient(app))
    c = TestClient(app)
    resp = c.post("/auth/login", json={"email": email, "password": "secret123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == email
    assert resp.json()["onboarding_required"] is True


def test_login_wrong_password():
    email, _ = _signup(TestClient(app))
    resp = client.post("/auth/login", json={"email": email, "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


def test_login_unknown_user():
    resp = client.post("/auth/login", json={"email": "nobody@example.com", "password": "x"})
    assert resp.status_code == 401


def test_federated_first_sign_in_creates_profile():
    c = TestClient(app)
    token = _id_token(uuid.uuid4().hex, "grace@example.com", "Grace Brewster Hopper")
    resp = c.post("/auth/federated", json={"provider": "google", "id_token": token})
    assert resp.status_code == 200
    assert resp.json()["onboarding_required"] is True
    assert resp.json()["user"]["email"] == "grace@example.com"
    profile = c.get("/profile").json()
    assert profile["first_name"] == "Grace"
    assert profile["last_name"] == "Brewster Hopper"


def test_federated_second_sign_in_keeps_profile():
    subject = uuid.uuid4().hex
    c = TestClient(app)
    first = c.post("/auth/federated", json={
        "provider": "google",
        "id_token": _id_token(subject, "linus@example.com", "Linus"),
    }).json()
    c.post("/onboarding", json={"wrist_size": 18, "owned_watches": []})

    again = TestClient(app).post("/auth/federated", json={
        "provider": "google",
        "id_token": _id_token(subject, "linus@example.com", "Linus"),
    }).json()
    assert again["user"]["uid"] == first["user"]["uid"]
    assert again["onboarding_required"] is False


def test_federated_forged_token_is_rejected():
    c = TestClient(app)
    forged = _id_token(
        "victim-subject", "victim@example.com", "Victim",
        secret="attacker-chosen-secret-that-is-long-enough",
    )
    resp = c.post("/auth/federated", json={"provider": "google", "id_token": forged})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"
    assert c.get("/auth/me").status_code == 401


def test_federated_expired_token_is_rejected():
    c = TestClient(app)
    expired = _id_token(uuid.uuid4().hex, "old@example.com", "Old Token", expires_in=-60)
    resp = c.post("/auth/federated", json={"provider": "google", "id_token": expired})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


def test_federated_requires_id_token():
    resp = client.post("/auth/federated", json={"provider": "google"})
    assert resp.status_code == 422


def test_signing_in_as_another_user_closes_previous_session():
    c = TestClient(app)
    _signup(c)
    first_uid = c.get("/auth/me").json()["uid"]
    c.post("/swipe/like")
    assert sessions.get(first_uid) is not None

    _signup(c)
    second_uid = c.get("/auth/me").json()["uid"]
    assert second_uid != first_uid
    assert sessions.get(first_uid) is None
    assert sessions.get(second_uid) is not None


def test_auth_me_when_logged_in():
    c = TestClient(app)
    email, _ = _signup(c)
    resp = c.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["email"] == email


def test_auth_me_not_logged_in():
    c = TestClient(app)  # fresh client, no session
    resp = c.get("/auth/me")
    assert resp.status_code == 401


def test_logout_clears_session_and_liked_set():
    c = TestClient(app)
    _signup(c)
    uid = c.get("/auth/me").json()["uid"]
    c.post("/swipe/like")
    assert len(sessions.get(uid).liked) == 1

    resp = c.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["status"] == "logged_out"
    assert sessions.get(uid) is None
    assert c.get("/auth/me").status_code == 401


# ── Route protection ─────────────────────────────────────────────────────


def test_swipe_requires_login():
    c = TestClient(app)
    assert c.get("/swipe").status_code == 401
    assert c.post("/swipe/like").status_code == 401
    assert c.post("/swipe/dislike").status_code == 401


def test_saved_requires_login():
    c = TestClient(app)
    assert c.get("/saved").status_code == 401
    assert c.delete("/saved/w001").status_code == 401


def test_profile_and_onboarding_require_login():
    c = TestClient(app)
    assert c.get("/profile").status_code == 401
    assert c.get("/onboarding").status_code == 401
    assert c.post("/onboarding", json={}).status_code == 401


# ── Public endpoints stay public ─────────────────────────────────────────


def test_health_is_public():
    c = TestClient(app)
    resp = c.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata_is_public():
    c = TestClient(app)
    resp = c.get("/metadata")
    assert resp.status_code == 200
    assert "Rolex" in resp.json()["brands"]
