"""
Tests for signup, login and profile endpoints.
"""
import pytest

from app.core import auth_dependency, security
from app.db.models.user import User


def test_signup_success(client, db):
    response = client.post("/auth/signup", json={
        "full_name": "Test User",
        "email": "Test_Signup@Example.com",
        "password": "testpass123",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User created successfully"
    assert body["user_id"]

    user = db.query(User).filter(User.email == "test_signup@example.com").first()
    assert user is not None
    assert user.full_name == "Test User"
    assert user.password_hash != "testpass123"


def test_signup_duplicate_email(client, test_user):
    response = client.post("/auth/signup", json={
        "full_name": "Someone Else",
        "email": test_user.email,
        "password": "anotherpass1",
    })

    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"


def test_signup_rejects_short_password(client):
    response = client.post("/auth/signup", json={
        "full_name": "Short",
        "email": "short@example.com",
        "password": "abc",
    })
    assert response.status_code == 422


def test_signup_rejects_password_over_72_bytes(client):
    response = client.post("/auth/signup", json={
        "full_name": "Long",
        "email": "long@example.com",
        "password": "x" * 73,
    })
    assert response.status_code == 422


def test_login_returns_token(client, test_user):
    response = client.post("/auth/login", data={"username": test_user.email, "password": "testpass123"})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]


def test_login_wrong_password(client, test_user):
    response = client.post("/auth/login", data={"username": test_user.email, "password": "wrongpass"})
    assert response.status_code == 401


def test_protected_route_requires_token(client):
    response = client.get("/profile")
    assert response.status_code == 401


def test_protected_route_rejects_garbage_token(client):
    response = client.get("/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_token_rejected_without_secret_key(client, auth_headers, monkeypatch):
    monkeypatch.setattr(auth_dependency, "SECRET_KEY", None)

    response = client.get("/profile", headers=auth_headers)

    assert response.status_code == 401


def test_token_not_issued_without_secret_key(monkeypatch):
    monkeypatch.setattr(security, "SECRET_KEY", None)

    with pytest.raises(RuntimeError):
        security.create_access_token({"sub": "asha@example.com"})


def test_get_profile(client, test_user, auth_headers):
    response = client.get("/profile", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == test_user.id
    assert body["email"] == "asha@example.com"
    assert body["full_name"] == "Asha Rao"
    assert body["college"] is None


def test_update_profile_partial(client, db, test_user, auth_headers):
    response = client.patch("/profile", headers=auth_headers, json={
        "college": "IIT Madras",
        "graduation_year": 2025,
        "resume_name": "asha_cv.pdf",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["college"] == "IIT Madras"
    assert body["graduation_year"] == 2025
    assert body["full_name"] == "Asha Rao"

    db.expire_all()
    user = db.query(User).filter(User.id == test_user.id).first()
    assert user.resume_name == "asha_cv.pdf"


def test_update_profile_validates_graduation_year(client, auth_headers):
    response = client.patch("/profile", headers=auth_headers, json={"graduation_year": 1800})
    assert response.status_code == 422
