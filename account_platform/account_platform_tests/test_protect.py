"""Tests for the bearer check guarding protected routes."""
from datetime import timedelta

from account_platform.account_service.auth import create_access_token
from account_platform.account_service.models import User


def auth_header(token: str):
    return {"Authorization": f"Bearer {token}"}


def test_me_returns_current_user(signup, client):
    token = signup().json()["token"]
    response = client.get("/api/v1/users/me", headers=auth_header(token))
    assert response.status_code == 200
    assert response.json()["data"]["user"]["username"] == "john_doe"


def test_missing_token(client):
    response = client.get("/api/v1/users/me")
    assert response.status_code == 401
    assert response.json() == {"status": "fail", "message": "You are not logged in! Please log in to get access."}


def test_non_bearer_scheme(signup, client):
    token = signup().json()["token"]
    response = client.get("/api/v1/users/me", headers={"Authorization": f"Basic {token}"})
    assert response.status_code == 401
    assert "not logged in" in response.json()["message"]


def test_expired_token(signup, client, settings, db_session):
    signup()
    user = db_session.query(User).filter(User.username == "john_doe").first()
    token = create_access_token(user.id, settings, expires_delta=timedelta(seconds=-5))

    response = client.get("/api/v1/users/me", headers=auth_header(token))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token. Please log in again."


def test_tampered_token(signup, client):
    token = signup().json()["token"]
    tampered = token.rsplit(".", 1)[0] + ".c2lnbmF0dXJl"
    response = client.get("/api/v1/users/me", headers=auth_header(tampered))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token. Please log in again."


def test_token_for_deleted_user(signup, client, db_session):
    token = signup().json()["token"]
    db_session.query(User).delete()
    db_session.commit()

    response = client.get("/api/v1/users/me", headers=auth_header(token))
    assert response.status_code == 401
    assert response.json()["message"] == "The user belonging to this token no longer exists."
