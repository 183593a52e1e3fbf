from unittest.mock import patch

from account_platform.account_service import auth
from account_platform.account_service.models import User

from .conftest import STRONG_PASSWORD


def test_signup_returns_token_and_user(signup):
    response = signup()
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["token"]
    assert response.headers["Authorization"] == f"Bearer {body['token']}"

    user = body["data"]["user"]
    assert user["username"] == "john_doe"
    assert user["email"] == "john.doe@example.com"
    assert "password" not in user
    assert user["createdAt"] is not None


def test_signup_stores_hashed_password(signup, db_session):
    assert signup().status_code == 201
    user = db_session.query(User).filter(User.username == "john_doe").first()
    assert user.password != STRONG_PASSWORD
    assert user.check_password(STRONG_PASSWORD)


def test_signup_normalizes_email(signup, db_session):
    assert signup(email="  John.Doe@Example.COM ").status_code == 201
    user = db_session.query(User).filter(User.username == "john_doe").first()
    assert user.email == "john.doe@example.com"


def test_signup_short_password_rejected(signup):
    response = signup(password="abc")
    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "fail"
    messages = [e["message"] for e in body["errors"] if e["field"] == "password"]
    assert "Password must be 8-32 characters" in messages


def test_signup_rejects_non_ascii_digits_and_trailing_newline(signup):
    for password in ("Secret123!\n", "Secret\u0663\u0663\u0663!"):
        response = signup(password=password)
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"password"}


def test_signup_password_mismatch(signup):
    response = signup(confirm="Secret123?")
    assert response.status_code == 400
    assert {"field": "passwordConfirm", "message": "Passwords do not match"} in response.json()["errors"]


def test_signup_missing_fields(client):
    response = client.post("/api/v1/users/signup", json={"username": "user1"})
    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert fields == {"email", "password", "passwordConfirm"}


def test_signup_duplicate_username_and_email(signup):
    assert signup().status_code == 201

    response = signup()
    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert fields == {"username", "email"}


def test_signup_duplicate_email_case_insensitive(signup):
    assert signup().status_code == 201
    response = signup(username="jane_doe", email="JOHN.DOE@example.com")
    assert response.status_code == 400
    assert response.json()["errors"] == [{"field": "email", "message": "Email already exists"}]


def test_login_with_username(signup, client):
    signup()
    response = client.post("/api/v1/users/login", json={"username": "john_doe", "password": STRONG_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert response.headers["Authorization"] == f"Bearer {body['token']}"
    assert body["data"]["user"]["username"] == "john_doe"


def test_login_with_email(signup, client):
    signup()
    response = client.post("/api/v1/users/login", json={"email": "John.Doe@example.com", "password": STRONG_PASSWORD})
    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "john.doe@example.com"


def test_login_requires_identifier(client):
    response = client.post("/api/v1/users/login", json={"password": STRONG_PASSWORD})
    assert response.status_code == 400
    assert response.json()["errors"][0]["message"] == "You must provide either a valid username or a valid email"


def test_login_invalid_email_without_username(client):
    response = client.post("/api/v1/users/login", json={"email": "not-an-email", "password": STRONG_PASSWORD})
    assert response.status_code == 400


def test_login_wrong_password(signup, client):
    signup()
    response = client.post("/api/v1/users/login", json={"username": "john_doe", "password": "Wrong123!"})
    assert response.status_code == 401
    assert response.json() == {"status": "fail", "message": "Invalid credentials"}
    assert "Authorization" not in response.headers


def test_login_unknown_user_matches_wrong_password(signup, client):
    signup()
    wrong_password = client.post("/api/v1/users/login", json={"username": "john_doe", "password": "Wrong123!"})
    unknown_user = client.post("/api/v1/users/login", json={"username": "nobody_here", "password": "Wrong123!"})

    assert unknown_user.status_code == wrong_password.status_code == 401
    assert unknown_user.json() == wrong_password.json()


def test_login_unknown_user_still_verifies_a_hash(client):
    with patch.object(auth.pwd_context, "verify", wraps=auth.pwd_context.verify) as verify:
        response = client.post("/api/v1/users/login", json={"username": "nobody_here", "password": "Wrong123!"})

    assert response.status_code == 401
    verify.assert_called_once_with("Wrong123!", auth.DUMMY_PASSWORD_HASH)
