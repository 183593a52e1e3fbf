"""
Shared fixtures: an isolated app per test backed by a temporary SQLite file
and a mailer that records messages instead of sending them.
"""
import pytest
from fastapi.testclient import TestClient

from account_platform.account_service.config import Settings
from account_platform.account_service.mailer import Mailer, MailDeliveryError
from account_platform.account_service.main import create_app

STRONG_PASSWORD = "Secret123!"


class RecordingMailer(Mailer):
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, text, html=None):
        if self.fail:
            raise MailDeliveryError("SMTP unavailable")
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ENVIRONMENT="development",
        JWT_SECRET="test-secret",
        LOCAL_DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(settings, mailer):
    return create_app(settings, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(app, client):
    session = app.state.db.session()
    yield session
    session.close()


@pytest.fixture
def signup(client):
    """Register a user through the API and return the response."""
    def _signup(username="john_doe", email="john.doe@example.com", password=STRONG_PASSWORD, confirm=None):
        return client.post(
            "/api/v1/users/signup",
            json={
                "username": username,
                "email": email,
                "password": password,
                "passwordConfirm": password if confirm is None else confirm,
            },
        )
    return _signup
