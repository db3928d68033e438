"""Pytest configuration and shared fixtures."""

import os

# Must be set before any dishdash module reads the environment
os.environ.setdefault("RESEND_API_KEY", "re_test_key")
os.environ.setdefault("AUTH_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_EMAIL", "admin@dishdash.com")

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from dishdash.core.config import Settings
from dishdash.database import create_db_and_tables
from dishdash.main import create_app
from dishdash.services.auth import AuthService
from dishdash.services.magic_link import MagicLinkIssuer
from dishdash.services.mailer import MailMessage, MailResult


class FakeMailer:
    """Records outgoing mail; addresses in ``reject`` are refused."""

    def __init__(self):
        self.sent: list[MailMessage] = []
        self.reject: set[str] = set()

    def send(self, message: MailMessage) -> MailResult:
        self.sent.append(message)
        if message.to in self.reject:
            return MailResult(rejected=(message.to,))
        return MailResult(accepted=(message.to,))

    @property
    def last_url(self) -> str:
        text = self.sent[-1].text
        return next(line for line in text.splitlines() if line.startswith("http"))

    def last_link(self) -> tuple[str, str]:
        """(email, token) carried by the most recent sign-in link."""
        query = parse_qs(urlparse(self.last_url).query)
        return query["email"][0], query["token"][0]


@pytest.fixture
def settings():
    settings = Settings()
    settings.admin_email = "admin@dishdash.com"
    settings.auth_secret = "test-secret"
    settings.app_url = "http://testserver"
    settings.validate()
    return settings


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def auth_service(engine, settings):
    return AuthService(engine, settings)


@pytest.fixture
def issuer(engine, settings, mailer):
    return MagicLinkIssuer(engine, settings, mailer)


@pytest.fixture
def app(settings, engine, mailer):
    return create_app(settings=settings, engine=engine, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sign_in(client, mailer):
    """Runs the whole magic link flow for an address and leaves the cookie on the client."""

    def _sign_in(email: str):
        response = client.post("/api/auth/signin/email", json={"email": email})
        assert response.status_code == 200
        link = urlparse(mailer.last_url)
        response = client.get(f"{link.path}?{link.query}", follow_redirects=False)
        assert response.status_code == 303
        return response

    return _sign_in
