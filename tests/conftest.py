"""Test configuration and fixtures.

Provides an isolated in-memory SQLite database (one shared connection via
StaticPool) and a recording mail transport, so tests never touch a real
database or SMTP relay.
"""

import os
import re
from typing import Generator

# Set env flags BEFORE importing application modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-session-tokens-0123456789")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app  # imports routers & models
from services.notifications import get_mail_transport

engine = create_engine(
    "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_OTP_IN_HTML = re.compile(r"monospace;\">(\d{6})</p>")


class FakeMailTransport:
    """Records outgoing mail instead of talking SMTP."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str) -> str:
        if self.fail:
            raise ConnectionError("SMTP relay unreachable")
        message_id = f"<fake-{len(self.sent) + 1}@test>"
        self.sent.append({"to": to, "subject": subject, "html": html, "message_id": message_id})
        return message_id

    def last_otp(self) -> str:
        assert self.sent, "no email was sent"
        match = _OTP_IN_HTML.search(self.sent[-1]["html"])
        assert match, "no OTP found in the last email"
        return match.group(1)


@pytest.fixture()
def db_session() -> Generator:  # type: ignore
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def mail() -> FakeMailTransport:
    return FakeMailTransport()


@pytest.fixture(autouse=True)
def override_dependencies(db_session, mail):  # type: ignore
    """Override FastAPI dependencies to use the SQLite session and fake mail."""
    def _get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_mail_transport] = lambda: mail
    yield
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_mail_transport, None)


@pytest.fixture()
def client() -> TestClient:  # type: ignore
    return TestClient(app)


@pytest.fixture()
def signed_up(client, mail):
    """A registered account; returns (email, password)."""
    email, password = "ann@example.com", "hunter22"
    r = client.post("/auth/signup", json={"email": email, "name": "Ann", "password": password})
    assert r.status_code == 200, r.text
    client.cookies.clear()
    return email, password
