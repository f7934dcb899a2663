"""Shared fixtures: in-memory SQLite, fakes for push and email, API client."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LIFECYCLE_POLLER_ENABLED"] = "false"
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from civicvote.application.use_cases.notifications import NotificationDispatcher
from civicvote.config import reset_settings_cache
from civicvote.infrastructure import models  # noqa: F401
from civicvote.infrastructure.database import Base, SessionLocal, engine, get_db


class FakePublisher:
    """Records pushes instead of writing to websockets."""

    def __init__(self) -> None:
        self.dispatched: list[tuple] = []

    def dispatch(self, notification, recipient_ids=None) -> None:
        self.dispatched.append((notification, recipient_ids))

    @property
    def types(self) -> list[str]:
        return [notification.type for notification, _ in self.dispatched]


class FakeEmailSender:
    def __init__(self) -> None:
        self.calls: list[tuple[int, str]] = []

    def __call__(self, session, voting_session, transition) -> int:
        self.calls.append((voting_session.id, transition.value))
        return 1


@pytest.fixture(autouse=True)
def setup_database():
    """Create every table before each test and drop them afterwards."""

    reset_settings_cache()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Session:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest.fixture
def dispatcher(db_session: Session, publisher: FakePublisher) -> NotificationDispatcher:
    return NotificationDispatcher(db_session, publisher=publisher)


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@asynccontextmanager
async def _test_lifespan(app):
    yield


@pytest.fixture
def client(db_session: Session, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """FastAPI test client sharing the test database session.

    The lifespan is replaced so shutdown leaves the in-memory engine open.
    """

    from main import app as fastapi_app

    def override_get_db():
        yield db_session

    monkeypatch.setattr(fastapi_app.router, "lifespan_context", _test_lifespan)
    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()
