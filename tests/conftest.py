"""Pytest fixtures for API and service tests."""

import json
import os
import threading
from collections.abc import Generator

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from coach_notify.api.deps import get_db
from coach_notify.core.security import create_access_token, get_password_hash
from coach_notify.db import models  # noqa: F401  # Imported for side effects
from coach_notify.db.base import Base
from coach_notify.db.models import User
from coach_notify.main import create_app
from coach_notify.services.push_transport import DeliveryAttempt, classify_failure


@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()


@pytest.fixture()
def session_factory(db_session):
    """Hands out extra sessions on the test connection for code that opens its own."""

    factory = sessionmaker(autocommit=False, autoflush=False, bind=db_session.bind)
    sessions: list = []

    def create_session():
        session = factory()
        sessions.append(session)
        return session

    try:
        yield create_session
    finally:
        for session in sessions:
            session.close()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(role: str = "client", full_name: str | None = None, **fields) -> User:
        counter["n"] += 1
        user = User(
            email=fields.pop("email", f"{role}{counter['n']}@example.com"),
            hashed_password=fields.pop("hashed_password", "not-a-real-hash"),
            full_name=full_name,
            role=role,
            is_active=fields.pop("is_active", True),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def password_hash() -> str:
    return get_password_hash("verysecure")


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), role=user.role)}"}


@pytest.fixture()
def headers_for():
    return auth_headers


class StubTransport:
    """Records deliveries; endpoints listed in ``statuses`` fail with that HTTP status."""

    def __init__(self, statuses: dict[str, int] | None = None):
        self.statuses = statuses or {}
        self.calls: list[tuple[str, dict, dict]] = []
        self._lock = threading.Lock()

    def send(self, endpoint, keys, payload):
        with self._lock:
            self.calls.append((endpoint, dict(keys), json.loads(payload)))
        status_code = self.statuses.get(endpoint)
        if status_code is None:
            return DeliveryAttempt.success(endpoint)
        return DeliveryAttempt.from_failure(
            endpoint, classify_failure(f"Push failed: {status_code}", status_code)
        )


@pytest.fixture()
def stub_transport_factory():
    return StubTransport
