"""
Shared pytest fixtures.

Every test gets its own in-memory SQLite database, change feed and session
registry; the API client is wired to them through dependency overrides, and
"now" is pinned so dose states are deterministic.
"""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from medsguardian.api.v1.routes.deps import get_now, get_sessions, get_storage
from medsguardian.db.init_db import init_db
from medsguardian.db.models.user import GUARDIAN, PATIENT
from medsguardian.db.session import make_session_factory
from medsguardian.main import app
from medsguardian.services import accounts
from medsguardian.services.events import ChangeFeed
from medsguardian.services.sessions import SessionRegistry
from medsguardian.services.storage import Storage

PASSWORD = "s3cret-pass"


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def set(self, hour: int, minute: int, second: int = 0) -> None:
        self.now = self.now.replace(hour=hour, minute=minute, second=second)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def storage(engine, feed):
    return Storage(make_session_factory(engine), feed)


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 2, 8, 10))


@pytest.fixture
def client(storage, registry, clock):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_sessions] = lambda: registry
    app.dependency_overrides[get_now] = lambda: clock.now
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ============================================================================
# Accounts
# ============================================================================

@pytest.fixture
def patient(storage):
    return accounts.signup(
        storage,
        name="Ada Patient",
        email="ada@example.com",
        password=PASSWORD,
        role=PATIENT,
    )


@pytest.fixture
def guardian(storage, patient):
    return accounts.signup(
        storage,
        name="Gus Guardian",
        email="gus@example.com",
        password=PASSWORD,
        role=GUARDIAN,
        patient_code=patient.patient_code,
    )


def auth_headers(client, email: str, password: str = PASSWORD) -> dict:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def patient_headers(client, patient):
    return auth_headers(client, patient.email)


@pytest.fixture
def guardian_headers(client, guardian):
    return auth_headers(client, guardian.email)
