"""
RideHail - Test Configuration

Pytest fixtures for authentication testing.
Provides settings, a fresh in-memory app per test, and account helpers.
"""

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from ridehail.app import create_app
from ridehail.config import Settings


TEST_ACCESS_SECRET = "test-access-secret"
TEST_REFRESH_SECRET = "test-refresh-secret"

ALICE = {
    "fullname": {"firstname": "Alice", "lastname": "Liddell"},
    "email": "alice@example.com",
    "password": "secret1",
}

BOB_CAPTAIN = {
    "fullname": {"firstname": "Robert", "lastname": "Driver"},
    "email": "bob@example.com",
    "password": "drive123",
    "vehicle": {
        "color": "black",
        "plate": "MH12AB1234",
        "capacity": 4,
        "vehicleType": "car",
    },
}


class FrozenClock:
    """Deterministic clock; call it to read, advance() to move forward."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def make_settings(**overrides) -> Settings:
    values = {
        "JWT_ACCESS": TEST_ACCESS_SECRET,
        "JWT_REFRESH": TEST_REFRESH_SECRET,
        "DATABASE_URL": "sqlite://",
        # Lowest bcrypt cost keeps the suite fast
        "BCRYPT_WORK_FACTOR": 4,
        "ENVIRONMENT": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="function")
def settings() -> Settings:
    return make_settings()


@pytest.fixture(scope="function")
def app(settings):
    return create_app(settings)


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Test client with a fresh in-memory database."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


def register(client: TestClient, kind: str = "user", body: dict = ALICE):
    return client.post(f"/api/v1/{kind}/register", json=body)


def login(client: TestClient, email: str, password: str, kind: str = "user"):
    return client.post(
        f"/api/v1/{kind}/login",
        json={"email": email, "password": password},
    )
