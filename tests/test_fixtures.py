"""
Shared test fixtures and utilities for the SnapCal storage test suite.

This module contains helper functions and container fixtures that are reused
across multiple test files. The remote backend runs against an in-memory
SQLite database, so no external services are needed.
"""

import datetime as dt
import uuid
from typing import Generator, Optional

import pytest

from adapters.identity_adapter import CurrentUser, StaticIdentityProvider
from adapters.local_adapter import LocalKeyValueStore
from app.config import Settings
from core.cache import TTLCache
from core.dependencies import StorageContainer, build_container
from domain.schemas import FoodEntry


USER_ID = "user-sarah"
OTHER_USER_ID = "user-michael"
LOCAL_USER_ID = "c2FyYWhAZXhhbXBsZS5jb20="  # local_user_id("sarah@example.com")

# Fixed "today" so archival thresholds are deterministic
TODAY = dt.date(2026, 3, 15)


class FakeClock:
    """Manually advanced monotonic clock for cache expiry tests"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(**overrides) -> Settings:
    """Settings isolated from any .env file"""
    values = {"storage_mode": "local", "remote_database_url": None}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def remote_settings(**overrides) -> Settings:
    return make_settings(storage_mode="remote", remote_database_url="sqlite://", **overrides)


def make_entry(
    day: dt.date,
    calories: float = 100.0,
    protein: float = 10.0,
    carbs: float = 20.0,
    fat: float = 5.0,
    food_item: str = "Oatmeal with berries",
    hour: int = 12,
    entry_id: Optional[str] = None,
    **extra,
) -> FoodEntry:
    """
    Build a meal entry on ``day`` with explicit date and time.

    Date and time are passed explicitly so results do not depend on the
    machine's time zone.
    """
    return FoodEntry(
        id=entry_id or str(uuid.uuid4()),
        timestamp=f"{day.isoformat()}T{hour:02d}:00:00Z",
        date=day,
        time=f"{hour:02d}:00",
        food_item=food_item,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        **extra,
    )


def signed_in(user_id: str = USER_ID, email: str = "sarah@example.com") -> StaticIdentityProvider:
    return StaticIdentityProvider(CurrentUser(id=user_id, email=email))


@pytest.fixture
def identity() -> StaticIdentityProvider:
    return signed_in()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def local_container(identity, clock) -> StorageContainer:
    """Storage layer on the in-memory local store"""
    return build_container(
        make_settings(),
        identity=identity,
        local_store=LocalKeyValueStore(),
        cache=TTLCache(clock=clock),
    )


@pytest.fixture
def remote_container(identity, clock) -> Generator[StorageContainer, None, None]:
    """Storage layer on a fresh in-memory SQLite database"""
    container = build_container(
        remote_settings(),
        identity=identity,
        local_store=LocalKeyValueStore(),
        cache=TTLCache(clock=clock),
    )
    try:
        yield container
    finally:
        container.close()


@pytest.fixture(params=["local", "remote"])
def any_container(request, identity, clock) -> Generator[StorageContainer, None, None]:
    """Runs a test once per backend"""
    app_settings = make_settings() if request.param == "local" else remote_settings()
    container = build_container(
        app_settings,
        identity=identity,
        local_store=LocalKeyValueStore(),
        cache=TTLCache(clock=clock),
    )
    try:
        yield container
    finally:
        container.close()
