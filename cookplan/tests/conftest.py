"""
Shared pytest fixtures for CookPlan tests.

This module provides common fixtures for:
- Database sessions (in-memory SQLite, fresh per test)
- Factory functions for session items and sessions
"""
import os
import pytest
from typing import Callable, Generator

# Set test environment variables BEFORE importing app modules
# This keeps the module-level engine away from the working directory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("TIMER_TICK_SECONDS", "1.0")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from cookplan.db.database import Base
from cookplan.db import models  # noqa: F401  (registers tables on Base)
from cookplan.models.schemas import CookingSession, SessionItem
from cookplan.services.notification_service import NotificationService


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database for testing.

    Each test function gets a fresh database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a database session for testing."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Data Factories
# ============================================================================

@pytest.fixture
def make_item() -> Callable[..., SessionItem]:
    """Factory for session items with readable ids."""
    def _make_item(
        name: str,
        temperature: float = 180,
        time_minutes: float = 10,
        shake_halfway: bool = False,
        **extra,
    ) -> SessionItem:
        return SessionItem(
            id=extra.pop("id", name),
            name=name,
            temperature=temperature,
            time_minutes=time_minutes,
            shake_halfway=shake_halfway,
            **extra,
        )
    return _make_item


@pytest.fixture
def chicken_and_potatoes(make_item):
    """Two items sharing 200C; chicken needs a shake."""
    return [
        make_item("chicken", temperature=200, time_minutes=25, shake_halfway=True),
        make_item("potatoes", temperature=200, time_minutes=20),
    ]


@pytest.fixture
def mixed_items(make_item):
    """Four items in two temperature groups."""
    return [
        make_item("chicken", temperature=200, time_minutes=25, shake_halfway=True),
        make_item("potatoes", temperature=200, time_minutes=20, shake_halfway=True),
        make_item("brussels", temperature=180, time_minutes=12),
        make_item("broccoli", temperature=180, time_minutes=8),
    ]


@pytest.fixture
def building_session(mixed_items) -> CookingSession:
    """Session being built with the mixed items and no batches."""
    return CookingSession(items=[item.model_copy() for item in mixed_items])


class RecordingNotifier(NotificationService):
    """Notification service that only counts calls."""

    def __init__(self):
        super().__init__(attempts=[])
        self.calls = 0

    def notify(self):
        self.calls += 1
        return "recorded"


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
