"""Shared fixtures: every test gets its own in-memory database."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before ``app.infrastructure.database`` builds its engine.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("APP_TIMEZONE", "UTC")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.domain.entities import Notification
from app.infrastructure.database import Base, initialize_database


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


class RecordingPublisher:
    """Collects ``publish`` calls instead of talking to websockets."""

    def __init__(self) -> None:
        self.calls: list[tuple[frozenset[str], Notification]] = []

    def __call__(self, channels: frozenset[str], notification: Notification) -> None:
        self.calls.append((channels, notification))


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
