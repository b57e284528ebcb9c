"""Tests for notification storage and audience queries."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from app.domain.entities import BroadcastAudience, Notification, RoleAudience, UserAudience
from app.domain.exceptions import InvalidArgumentError, StorageUnavailableError
from app.infrastructure.database import Base
from app.infrastructure.repositories import NotificationRepository


def _notification(audience, **overrides) -> Notification:
    values = {"id": None, "title": "Aviso", "body": "Contenido", "audience": audience}
    values.update(overrides)
    return Notification(**values)


def test_create_round_trips_audience_and_metadata(session):
    repository = NotificationRepository(session)

    saved = repository.create(
        _notification(
            RoleAudience(roles={"admin", "manager"}),
            metadata={"load_id": 7},
            severity="warning",
        )
    )
    loaded = repository.get(saved.id)

    assert loaded == saved
    assert loaded.audience == RoleAudience(roles={"admin", "manager"})
    assert loaded.metadata == {"load_id": 7}
    assert loaded.created_at.tzinfo is not None


def test_create_rejects_blank_title(session):
    with pytest.raises(InvalidArgumentError):
        NotificationRepository(session).create(_notification(BroadcastAudience(), title=" "))


def test_find_visible_to_matches_audiences(session):
    repository = NotificationRepository(session)
    broadcast = repository.create(_notification(BroadcastAudience()))
    for_bob = repository.create(_notification(UserAudience(usernames={"bob"})))
    for_admins = repository.create(_notification(RoleAudience(roles={"admin"})))

    def visible(recipient, role):
        return {item.id for item in repository.find_visible_to(recipient, role)}

    assert visible("bob", None) == {broadcast.id, for_bob.id}
    assert visible("alice", "admin") == {broadcast.id, for_admins.id}
    # Role names are not usernames.
    assert visible("admin", None) == {broadcast.id}


def test_find_visible_to_skips_expired(session):
    repository = NotificationRepository(session)
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    repository.create(_notification(BroadcastAudience(), expires_at=now))
    live = repository.create(
        _notification(BroadcastAudience(), expires_at=now + timedelta(minutes=1))
    )

    assert [item.id for item in repository.find_visible_to("alice", None, now=now)] == [live.id]


def test_delete_expired_removes_members_too(session):
    repository = NotificationRepository(session)
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    expired = repository.create(
        _notification(UserAudience(usernames={"bob"}), expires_at=now - timedelta(days=1))
    )
    kept = repository.create(_notification(UserAudience(usernames={"bob"})))

    assert repository.delete_expired(now=now) == 1
    assert repository.get(expired.id) is None
    assert repository.get(kept.id).audience == UserAudience(usernames={"bob"})


def test_database_errors_become_storage_unavailable(session, engine, caplog):
    Base.metadata.drop_all(bind=engine)

    with caplog.at_level(logging.ERROR), pytest.raises(StorageUnavailableError) as excinfo:
        NotificationRepository(session).find_visible_to("alice", None)

    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert "Database unavailable" in caplog.text
