"""Tests for bulk state changes and periodic maintenance jobs."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from app.application.use_cases.maintenance import (
    archive_all,
    delete_all_for_user,
    delete_many_for_user,
    mark_all_read,
    prune_orphans,
    purge_expired,
    run_maintenance,
)
from app.application.use_cases.notifications import create_notification, list_for_user
from app.domain.exceptions import InvalidArgumentError
from app.infrastructure.repositories import DeliveryStateRepository, NotificationRepository


def _broadcast(session, publisher, title: str, expires_at: datetime | None = None):
    return create_notification(
        session,
        title=title,
        body="Contenido",
        audience={"mode": "broadcast"},
        expires_at=expires_at,
        publish=publisher,
    )


def test_mark_all_read_and_archive_all(session, publisher):
    _broadcast(session, publisher, "Uno")
    _broadcast(session, publisher, "Dos")
    list_for_user(session, "alice", None)

    read = mark_all_read(session, "alice")
    archived = archive_all(session, "alice")

    assert (read.matched, read.modified) == (2, 2)
    assert (archived.matched, archived.modified) == (2, 2)
    merged = list_for_user(session, "alice", None)
    assert all(item.user_state.is_read and item.user_state.is_archived for item in merged)


def test_bulk_operations_reject_blank_recipient(session):
    with pytest.raises(InvalidArgumentError):
        mark_all_read(session, " ")
    with pytest.raises(InvalidArgumentError):
        delete_all_for_user(session, "")


def test_account_cleanup(session, publisher):
    first = _broadcast(session, publisher, "Uno")
    second = _broadcast(session, publisher, "Dos")
    list_for_user(session, "alice", None)

    assert delete_many_for_user(session, "alice", [first.id]).deleted_count == 1
    assert delete_all_for_user(session, "alice").deleted_count == 1
    assert DeliveryStateRepository(session).find_for_user("alice") == []
    # Listing again simply recreates fresh state rows.
    assert {item.notification.id for item in list_for_user(session, "alice", None)} == {
        first.id,
        second.id,
    }


def test_purge_expired_then_prune_orphans(session, publisher, caplog):
    now = datetime.now(timezone.utc)
    expiring = _broadcast(session, publisher, "Vence pronto", expires_at=now + timedelta(hours=1))
    kept = _broadcast(session, publisher, "Permanente")
    list_for_user(session, "alice", None)
    list_for_user(session, "bob", None)

    assert purge_expired(session, now=now) == 0
    with caplog.at_level(logging.INFO):
        assert purge_expired(session, now=now + timedelta(hours=2)) == 1
        assert prune_orphans(session) == 2

    assert NotificationRepository(session).get(expiring.id) is None
    assert NotificationRepository(session).get(kept.id) is not None
    remaining = DeliveryStateRepository(session).find_for_user("alice")
    assert [state.notification_id for state in remaining] == [kept.id]
    assert "Pruned 2 orphaned delivery state row(s)" in caplog.text


def test_run_maintenance_reports_counts(session, publisher):
    kept = _broadcast(session, publisher, "Permanente")
    gone = _broadcast(
        session, publisher, "Vencida", expires_at=datetime.now(timezone.utc) + timedelta(hours=1)
    )
    DeliveryStateRepository(session).upsert("alice", kept.id)
    DeliveryStateRepository(session).upsert("alice", gone.id)
    purge_expired(session, now=datetime.now(timezone.utc) + timedelta(hours=2))

    report = run_maintenance(session, purge=False)

    assert report.expired_notifications == 0
    assert report.orphaned_states == 1


def test_purged_ids_are_not_reused_by_new_notifications(session, publisher):
    now = datetime.now(timezone.utc)
    expiring = _broadcast(session, publisher, "Vence pronto", expires_at=now + timedelta(minutes=30))
    list_for_user(session, "alice", None)
    mark_all_read(session, "alice")

    assert purge_expired(session, now=now + timedelta(hours=1)) == 1
    fresh = _broadcast(session, publisher, "Nueva")

    assert fresh.id != expiring.id
    (item,) = list_for_user(session, "alice", None)
    assert item.notification.id == fresh.id
    assert item.user_state.is_read is False
