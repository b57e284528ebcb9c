"""Tests for the notification create/list/mark use cases."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from app.application.use_cases.notifications import (
    count_unread,
    create_notification,
    list_for_user,
    mark_archived,
    mark_read,
)
from app.domain.entities import RoleAudience, UserAudience, UserState
from app.domain.exceptions import (
    InvalidArgumentError,
    NotificationNotFoundError,
    StorageUnavailableError,
)
from app.infrastructure.models import DeliveryStateModel, NotificationModel
from app.infrastructure.repositories import DeliveryStateRepository


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def test_role_notification_is_listed_for_matching_role(session, publisher):
    created = create_notification(
        session,
        title="Nueva versión",
        body="Se publicó la versión 2.0",
        audience={"mode": "role", "roles": ["admin"]},
        publish=publisher,
    )

    assert created.id is not None
    assert created.audience == RoleAudience(roles={"admin"})
    assert created.severity == "info"
    assert created.channels == ["inapp"]
    assert publisher.calls == [(frozenset({"role:admin"}), created)]

    merged = list_for_user(session, "alice", "admin")

    assert [item.notification.id for item in merged] == [created.id]
    state = merged[0].user_state
    assert state.is_read is False
    assert state.is_archived is False
    assert state.delivered_at is not None
    assert state.read_at is None

    assert list_for_user(session, "bob", "tenant") == []
    assert list_for_user(session, "carol", None) == []


def test_user_notification_is_listed_only_for_its_users(session, publisher):
    created = create_notification(
        session,
        title="Tu reporte está listo",
        body="Descárgalo desde el panel",
        audience=UserAudience(usernames={"bob"}),
        severity="success",
        publish=publisher,
    )

    assert publisher.calls[0][0] == frozenset({"user:bob"})
    assert [item.notification.id for item in list_for_user(session, "bob", "tenant")] == [
        created.id
    ]
    assert list_for_user(session, "alice", "admin") == []


def test_listing_materializes_state_only_once(session, publisher):
    created = create_notification(
        session,
        title="Aviso",
        body="Contenido",
        audience={"mode": "broadcast"},
        publish=publisher,
    )

    first = list_for_user(session, "alice", None)
    second = list_for_user(session, "alice", None)

    assert first[0].user_state.delivered_at == second[0].user_state.delivered_at
    assert _count(session, DeliveryStateModel) == 1
    assert DeliveryStateRepository(session).find_for_user("alice")[0].notification_id == created.id


def test_list_orders_newest_first_and_paginates(session, publisher):
    ids = [
        create_notification(
            session,
            title=f"Aviso {index}",
            body="Contenido",
            audience={"mode": "broadcast"},
            publish=publisher,
        ).id
        for index in range(3)
    ]

    page = list_for_user(session, "alice", None, limit=2)
    rest = list_for_user(session, "alice", None, limit=2, skip=2)

    assert [item.notification.id for item in page] == [ids[2], ids[1]]
    assert [item.notification.id for item in rest] == [ids[0]]


def test_only_unread_hides_read_notifications(session, publisher):
    read = create_notification(
        session, title="Leída", body="x", audience={"mode": "broadcast"}, publish=publisher
    )
    unread = create_notification(
        session, title="Pendiente", body="x", audience={"mode": "broadcast"}, publish=publisher
    )
    mark_read(session, "alice", read.id)

    merged = list_for_user(session, "alice", None, only_unread=True)

    assert [item.notification.id for item in merged] == [unread.id]
    assert count_unread(session, "alice") == 1


def test_expired_notifications_are_not_listed(session, publisher):
    create_notification(
        session,
        title="Vencida",
        body="x",
        audience={"mode": "broadcast"},
        expires_at=datetime.now(timezone.utc) - timedelta(seconds=1),
        publish=publisher,
    )
    live = create_notification(
        session,
        title="Vigente",
        body="x",
        audience={"mode": "broadcast"},
        expires_at=datetime.now(timezone.utc) + timedelta(days=1),
        publish=publisher,
    )

    assert [item.notification.id for item in list_for_user(session, "alice", None)] == [live.id]


def test_publish_failure_still_returns_saved_notification(session, caplog):
    def failing_publish(channels, notification):
        raise RuntimeError("broker down")

    with caplog.at_level(logging.WARNING):
        created = create_notification(
            session,
            title="Aviso",
            body="Contenido",
            audience={"mode": "broadcast"},
            publish=failing_publish,
        )

    assert created.id is not None
    assert _count(session, NotificationModel) == 1
    assert "broker down" in caplog.text


def test_empty_audience_is_stored_without_publishing(session, publisher):
    created = create_notification(
        session,
        title="Sin destinatarios",
        body="x",
        audience={"mode": "user", "usernames": []},
        publish=publisher,
    )

    assert created.id is not None
    assert publisher.calls == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "   "},
        {"body": ""},
        {"title": "x" * 201},
        {"audience": None},
        {"audience": {"mode": "user", "usernames": ["bob"], "roles": ["admin"]}},
        {"severity": "critical"},
        {"channels": ["fax"]},
    ],
)
def test_invalid_input_writes_nothing(session, publisher, overrides):
    values = {
        "title": "Aviso",
        "body": "Contenido",
        "audience": {"mode": "broadcast"},
    }
    values.update(overrides)

    with pytest.raises(InvalidArgumentError):
        create_notification(session, publish=publisher, **values)

    assert _count(session, NotificationModel) == 0
    assert publisher.calls == []


def test_list_requires_recipient(session):
    with pytest.raises(InvalidArgumentError):
        list_for_user(session, "", "admin")


def test_mark_archived_does_not_change_read_state(session, publisher):
    created = create_notification(
        session, title="Aviso", body="x", audience={"mode": "broadcast"}, publish=publisher
    )
    mark_read(session, "alice", created.id)

    state = mark_archived(session, "alice", created.id)

    assert state.is_archived is True
    assert state.is_read is True
    assert count_unread(session, "alice") == 0


def test_marking_before_creation_does_not_leak_into_new_notification(session, publisher):
    with pytest.raises(NotificationNotFoundError):
        mark_read(session, "alice", 1)

    created = create_notification(
        session, title="Aviso", body="x", audience={"mode": "broadcast"}, publish=publisher
    )

    (item,) = list_for_user(session, "alice", None)
    assert item.notification.id == created.id
    assert item.user_state.is_read is False
    assert item.user_state.read_at is None


def test_failed_state_write_degrades_only_that_item(session, publisher, monkeypatch, caplog):
    healthy = create_notification(
        session, title="Sana", body="x", audience={"mode": "broadcast"}, publish=publisher
    )
    broken = create_notification(
        session, title="Rota", body="x", audience={"mode": "broadcast"}, publish=publisher
    )
    original_upsert = DeliveryStateRepository.upsert

    def flaky_upsert(self, recipient, notification_id):
        if notification_id == broken.id:
            raise StorageUnavailableError("Almacenamiento no disponible")
        return original_upsert(self, recipient, notification_id)

    monkeypatch.setattr(DeliveryStateRepository, "upsert", flaky_upsert)

    with caplog.at_level(logging.WARNING):
        merged = list_for_user(session, "alice", None)

    by_id = {item.notification.id: item.user_state for item in merged}
    assert list(by_id) == [broken.id, healthy.id]
    assert by_id[broken.id] == UserState()
    assert by_id[healthy.id].delivered_at is not None
    assert f"Could not record delivery of notification {broken.id}" in caplog.text
    assert _count(session, DeliveryStateModel) == 1
