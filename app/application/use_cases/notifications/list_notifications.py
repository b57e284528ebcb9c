"""Use cases for reading a recipient's notifications."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import MergedNotification, UserState
from app.domain.exceptions import NotificationNotFoundError, StorageUnavailableError
from app.infrastructure.repositories import (
    DeliveryStateRepository,
    NotificationRepository,
)

from .validators import ensure_recipient, normalize_page, normalize_role

logger = logging.getLogger(__name__)


def list_for_user(
    session: Session,
    recipient: str,
    role: str | None,
    *,
    limit: int | None = None,
    skip: int = 0,
    only_unread: bool = False,
) -> list[MergedNotification]:
    """Return the visible notifications of ``recipient`` merged with their state.

    State rows are materialized here, the first time a notification is listed.
    Pagination is applied to the notifications before merging, so with
    ``only_unread`` a page may hold fewer than ``limit`` items.
    """

    recipient = ensure_recipient(recipient)
    role = normalize_role(role)
    limit, skip = normalize_page(limit, skip)

    notifications = NotificationRepository(session).find_visible_to(
        recipient, role, limit=limit, skip=skip
    )
    if not notifications:
        return []

    states_repository = DeliveryStateRepository(session)
    for notification in notifications:
        try:
            states_repository.upsert(recipient, notification.id)
        except (NotificationNotFoundError, StorageUnavailableError, SQLAlchemyError) as exc:
            session.rollback()
            logger.warning(
                "Could not record delivery of notification %s to %s: %s",
                notification.id,
                recipient,
                exc,
            )

    states = states_repository.find_for_user(
        recipient,
        limit=None,
        notification_ids=[notification.id for notification in notifications],
    )
    by_notification = {state.notification_id: state for state in states}

    merged: list[MergedNotification] = []
    for notification in notifications:
        state = by_notification.get(notification.id)
        user_state = UserState.from_delivery_state(state) if state else UserState()
        if only_unread and user_state.is_read:
            continue
        merged.append(MergedNotification(notification=notification, user_state=user_state))
    return merged


def count_unread(session: Session, recipient: str) -> int:
    """Return the number of delivered notifications ``recipient`` has not read."""

    return DeliveryStateRepository(session).count_unread(ensure_recipient(recipient))


__all__ = ["count_unread", "list_for_user"]
