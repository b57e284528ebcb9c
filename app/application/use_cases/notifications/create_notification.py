"""Use case for authoring a notification and pushing it in realtime."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any, TypeAlias

from sqlalchemy.orm import Session

from app.domain.audience import resolve_channels
from app.domain.entities import Audience, Notification
from app.infrastructure.notifications import dispatch_notification
from app.infrastructure.repositories import NotificationRepository
from app.utils import ensure_app_timezone, now_in_app_timezone

from .validators import (
    TITLE_MAX_LENGTH,
    ensure_audience,
    ensure_channels,
    ensure_severity,
    ensure_text,
    ensure_type,
)

logger = logging.getLogger(__name__)

PublishCallback: TypeAlias = Callable[[frozenset[str], Notification], None]


def create_notification(
    session: Session,
    *,
    title: str,
    body: str,
    audience: Audience | Mapping[str, Any],
    type: str | None = None,
    severity: str | None = None,
    expires_at: datetime | None = None,
    metadata: dict[str, Any] | None = None,
    channels: Iterable[str] | None = None,
    publish: PublishCallback | None = dispatch_notification,
) -> Notification:
    """Persist a notification once and push it to the channels of its audience.

    Validation happens before anything is written. Publishing is best-effort:
    a failing ``publish`` is logged and the saved notification is still
    returned, since recipients pick it up through the list path anyway.
    """

    notification = Notification(
        id=None,
        title=ensure_text(title, field="title", max_length=TITLE_MAX_LENGTH),
        body=ensure_text(body, field="body"),
        audience=ensure_audience(audience),
        type=ensure_type(type),
        severity=ensure_severity(severity),
        metadata=dict(metadata or {}),
        channels=ensure_channels(channels),
        created_at=now_in_app_timezone(),
        expires_at=ensure_app_timezone(expires_at),
    )

    saved = NotificationRepository(session).create(notification)
    channel_names = resolve_channels(saved.audience)
    logger.info(
        "Notification %s stored for %s channel(s)", saved.id, len(channel_names)
    )

    if publish is not None and channel_names:
        try:
            publish(channel_names, saved)
        except Exception as exc:
            logger.warning(
                "Realtime publish of notification %s failed: %s", saved.id, exc
            )

    return saved


__all__ = ["PublishCallback", "create_notification"]
