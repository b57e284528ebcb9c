"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from anyio import from_thread

from app.domain.audience import audience_to_payload
from app.domain.entities import Notification
from app.domain.exceptions import PublishError
from app.utils import isoformat_or_none

from .manager import NotificationConnectionManager, notification_manager

NEW_NOTIFICATION_EVENT = "notification.new"


class NotificationPublisher:
    """Serialize notifications and schedule their delivery.

    Delivery is only scheduled, never awaited, so callers are not blocked by
    slow or missing subscribers.
    """

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task[int]] = set()

    def publish(self, channels: Iterable[str], notification: Notification) -> None:
        """Schedule ``notification`` for every subscriber of ``channels``."""

        names = frozenset(channels)
        if not names:
            return

        message = {"type": NEW_NOTIFICATION_EVENT, "data": serialize_notification(notification)}
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Called from a worker thread (sync FastAPI endpoint): hop onto the
            # event loop thread only to create the task.
            try:
                from_thread.run_sync(self._schedule, names, message)
            except RuntimeError as exc:
                raise PublishError("No event loop available for realtime delivery") from exc
        else:
            self._schedule(names, message)

    def _schedule(self, channels: frozenset[str], message: dict[str, Any]) -> None:
        task = asyncio.get_running_loop().create_task(
            self._manager.send_to_channels(channels, message)
        )
        # The loop only keeps weak references to tasks.
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "title": notification.title,
        "body": notification.body,
        "type": notification.type,
        "severity": notification.severity,
        "audience": audience_to_payload(notification.audience),
        "metadata": dict(notification.metadata or {}),
        "channels": list(notification.channels or []),
        "created_at": isoformat_or_none(notification.created_at),
        "expires_at": isoformat_or_none(notification.expires_at),
    }


notification_publisher = NotificationPublisher(notification_manager)


def dispatch_notification(channels: Iterable[str], notification: Notification) -> None:
    """Public helper that delegates to the shared publisher instance."""

    notification_publisher.publish(channels, notification)


__all__ = [
    "NEW_NOTIFICATION_EVENT",
    "NotificationPublisher",
    "dispatch_notification",
    "notification_publisher",
    "serialize_notification",
]
