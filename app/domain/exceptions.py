"""Errors raised by the notification core."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for notification delivery errors."""


class InvalidArgumentError(NotificationError, ValueError):
    """Raised when a request is rejected before any write happens."""


class NotificationNotFoundError(NotificationError, LookupError):
    """Raised when state is requested for a notification that was never stored."""


class StorageUnavailableError(NotificationError):
    """Raised when the underlying database cannot be reached."""


class PublishError(NotificationError):
    """Realtime delivery failed. Logged by callers, never propagated."""


__all__ = [
    "InvalidArgumentError",
    "NotificationError",
    "NotificationNotFoundError",
    "PublishError",
    "StorageUnavailableError",
]
