"""Per-recipient delivery bookkeeping for notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .notification import Notification


@dataclass
class DeliveryState:
    """Read/archive state of one notification for one recipient."""

    id: int | None
    recipient: str
    notification_id: int
    is_read: bool
    is_archived: bool
    delivered_at: datetime | None
    read_at: datetime | None = None


@dataclass
class UserState:
    """Subset of :class:`DeliveryState` attached to listed notifications."""

    is_read: bool = False
    is_archived: bool = False
    delivered_at: datetime | None = None
    read_at: datetime | None = None

    @classmethod
    def from_delivery_state(cls, state: DeliveryState) -> "UserState":
        return cls(
            is_read=state.is_read,
            is_archived=state.is_archived,
            delivered_at=state.delivered_at,
            read_at=state.read_at,
        )


@dataclass
class MergedNotification:
    """A notification merged with the state of the recipient listing it."""

    notification: Notification
    user_state: UserState


@dataclass(frozen=True)
class BulkUpdateResult:
    """Outcome of a declarative multi-row update."""

    matched: int
    modified: int


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a hard delete."""

    deleted_count: int


__all__ = [
    "BulkUpdateResult",
    "DeleteResult",
    "DeliveryState",
    "MergedNotification",
    "UserState",
]
