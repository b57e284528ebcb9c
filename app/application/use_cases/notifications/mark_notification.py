"""Use cases updating the state of a single notification for a recipient."""

from sqlalchemy.orm import Session

from app.domain.entities import DeliveryState
from app.infrastructure.repositories import DeliveryStateRepository

from .validators import ensure_recipient


def mark_read(session: Session, recipient: str, notification_id: int) -> DeliveryState:
    """Mark ``notification_id`` as read, creating its state row when missing."""

    return DeliveryStateRepository(session).mark_read(
        ensure_recipient(recipient), notification_id
    )


def mark_archived(
    session: Session, recipient: str, notification_id: int
) -> DeliveryState:
    """Archive ``notification_id`` for ``recipient``; the read flag is kept."""

    return DeliveryStateRepository(session).mark_archived(
        ensure_recipient(recipient), notification_id
    )


__all__ = ["mark_archived", "mark_read"]
