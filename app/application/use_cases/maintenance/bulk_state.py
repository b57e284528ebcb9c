"""Bulk state changes applied to every notification of a recipient."""

from sqlalchemy.orm import Session

from app.application.use_cases.notifications.validators import ensure_recipient
from app.domain.entities import BulkUpdateResult
from app.infrastructure.repositories import DeliveryStateRepository


def mark_all_read(session: Session, recipient: str) -> BulkUpdateResult:
    """Mark every unread delivered notification of ``recipient`` as read.

    Rows that were already read keep their original ``read_at``.
    """

    return DeliveryStateRepository(session).mark_all_read(ensure_recipient(recipient))


def archive_all(session: Session, recipient: str) -> BulkUpdateResult:
    """Archive every delivered notification of ``recipient``."""

    return DeliveryStateRepository(session).archive_all(ensure_recipient(recipient))


__all__ = ["archive_all", "mark_all_read"]
