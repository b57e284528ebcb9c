"""Hard deletes of delivery state used by account lifecycle and dismissals."""

from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.application.use_cases.notifications.validators import ensure_recipient
from app.domain.entities import DeleteResult
from app.infrastructure.repositories import DeliveryStateRepository


def delete_all_for_user(session: Session, recipient: str) -> DeleteResult:
    """Remove every delivery state row of ``recipient``."""

    return DeliveryStateRepository(session).delete_all_for_user(
        ensure_recipient(recipient)
    )


def delete_many_for_user(
    session: Session, recipient: str, notification_ids: Iterable[int]
) -> DeleteResult:
    """Remove the rows of ``recipient`` for the given notifications."""

    return DeliveryStateRepository(session).delete_many_for_user(
        ensure_recipient(recipient), notification_ids
    )


__all__ = ["delete_all_for_user", "delete_many_for_user"]
