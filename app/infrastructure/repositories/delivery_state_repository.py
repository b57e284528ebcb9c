"""Persistence helpers for per-recipient notification state.

Every write here is either an insert guarded by the
``(recipient, notification_id)`` unique constraint or a single declarative
``UPDATE``/``DELETE``; nothing reads a row and writes it back. Inserts select
from ``notification`` so a state row never exists before its notification.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, delete, func, insert, literal, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import expression

from app.domain.audience import ensure_recipient
from app.domain.entities import BulkUpdateResult, DeleteResult, DeliveryState
from app.domain.exceptions import NotificationNotFoundError
from app.infrastructure.database import storage_errors
from app.infrastructure.models import DeliveryStateModel, NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

logger = logging.getLogger(__name__)

_UNIQUE_COLUMNS = ["recipient", "notification_id"]
_INSERT_COLUMNS = [
    "recipient",
    "notification_id",
    "is_read",
    "is_archived",
    "delivered_at",
    "read_at",
]


class DeliveryStateRepository:
    """Provide idempotent and bulk operations over :class:`DeliveryState` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(self, recipient: str, notification_id: int) -> DeliveryState:
        """Create the row for ``(recipient, notification_id)`` if it is absent.

        Existing rows are returned untouched, so ``delivered_at`` keeps the
        timestamp of the first successful insert. Raises
        :class:`NotificationNotFoundError` when neither the row nor the
        notification exists.
        """

        recipient = ensure_recipient(recipient)
        now = ensure_app_naive_datetime(now_in_app_timezone())
        with storage_errors(self.session):
            self._insert_if_absent(recipient, notification_id, now)
            self.session.commit()
            model = self._find_model(recipient, notification_id)
        return self._to_entity(self._require(model, notification_id))

    def mark_read(self, recipient: str, notification_id: int) -> DeliveryState:
        recipient = ensure_recipient(recipient)
        now = ensure_app_naive_datetime(now_in_app_timezone())
        with storage_errors(self.session):
            self._insert_if_absent(recipient, notification_id, now)
            self._rows(recipient, notification_id).filter(
                DeliveryStateModel.is_read == expression.false()
            ).update(
                {DeliveryStateModel.is_read: True, DeliveryStateModel.read_at: now},
                synchronize_session=False,
            )
            self.session.commit()
            model = self._find_model(recipient, notification_id)
        return self._to_entity(self._require(model, notification_id))

    def mark_archived(self, recipient: str, notification_id: int) -> DeliveryState:
        recipient = ensure_recipient(recipient)
        now = ensure_app_naive_datetime(now_in_app_timezone())
        with storage_errors(self.session):
            self._insert_if_absent(recipient, notification_id, now)
            self._rows(recipient, notification_id).filter(
                DeliveryStateModel.is_archived == expression.false()
            ).update(
                {DeliveryStateModel.is_archived: True},
                synchronize_session=False,
            )
            self.session.commit()
            model = self._find_model(recipient, notification_id)
        return self._to_entity(self._require(model, notification_id))
    def mark_all_read(self, recipient: str) -> BulkUpdateResult:
        recipient = ensure_recipient(recipient)
        now = ensure_app_naive_datetime(now_in_app_timezone())
        with storage_errors(self.session):
            updated = (
                self.session.query(DeliveryStateModel)
                .filter(
                    DeliveryStateModel.recipient == recipient,
                    DeliveryStateModel.is_read == expression.false(),
                )
                .update(
                    {DeliveryStateModel.is_read: True, DeliveryStateModel.read_at: now},
                    synchronize_session=False,
                )
            )
            self.session.commit()
        # The filter only matches rows the update changes.
        return BulkUpdateResult(matched=updated, modified=updated)

    def archive_all(self, recipient: str) -> BulkUpdateResult:
        recipient = ensure_recipient(recipient)
        with storage_errors(self.session):
            updated = (
                self.session.query(DeliveryStateModel)
                .filter(
                    DeliveryStateModel.recipient == recipient,
                    DeliveryStateModel.is_archived == expression.false(),
                )
                .update(
                    {DeliveryStateModel.is_archived: True},
                    synchronize_session=False,
                )
            )
            self.session.commit()
        return BulkUpdateResult(matched=updated, modified=updated)

    def find_for_user(
        self,
        recipient: str,
        *,
        limit: int | None = 50,
        skip: int = 0,
        only_unread: bool = False,
        notification_ids: Iterable[int] | None = None,
    ) -> Sequence[DeliveryState]:
        recipient = ensure_recipient(recipient)
        query = self.session.query(DeliveryStateModel).filter(
            DeliveryStateModel.recipient == recipient
        )
        if only_unread:
            query = query.filter(DeliveryStateModel.is_read == expression.false())
        if notification_ids is not None:
            ids = list(notification_ids)
            if not ids:
                return []
            query = query.filter(DeliveryStateModel.notification_id.in_(ids))
        query = query.order_by(
            DeliveryStateModel.delivered_at.desc(), DeliveryStateModel.id.desc()
        ).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        with storage_errors(self.session):
            models = query.all()
        return [self._to_entity(model) for model in models]

    def count_unread(self, recipient: str) -> int:
        """Count unread, unarchived rows whose notification is still live."""

        recipient = ensure_recipient(recipient)
        now = ensure_app_naive_datetime(now_in_app_timezone())
        query = (
            select(func.count())
            .select_from(DeliveryStateModel)
            .join(NotificationModel, NotificationModel.id == DeliveryStateModel.notification_id)
            .where(
                DeliveryStateModel.recipient == recipient,
                DeliveryStateModel.is_read == expression.false(),
                DeliveryStateModel.is_archived == expression.false(),
                NotificationModel.expires_at.is_(None)
                | (NotificationModel.expires_at > now),
            )
        )
        with storage_errors(self.session):
            return self.session.execute(query).scalar_one()

    def delete_all_for_user(self, recipient: str) -> DeleteResult:
        recipient = ensure_recipient(recipient)
        with storage_errors(self.session):
            result = self.session.execute(
                delete(DeliveryStateModel)
                .where(DeliveryStateModel.recipient == recipient)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        return DeleteResult(deleted_count=result.rowcount or 0)

    def delete_many_for_user(
        self, recipient: str, notification_ids: Iterable[int]
    ) -> DeleteResult:
        recipient = ensure_recipient(recipient)
        ids = sorted({notification_id for notification_id in notification_ids if notification_id is not None})
        if not ids:
            return DeleteResult(deleted_count=0)
        with storage_errors(self.session):
            result = self.session.execute(
                delete(DeliveryStateModel)
                .where(
                    DeliveryStateModel.recipient == recipient,
                    DeliveryStateModel.notification_id.in_(ids),
                )
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        return DeleteResult(deleted_count=result.rowcount or 0)

    def prune_orphans(self) -> int:
        """Delete rows whose notification no longer exists."""

        notification_exists = (
            select(NotificationModel.id)
            .where(NotificationModel.id == DeliveryStateModel.notification_id)
            .correlate(DeliveryStateModel.__table__)
            .exists()
        )
        with storage_errors(self.session):
            result = self.session.execute(
                delete(DeliveryStateModel)
                .where(~notification_exists)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        return result.rowcount or 0

    def _insert_if_absent(
        self, recipient: str, notification_id: int, now: datetime
    ) -> None:
        # Selecting from ``notification`` inserts nothing for unknown ids.
        source = select(
            literal(recipient, String()).label("recipient"),
            NotificationModel.id,
            literal(False, Boolean()).label("is_read"),
            literal(False, Boolean()).label("is_archived"),
            literal(now, DateTime()).label("delivered_at"),
            literal(None, DateTime()).label("read_at"),
        ).where(NotificationModel.id == notification_id)

        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            statement = sqlite_insert(DeliveryStateModel).from_select(_INSERT_COLUMNS, source)
            self.session.execute(
                statement.on_conflict_do_nothing(index_elements=_UNIQUE_COLUMNS)
            )
            return
        if dialect == "postgresql":
            statement = postgresql_insert(DeliveryStateModel).from_select(
                _INSERT_COLUMNS, source
            )
            self.session.execute(
                statement.on_conflict_do_nothing(index_elements=_UNIQUE_COLUMNS)
            )
            return

        try:
            with self.session.begin_nested():
                self.session.execute(
                    insert(DeliveryStateModel).from_select(_INSERT_COLUMNS, source)
                )
        except IntegrityError:
            logger.debug(
                "Delivery state for %s/%s already exists", recipient, notification_id
            )

    def _rows(self, recipient: str, notification_id: int):
        return self.session.query(DeliveryStateModel).filter(
            DeliveryStateModel.recipient == recipient,
            DeliveryStateModel.notification_id == notification_id,
        )

    def _find_model(
        self, recipient: str, notification_id: int
    ) -> DeliveryStateModel | None:
        return self._rows(recipient, notification_id).populate_existing().one_or_none()

    @staticmethod
    def _require(
        model: DeliveryStateModel | None, notification_id: int
    ) -> DeliveryStateModel:
        if model is None:
            raise NotificationNotFoundError(
                f"La notificación {notification_id} no existe"
            )
        return model

    @staticmethod
    def _to_entity(model: DeliveryStateModel) -> DeliveryState:
        return DeliveryState(
            id=model.id,
            recipient=model.recipient,
            notification_id=model.notification_id,
            is_read=bool(model.is_read),
            is_archived=bool(model.is_archived),
            delivered_at=ensure_app_timezone(model.delivered_at),
            read_at=ensure_app_timezone(model.read_at),
        )


__all__ = ["DeliveryStateRepository"]
