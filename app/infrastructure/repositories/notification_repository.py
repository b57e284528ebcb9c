"""Persistence helpers for notification entities."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.orm import Session

from app.domain.audience import audience_members, build_audience
from app.domain.entities import (
    AUDIENCE_MODE_BROADCAST,
    AUDIENCE_MODE_ROLE,
    AUDIENCE_MODE_USER,
    Notification,
)
from app.domain.exceptions import InvalidArgumentError
from app.infrastructure.database import storage_errors
from app.infrastructure.models import NotificationAudienceMemberModel, NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Store and query immutable :class:`Notification` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        if not (notification.title or "").strip():
            raise InvalidArgumentError("El título es obligatorio")
        if not (notification.body or "").strip():
            raise InvalidArgumentError("El cuerpo es obligatorio")
        if notification.audience is None:
            raise InvalidArgumentError("La audiencia es obligatoria")

        model = NotificationModel(
            title=notification.title,
            body=notification.body,
            type=notification.type,
            severity=notification.severity,
            audience_mode=notification.audience.mode,
            metadata_=dict(notification.metadata or {}),
            channels=list(notification.channels or []),
            created_at=ensure_app_naive_datetime(
                notification.created_at or now_in_app_timezone()
            ),
            expires_at=ensure_app_naive_datetime(notification.expires_at),
        )
        model.audience_members = [
            NotificationAudienceMemberModel(member=member)
            for member in sorted(audience_members(notification.audience))
        ]
        with storage_errors(self.session):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: int) -> Notification | None:
        with storage_errors(self.session):
            model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def find_visible_to(
        self,
        recipient: str,
        role: str | None,
        *,
        limit: int = 50,
        skip: int = 0,
        now: datetime | None = None,
    ) -> list[Notification]:
        """Return live notifications ``recipient`` may see, newest first.

        Offset and limit are applied here, before any per-recipient state is
        merged in.
        """

        reference = ensure_app_naive_datetime(now or now_in_app_timezone())
        audience_filters = [
            NotificationModel.audience_mode == AUDIENCE_MODE_BROADCAST,
            and_(
                NotificationModel.audience_mode == AUDIENCE_MODE_USER,
                self._has_member(recipient),
            ),
        ]
        if role:
            audience_filters.append(
                and_(
                    NotificationModel.audience_mode == AUDIENCE_MODE_ROLE,
                    self._has_member(role),
                )
            )

        query = (
            self.session.query(NotificationModel)
            .filter(or_(*audience_filters))
            .filter(
                NotificationModel.expires_at.is_(None)
                | (NotificationModel.expires_at > reference)
            )
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .offset(skip)
            .limit(limit)
        )
        with storage_errors(self.session):
            models = query.all()
        return [self._to_entity(model) for model in models]

    def delete_expired(self, *, now: datetime | None = None) -> int:
        """Hard delete notifications whose ``expires_at`` has passed."""

        reference = ensure_app_naive_datetime(now or now_in_app_timezone())
        expired_ids = select(NotificationModel.id).where(
            NotificationModel.expires_at.is_not(None),
            NotificationModel.expires_at <= reference,
        )
        with storage_errors(self.session):
            self.session.execute(
                delete(NotificationAudienceMemberModel)
                .where(NotificationAudienceMemberModel.notification_id.in_(expired_ids))
                .execution_options(synchronize_session=False)
            )
            result = self.session.execute(
                delete(NotificationModel)
                .where(NotificationModel.id.in_(expired_ids))
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        return result.rowcount or 0

    @staticmethod
    def _has_member(value: str):
        return NotificationModel.audience_members.any(
            NotificationAudienceMemberModel.member == value
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        members = [entry.member for entry in model.audience_members]
        return Notification(
            id=model.id,
            title=model.title,
            body=model.body,
            audience=build_audience(model.audience_mode, members),
            type=model.type,
            severity=model.severity,
            metadata=dict(model.metadata_ or {}),
            channels=list(model.channels or []),
            created_at=ensure_app_timezone(model.created_at),
            expires_at=ensure_app_timezone(model.expires_at),
        )


__all__ = ["NotificationRepository"]
