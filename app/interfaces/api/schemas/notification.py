"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from app.domain.audience import audience_to_payload
from app.domain.entities import (
    BulkUpdateResult,
    DeleteResult,
    DeliveryState,
    MergedNotification,
    Notification,
    UserState,
)


class AudiencePayload(BaseModel):
    """Who a notification is addressed to."""

    mode: Literal["broadcast", "user", "role"]
    usernames: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)


class NotificationCreate(BaseModel):
    """Payload used to author a notification."""

    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1)
    type: str | None = Field(default=None, max_length=50)
    severity: Literal["info", "success", "warning", "error"] | None = None
    audience: AudiencePayload
    expires_at: datetime | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    channels: list[Literal["inapp", "email", "sms", "push"]] | None = None


class NotificationDismissRequest(BaseModel):
    """Payload used to delete the state of a batch of notifications."""

    ids: list[int] = Field(..., min_length=1, description="Identificadores de notificaciones")

    def unique_ids(self) -> list[int]:
        """Return the list of identifiers without duplicates preserving order."""

        unique: list[int] = []
        seen: set[int] = set()
        for notification_id in self.ids:
            if notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


class NotificationRead(BaseModel):
    """Representation of a stored notification."""

    id: int
    title: str
    body: str
    type: str
    severity: str
    audience: AudiencePayload
    metadata: dict[str, Any] = Field(default_factory=dict)
    channels: list[str] = Field(default_factory=list)
    created_at: datetime
    expires_at: datetime | None = None

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationRead":
        return cls(
            id=notification.id or 0,
            title=notification.title,
            body=notification.body,
            type=notification.type,
            severity=notification.severity,
            audience=AudiencePayload(**audience_to_payload(notification.audience)),
            metadata=notification.metadata or {},
            channels=notification.channels or [],
            created_at=notification.created_at,
            expires_at=notification.expires_at,
        )


class UserStateRead(BaseModel):
    """Read/archive state of a notification for the requesting user."""

    is_read: bool = False
    is_archived: bool = False
    delivered_at: datetime | None = None
    read_at: datetime | None = None

    @classmethod
    def from_entity(cls, state: UserState | DeliveryState) -> "UserStateRead":
        return cls(
            is_read=state.is_read,
            is_archived=state.is_archived,
            delivered_at=state.delivered_at,
            read_at=state.read_at,
        )


class NotificationWithStateRead(NotificationRead):
    """A notification listed for a user, including that user's state."""

    user_state: UserStateRead

    @classmethod
    def from_merged(cls, merged: MergedNotification) -> "NotificationWithStateRead":
        base = NotificationRead.from_entity(merged.notification)
        return cls(
            **base.model_dump(),
            user_state=UserStateRead.from_entity(merged.user_state),
        )


class DeliveryStateRead(UserStateRead):
    """State row returned after a single-notification mutation."""

    notification_id: int

    @classmethod
    def from_state(cls, state: DeliveryState) -> "DeliveryStateRead":
        return cls(
            notification_id=state.notification_id,
            **UserStateRead.from_entity(state).model_dump(),
        )


class BulkUpdateRead(BaseModel):
    matched: int
    modified: int

    @classmethod
    def from_result(cls, result: BulkUpdateResult) -> "BulkUpdateRead":
        return cls(matched=result.matched, modified=result.modified)


class DeleteRead(BaseModel):
    deleted_count: int

    @classmethod
    def from_result(cls, result: DeleteResult) -> "DeleteRead":
        return cls(deleted_count=result.deleted_count)


class UnreadCountRead(BaseModel):
    unread: int


__all__ = [
    "AudiencePayload",
    "BulkUpdateRead",
    "DeleteRead",
    "DeliveryStateRead",
    "NotificationCreate",
    "NotificationDismissRequest",
    "NotificationRead",
    "NotificationWithStateRead",
    "UnreadCountRead",
    "UserStateRead",
]
