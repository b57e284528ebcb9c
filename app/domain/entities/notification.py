"""Domain entity representing an authored notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .audience import Audience

SEVERITY_INFO = "info"
SEVERITY_SUCCESS = "success"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"

SEVERITY_VALUES = (SEVERITY_INFO, SEVERITY_SUCCESS, SEVERITY_WARNING, SEVERITY_ERROR)

CHANNEL_INAPP = "inapp"
CHANNEL_EMAIL = "email"
CHANNEL_SMS = "sms"
CHANNEL_PUSH = "push"

CHANNEL_VALUES = (CHANNEL_INAPP, CHANNEL_EMAIL, CHANNEL_SMS, CHANNEL_PUSH)

DEFAULT_NOTIFICATION_TYPE = "general"


@dataclass
class Notification:
    """Master notification record, written once and never updated."""

    id: int | None
    title: str
    body: str
    audience: Audience
    type: str = DEFAULT_NOTIFICATION_TYPE
    severity: str = SEVERITY_INFO
    metadata: dict[str, Any] = field(default_factory=dict)
    channels: list[str] = field(default_factory=lambda: [CHANNEL_INAPP])
    created_at: datetime | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` when ``expires_at`` is not in the future."""

        return self.expires_at is not None and self.expires_at <= now


__all__ = [
    "CHANNEL_EMAIL",
    "CHANNEL_INAPP",
    "CHANNEL_PUSH",
    "CHANNEL_SMS",
    "CHANNEL_VALUES",
    "DEFAULT_NOTIFICATION_TYPE",
    "Notification",
    "SEVERITY_ERROR",
    "SEVERITY_INFO",
    "SEVERITY_SUCCESS",
    "SEVERITY_VALUES",
    "SEVERITY_WARNING",
]
