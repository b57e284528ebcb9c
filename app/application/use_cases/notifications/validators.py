"""Common validation helpers for notification use cases."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from app.config import get_settings
from app.domain.audience import audience_from_payload, ensure_recipient
from app.domain.entities import (
    CHANNEL_INAPP,
    CHANNEL_VALUES,
    DEFAULT_NOTIFICATION_TYPE,
    SEVERITY_INFO,
    SEVERITY_VALUES,
    Audience,
    BroadcastAudience,
    RoleAudience,
    UserAudience,
)
from app.domain.exceptions import InvalidArgumentError

TITLE_MAX_LENGTH = 200
TYPE_MAX_LENGTH = 50


def normalize_role(role: str | None) -> str | None:
    if not isinstance(role, str):
        return None
    return role.strip() or None


def ensure_text(value: str | None, *, field: str, max_length: int | None = None) -> str:
    normalized = value.strip() if isinstance(value, str) else ""
    if not normalized:
        raise InvalidArgumentError(f"El campo '{field}' es obligatorio")
    if max_length is not None and len(normalized) > max_length:
        raise InvalidArgumentError(
            f"El campo '{field}' no puede superar {max_length} caracteres"
        )
    return normalized


def ensure_audience(audience: Audience | Mapping[str, Any] | None) -> Audience:
    """Accept an audience variant or its wire representation."""

    if isinstance(audience, (BroadcastAudience, UserAudience, RoleAudience)):
        return audience
    if isinstance(audience, Mapping):
        return audience_from_payload(audience)
    raise InvalidArgumentError("La audiencia es obligatoria")


def ensure_severity(severity: str | None) -> str:
    if severity is None:
        return SEVERITY_INFO
    normalized = severity.strip().lower()
    if normalized not in SEVERITY_VALUES:
        raise InvalidArgumentError(f"Severidad no soportada: {severity!r}")
    return normalized


def ensure_type(notification_type: str | None) -> str:
    if notification_type is None or not notification_type.strip():
        return DEFAULT_NOTIFICATION_TYPE
    return ensure_text(notification_type, field="type", max_length=TYPE_MAX_LENGTH)


def ensure_channels(channels: Iterable[str] | None) -> list[str]:
    """Return the declared delivery mediums without duplicates, order kept."""

    if channels is None:
        return [CHANNEL_INAPP]
    unique: list[str] = []
    for channel in channels:
        normalized = channel.strip().lower() if isinstance(channel, str) else ""
        if normalized not in CHANNEL_VALUES:
            raise InvalidArgumentError(f"Canal no soportado: {channel!r}")
        if normalized not in unique:
            unique.append(normalized)
    return unique or [CHANNEL_INAPP]


def normalize_page(limit: int | None, skip: int | None) -> tuple[int, int]:
    """Clamp pagination values to the configured bounds."""

    settings = get_settings()
    if limit is None:
        limit = settings.notifications_default_page_size
    limit = max(1, min(int(limit), settings.notifications_max_page_size))
    skip = max(0, int(skip or 0))
    return limit, skip


__all__ = [
    "ensure_audience",
    "ensure_channels",
    "ensure_recipient",
    "ensure_severity",
    "ensure_text",
    "ensure_type",
    "normalize_page",
    "normalize_role",
]
