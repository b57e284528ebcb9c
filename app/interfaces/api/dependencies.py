"""FastAPI dependency utilities.

Authentication happens upstream; by the time a request reaches this service
the gateway has put the recipient identity into ``X-Username``/``X-Role``.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from app.config import get_settings


@dataclass(frozen=True)
class Recipient:
    """Identity of the caller as seen by the notification service."""

    username: str
    role: str | None


def resolve_recipient(username: str | None, role: str | None) -> Recipient:
    """Build a :class:`Recipient` or reject the request as unauthenticated."""

    normalized = (username or "").strip()
    if not normalized:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales inválidas",
        )
    return Recipient(username=normalized, role=(role or "").strip() or None)


def get_current_recipient(
    x_username: str | None = Header(default=None),
    x_role: str | None = Header(default=None),
) -> Recipient:
    """Return the recipient issuing the request."""

    return resolve_recipient(x_username, x_role)


def require_author(recipient: Recipient = Depends(get_current_recipient)) -> Recipient:
    """Ensure the caller holds a role allowed to author notifications."""

    allowed = {role.lower() for role in get_settings().notification_author_roles}
    if not recipient.role or recipient.role.lower() not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No autorizado",
        )
    return recipient


__all__ = ["Recipient", "get_current_recipient", "require_author", "resolve_recipient"]
