"""Pure helpers mapping audiences to realtime channels and visibility."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.domain.entities import (
    AUDIENCE_MODE_BROADCAST,
    AUDIENCE_MODE_ROLE,
    AUDIENCE_MODE_USER,
    Audience,
    BroadcastAudience,
    RoleAudience,
    UserAudience,
)
from app.domain.exceptions import InvalidArgumentError

BROADCAST_CHANNEL = "broadcast"
USER_CHANNEL_PREFIX = "user:"
ROLE_CHANNEL_PREFIX = "role:"


def ensure_recipient(recipient: str | None) -> str:
    """Return the trimmed recipient or raise :class:`InvalidArgumentError`."""

    normalized = recipient.strip() if isinstance(recipient, str) else ""
    if not normalized:
        raise InvalidArgumentError("El destinatario es obligatorio")
    return normalized


def resolve_channels(audience: Audience) -> frozenset[str]:
    """Return the realtime channel names implied by ``audience``.

    An empty result is valid and simply means there is nobody to push to.
    """

    if isinstance(audience, BroadcastAudience):
        return frozenset({BROADCAST_CHANNEL})
    if isinstance(audience, UserAudience):
        return frozenset(f"{USER_CHANNEL_PREFIX}{name}" for name in audience.usernames)
    if isinstance(audience, RoleAudience):
        return frozenset(f"{ROLE_CHANNEL_PREFIX}{role}" for role in audience.roles)
    raise TypeError(f"Unsupported audience type: {type(audience).__name__}")


def is_visible_to(audience: Audience, recipient: str, role: str | None) -> bool:
    """Return ``True`` when ``recipient`` holding ``role`` may see ``audience``."""

    if isinstance(audience, BroadcastAudience):
        return True
    if isinstance(audience, UserAudience):
        return recipient in audience.usernames
    if isinstance(audience, RoleAudience):
        return role is not None and role in audience.roles
    return False


def subscription_channels(recipient: str, role: str | None) -> frozenset[str]:
    """Channels a connected recipient listens to."""

    channels = {BROADCAST_CHANNEL, f"{USER_CHANNEL_PREFIX}{recipient}"}
    if role:
        channels.add(f"{ROLE_CHANNEL_PREFIX}{role}")
    return frozenset(channels)


def audience_members(audience: Audience) -> frozenset[str]:
    """Return the usernames or roles stored for ``audience``."""

    if isinstance(audience, UserAudience):
        return audience.usernames
    if isinstance(audience, RoleAudience):
        return audience.roles
    return frozenset()


def build_audience(mode: str, members: frozenset[str] | set[str] | list[str]) -> Audience:
    """Rebuild an audience from its persisted ``mode`` and ``members``."""

    if mode == AUDIENCE_MODE_BROADCAST:
        return BroadcastAudience()
    if mode == AUDIENCE_MODE_USER:
        return UserAudience(usernames=frozenset(members))
    if mode == AUDIENCE_MODE_ROLE:
        return RoleAudience(roles=frozenset(members))
    raise InvalidArgumentError(f"Modo de audiencia desconocido: {mode!r}")


def audience_from_payload(payload: Mapping[str, Any] | None) -> Audience:
    """Parse the wire representation ``{"mode", "usernames", "roles"}``.

    Payloads that populate the list belonging to another mode are rejected so
    that ambiguous audiences never reach the store.
    """

    if not payload:
        raise InvalidArgumentError("La audiencia es obligatoria")

    mode = payload.get("mode")
    usernames = list(payload.get("usernames") or [])
    roles = list(payload.get("roles") or [])

    if mode == AUDIENCE_MODE_BROADCAST:
        if usernames or roles:
            raise InvalidArgumentError("Una audiencia broadcast no admite usuarios ni roles")
        return BroadcastAudience()
    if mode == AUDIENCE_MODE_USER:
        if roles:
            raise InvalidArgumentError("Una audiencia de usuarios no admite roles")
        return UserAudience(usernames=frozenset(usernames))
    if mode == AUDIENCE_MODE_ROLE:
        if usernames:
            raise InvalidArgumentError("Una audiencia de roles no admite usuarios")
        return RoleAudience(roles=frozenset(roles))
    raise InvalidArgumentError(f"Modo de audiencia desconocido: {mode!r}")


def audience_to_payload(audience: Audience) -> dict[str, Any]:
    """Return the wire representation of ``audience`` with sorted members."""

    return {
        "mode": audience.mode,
        "usernames": sorted(audience.usernames) if isinstance(audience, UserAudience) else [],
        "roles": sorted(audience.roles) if isinstance(audience, RoleAudience) else [],
    }


__all__ = [
    "BROADCAST_CHANNEL",
    "ROLE_CHANNEL_PREFIX",
    "USER_CHANNEL_PREFIX",
    "audience_from_payload",
    "audience_members",
    "audience_to_payload",
    "build_audience",
    "ensure_recipient",
    "is_visible_to",
    "resolve_channels",
    "subscription_channels",
]
