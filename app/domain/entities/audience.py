"""Audience variants describing who may see a notification."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TypeAlias

AUDIENCE_MODE_BROADCAST = "broadcast"
AUDIENCE_MODE_USER = "user"
AUDIENCE_MODE_ROLE = "role"

AUDIENCE_MODES = (AUDIENCE_MODE_BROADCAST, AUDIENCE_MODE_USER, AUDIENCE_MODE_ROLE)


def _normalize_members(values: Iterable[str]) -> frozenset[str]:
    members: set[str] = set()
    for value in values:
        if not isinstance(value, str):
            continue
        candidate = value.strip()
        if candidate:
            members.add(candidate)
    return frozenset(members)


@dataclass(frozen=True)
class BroadcastAudience:
    """Every recipient sees the notification."""

    mode: str = field(default=AUDIENCE_MODE_BROADCAST, init=False)


@dataclass(frozen=True)
class UserAudience:
    """Only the listed usernames see the notification."""

    usernames: frozenset[str]
    mode: str = field(default=AUDIENCE_MODE_USER, init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "usernames", _normalize_members(self.usernames))


@dataclass(frozen=True)
class RoleAudience:
    """Recipients holding one of ``roles`` see the notification."""

    roles: frozenset[str]
    mode: str = field(default=AUDIENCE_MODE_ROLE, init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", _normalize_members(self.roles))


Audience: TypeAlias = BroadcastAudience | UserAudience | RoleAudience


__all__ = [
    "AUDIENCE_MODE_BROADCAST",
    "AUDIENCE_MODE_ROLE",
    "AUDIENCE_MODE_USER",
    "AUDIENCE_MODES",
    "Audience",
    "BroadcastAudience",
    "RoleAudience",
    "UserAudience",
]
