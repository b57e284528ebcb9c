"""Periodic clean-up of expired notifications and orphaned delivery state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.infrastructure.repositories import (
    DeliveryStateRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaintenanceReport:
    """Counts produced by :func:`run_maintenance`."""

    expired_notifications: int
    orphaned_states: int


def prune_orphans(session: Session) -> int:
    """Delete delivery state rows whose notification no longer exists.

    Only rows that are already meaningless are touched, so this may run at
    any time alongside the rest of the service.
    """

    deleted = DeliveryStateRepository(session).prune_orphans()
    logger.info("Pruned %s orphaned delivery state row(s)", deleted)
    return deleted


def purge_expired(session: Session, *, now: datetime | None = None) -> int:
    """Delete notifications whose expiry date has passed."""

    deleted = NotificationRepository(session).delete_expired(now=now)
    logger.info("Purged %s expired notification(s)", deleted)
    return deleted


def run_maintenance(session: Session, *, purge: bool = True) -> MaintenanceReport:
    """Purge expired notifications (optionally) and then prune orphans."""

    expired = purge_expired(session) if purge else 0
    orphaned = prune_orphans(session)
    return MaintenanceReport(expired_notifications=expired, orphaned_states=orphaned)


__all__ = ["MaintenanceReport", "prune_orphans", "purge_expired", "run_maintenance"]
