"""Bulk and periodic operations over notification delivery state."""

from .account_cleanup import delete_all_for_user, delete_many_for_user
from .bulk_state import archive_all, mark_all_read
from .garbage_collection import (
    MaintenanceReport,
    prune_orphans,
    purge_expired,
    run_maintenance,
)

__all__ = [
    "MaintenanceReport",
    "archive_all",
    "delete_all_for_user",
    "delete_many_for_user",
    "mark_all_read",
    "prune_orphans",
    "purge_expired",
    "run_maintenance",
]
