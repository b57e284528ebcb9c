"""Aggregate application use cases."""

from .maintenance import (
    archive_all,
    delete_all_for_user,
    delete_many_for_user,
    mark_all_read,
    prune_orphans,
)
from .notifications import create_notification, list_for_user, mark_read

__all__ = [
    "archive_all",
    "create_notification",
    "delete_all_for_user",
    "delete_many_for_user",
    "list_for_user",
    "mark_all_read",
    "mark_read",
    "prune_orphans",
]
