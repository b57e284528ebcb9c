"""Use cases for authoring, listing and updating notifications."""

from .create_notification import PublishCallback, create_notification
from .list_notifications import count_unread, list_for_user
from .mark_notification import mark_archived, mark_read

__all__ = [
    "PublishCallback",
    "count_unread",
    "create_notification",
    "list_for_user",
    "mark_archived",
    "mark_read",
]
