"""Domain entities exposed by the application."""

from .audience import (
    AUDIENCE_MODE_BROADCAST,
    AUDIENCE_MODE_ROLE,
    AUDIENCE_MODE_USER,
    AUDIENCE_MODES,
    Audience,
    BroadcastAudience,
    RoleAudience,
    UserAudience,
)
from .delivery_state import (
    BulkUpdateResult,
    DeleteResult,
    DeliveryState,
    MergedNotification,
    UserState,
)
from .notification import (
    CHANNEL_INAPP,
    CHANNEL_VALUES,
    DEFAULT_NOTIFICATION_TYPE,
    SEVERITY_INFO,
    SEVERITY_VALUES,
    Notification,
)

__all__ = [
    "AUDIENCE_MODE_BROADCAST",
    "AUDIENCE_MODE_ROLE",
    "AUDIENCE_MODE_USER",
    "AUDIENCE_MODES",
    "Audience",
    "BroadcastAudience",
    "RoleAudience",
    "UserAudience",
    "BulkUpdateResult",
    "DeleteResult",
    "DeliveryState",
    "MergedNotification",
    "UserState",
    "CHANNEL_INAPP",
    "CHANNEL_VALUES",
    "DEFAULT_NOTIFICATION_TYPE",
    "SEVERITY_INFO",
    "SEVERITY_VALUES",
    "Notification",
]
