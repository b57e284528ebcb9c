from .notification import (
    AudiencePayload,
    BulkUpdateRead,
    DeleteRead,
    DeliveryStateRead,
    NotificationCreate,
    NotificationDismissRequest,
    NotificationRead,
    NotificationWithStateRead,
    UnreadCountRead,
    UserStateRead,
)

__all__ = [
    "AudiencePayload",
    "BulkUpdateRead",
    "DeleteRead",
    "DeliveryStateRead",
    "NotificationCreate",
    "NotificationDismissRequest",
    "NotificationRead",
    "NotificationWithStateRead",
    "UnreadCountRead",
    "UserStateRead",
]
