"""ORM models used by the application infrastructure."""

from .delivery_state import DeliveryStateModel
from .notification import NotificationAudienceMemberModel, NotificationModel

__all__ = [
    "DeliveryStateModel",
    "NotificationAudienceMemberModel",
    "NotificationModel",
]
