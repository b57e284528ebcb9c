"""Repository implementations for infrastructure layer."""

from .delivery_state_repository import DeliveryStateRepository
from .notification_repository import NotificationRepository

__all__ = [
    "DeliveryStateRepository",
    "NotificationRepository",
]
