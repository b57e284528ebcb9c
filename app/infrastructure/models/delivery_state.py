"""SQLAlchemy model for per-recipient notification state."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.sql import expression

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class DeliveryStateModel(Base):
    """Read/archive bookkeeping of one notification for one recipient.

    ``notification_id`` is not a foreign key: rows may outlive
    their notification until the orphan pruning job removes them.
    """

    __tablename__ = "notification_delivery_state"
    __table_args__ = (
        UniqueConstraint(
            "recipient",
            "notification_id",
            name="uq_delivery_state_recipient_notification",
        ),
        Index(
            "ix_delivery_state_recipient_read_delivered",
            "recipient",
            "is_read",
            "delivered_at",
        ),
    )

    id = Column(Integer, primary_key=True)
    recipient = Column(String(150), nullable=False, index=True)
    notification_id = Column(Integer, nullable=False, index=True)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    is_archived = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    delivered_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    read_at = Column(DateTime(), nullable=True)


__all__ = ["DeliveryStateModel"]
