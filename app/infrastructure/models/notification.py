"""SQLAlchemy models for persisted notifications and their audience."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base
from app.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation of a master notification record."""

    __tablename__ = "notification"
    # Ids are never handed out twice, even after the newest row is purged.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    type = Column(String(50), nullable=False, default="general")
    severity = Column(String(20), nullable=False, default="info")
    audience_mode = Column(String(20), nullable=False, index=True)
    # ``metadata`` is reserved by the declarative base.
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    channels = Column(JSON, nullable=False, default=list)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    expires_at = Column(DateTime(), nullable=True, index=True)

    audience_members = relationship(
        "NotificationAudienceMemberModel",
        back_populates="notification",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class NotificationAudienceMemberModel(Base):
    """A username or role targeted by a user/role audience."""

    __tablename__ = "notification_audience_member"
    __table_args__ = (
        UniqueConstraint(
            "notification_id", "member", name="uq_notification_audience_member"
        ),
    )

    id = Column(Integer, primary_key=True)
    notification_id = Column(
        Integer,
        ForeignKey("notification.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    member = Column(String(150), nullable=False, index=True)

    notification = relationship("NotificationModel", back_populates="audience_members")


__all__ = ["NotificationAudienceMemberModel", "NotificationModel"]
