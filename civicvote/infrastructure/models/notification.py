"""SQLAlchemy models for notification events and receipts."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)

from civicvote.infrastructure.database import Base
from civicvote.utils import now_in_app_naive_datetime


class NotificationEventModel(Base):
    """Append-only log of notification events."""

    __tablename__ = "notification_event"
    __table_args__ = (
        Index("idx_notification_scope", "scope", "scope_state", "scope_lga"),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(80), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=True)
    audience = Column(String(20), nullable=False, default="user", index=True)
    scope = Column(String(20), nullable=False, default="global")
    scope_state = Column(String(120), nullable=True)
    scope_lga = Column(String(120), nullable=True)
    period_id = Column(
        Integer,
        ForeignKey("voting_session.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # ``metadata`` is reserved on declarative classes.
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )


class NotificationReceiptModel(Base):
    """Per-user read and cleared state for a notification event."""

    __tablename__ = "notification_receipt"
    __table_args__ = (
        UniqueConstraint("notification_id", "user_id", name="uq_notification_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(
        Integer,
        ForeignKey("notification_event.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = Column(
        Integer, ForeignKey("voter.id", ondelete="CASCADE"), nullable=False, index=True
    )
    read_at = Column(DateTime(), nullable=True)
    cleared_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationEventModel", "NotificationReceiptModel"]
