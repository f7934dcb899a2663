"""SQLAlchemy model for voting sessions."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import expression

from civicvote.infrastructure.database import Base
from civicvote.utils import now_in_app_naive_datetime


class VotingSessionModel(Base):
    """Database representation of a voting period."""

    __tablename__ = "voting_session"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime(), nullable=False, index=True)
    end_time = Column(DateTime(), nullable=False, index=True)
    min_age = Column(Integer, nullable=False, default=18)
    scope = Column(String(20), nullable=False, default="national")
    scope_state = Column(String(120), nullable=True)
    scope_lga = Column(String(120), nullable=True)
    require_whitelist = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    forced_ended = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    results_published = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    # Lifecycle markers, written only through conditional updates.
    notify_scheduled_at = Column(DateTime(), nullable=True)
    notify_started_at = Column(DateTime(), nullable=True)
    notify_ended_at = Column(DateTime(), nullable=True)
    notify_results_at = Column(DateTime(), nullable=True)


__all__ = ["VotingSessionModel"]
