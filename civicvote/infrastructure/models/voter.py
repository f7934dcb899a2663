"""SQLAlchemy models for voter profiles and the eligible-voters whitelist."""

from sqlalchemy import Column, Date, DateTime, Integer, String

from civicvote.infrastructure.database import Base
from civicvote.utils import now_in_app_naive_datetime


class VoterModel(Base):
    """Database representation of a registered voter or administrator."""

    __tablename__ = "voter"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(160), nullable=True, index=True)
    email_verified_at = Column(DateTime(), nullable=True)
    full_name = Column(String(160), nullable=True)
    national_id = Column(String(64), nullable=True, index=True)
    date_of_birth = Column(Date(), nullable=True)
    state = Column(String(120), nullable=True)
    residence_lga = Column(String(120), nullable=True)
    eligibility_status = Column(String(20), nullable=False, default="pending")
    role = Column(String(20), nullable=False, default="voter")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


class EligibleVoterModel(Base):
    """Whitelist entry matched by email or national id."""

    __tablename__ = "eligible_voter"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(160), nullable=True, index=True)
    national_id = Column(String(64), nullable=True, index=True)


__all__ = ["EligibleVoterModel", "VoterModel"]
