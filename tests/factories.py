"""Builders for test voters, sessions and tokens."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from sqlalchemy.orm import Session

from civicvote.domain.entities import (
    ELIGIBILITY_ACTIVE,
    ROLE_ADMIN,
    NotificationEvent,
    VoterProfile,
    VotingSession,
)
from civicvote.infrastructure.repositories import (
    NotificationRepository,
    VoterRepository,
    VotingSessionRepository,
)
from civicvote.infrastructure.security import create_access_token

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def create_voter(session: Session, **overrides) -> VoterProfile:
    attributes = {
        "id": None,
        "email": "ada@example.com",
        "full_name": "Ada Obi",
        "national_id": "NIN-0001",
        "date_of_birth": date(1990, 1, 1),
        "state": "Lagos",
        "residence_lga": "Ikeja",
        "eligibility_status": ELIGIBILITY_ACTIVE,
        "email_verified_at": NOW - timedelta(days=30),
    }
    attributes.update(overrides)
    return VoterRepository(session).create(VoterProfile(**attributes))


def create_admin(session: Session, **overrides) -> VoterProfile:
    attributes = {
        "email": "admin@example.com",
        "national_id": "NIN-ADMIN",
        "role": ROLE_ADMIN,
        "state": None,
        "residence_lga": None,
    }
    attributes.update(overrides)
    return create_voter(session, **attributes)


def create_session(session: Session, **overrides) -> VotingSession:
    attributes = {
        "id": None,
        "title": "Governorship election",
        "start_time": NOW + timedelta(days=1),
        "end_time": NOW + timedelta(days=2),
        "created_at": NOW - timedelta(hours=1),
    }
    attributes.update(overrides)
    return VotingSessionRepository(session).create(VotingSession(**attributes))


def auth_headers(voter: VoterProfile) -> dict[str, str]:
    token = create_access_token({"sub": str(voter.id)})
    return {"Authorization": f"Bearer {token}"}


def create_event(session: Session, **overrides) -> NotificationEvent:
    attributes = {"id": None, "type": "system.notice", "title": "Notice"}
    attributes.update(overrides)
    return NotificationRepository(session).create(NotificationEvent(**attributes))
