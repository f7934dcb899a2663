"""Use case listing the sessions visible to an administrator."""

from sqlalchemy.orm import Session

from civicvote.application.use_cases.eligibility import ActorLocation, scope_matches
from civicvote.domain.entities import VoterProfile, VotingSession
from civicvote.infrastructure.repositories import VotingSessionRepository


def list_sessions_for_admin(
    session: Session, admin: VoterProfile, *, skip: int = 0, limit: int = 100
) -> list[VotingSession]:
    """Return sessions inside the admin's area; admins without a state see all."""

    sessions = VotingSessionRepository(session).list(skip=skip, limit=limit)
    if not (admin.state or "").strip():
        return list(sessions)
    location = ActorLocation.of(admin)
    return [voting_session for voting_session in sessions if scope_matches(voting_session, location)]
