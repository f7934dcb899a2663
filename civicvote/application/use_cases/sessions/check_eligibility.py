"""Use case evaluating a voter against a session's eligibility rules."""

from sqlalchemy.orm import Session

from civicvote.application.use_cases.eligibility import EligibilityResult, evaluate_eligibility
from civicvote.domain.entities import VoterProfile
from civicvote.infrastructure.repositories import VoterRepository, VotingSessionRepository

from .errors import VotingSessionNotFoundError


def check_session_eligibility(
    session: Session, session_id: int, voter: VoterProfile
) -> EligibilityResult:
    voting_session = VotingSessionRepository(session).get(session_id)
    if voting_session is None:
        raise VotingSessionNotFoundError(f"Voting session {session_id} not found")
    if voter.is_disabled():
        return EligibilityResult(False, "Account disabled")
    return evaluate_eligibility(
        voter, voting_session, whitelist=VoterRepository(session).is_whitelisted
    )
