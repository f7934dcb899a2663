"""Repository implementations for infrastructure layer."""

from .notification_repository import NotificationRepository
from .voter_repository import VoterRepository
from .voting_session_repository import VotingSessionRepository

__all__ = [
    "NotificationRepository",
    "VoterRepository",
    "VotingSessionRepository",
]
