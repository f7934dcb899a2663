"""ORM models used by the application infrastructure."""

from .notification import NotificationEventModel, NotificationReceiptModel
from .voter import EligibleVoterModel, VoterModel
from .voting_session import VotingSessionModel

__all__ = [
    "EligibleVoterModel",
    "NotificationEventModel",
    "NotificationReceiptModel",
    "VoterModel",
    "VotingSessionModel",
]
