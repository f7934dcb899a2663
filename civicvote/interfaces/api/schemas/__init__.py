from .notification import NotificationActionResponse, NotificationRead
from .voting_session import (
    EligibilityRead,
    LifecycleMarksRead,
    VotingSessionCreate,
    VotingSessionRead,
)

__all__ = [
    "EligibilityRead",
    "LifecycleMarksRead",
    "NotificationActionResponse",
    "NotificationRead",
    "VotingSessionCreate",
    "VotingSessionRead",
]
