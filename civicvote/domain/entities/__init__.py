"""Domain entities exposed by the application."""

from .notification import (
    AUDIENCE_ADMIN,
    AUDIENCE_USER,
    AUDIENCES,
    InboxItem,
    NOTIFICATION_SCOPE_GLOBAL,
    NotificationEvent,
    NotificationReceipt,
    sanitize_audience,
    sanitize_scope,
)
from .voter import (
    ELIGIBILITY_ACTIVE,
    ELIGIBILITY_DISABLED,
    ELIGIBILITY_PENDING,
    ROLE_ADMIN,
    ROLE_VOTER,
    VoterProfile,
)
from .voting_session import (
    MINIMUM_VOTING_AGE,
    SESSION_SCOPE_LOCAL,
    SESSION_SCOPE_NATIONAL,
    SESSION_SCOPE_STATE,
    SESSION_SCOPES,
    LifecycleMarkError,
    LifecycleMarks,
    LifecycleTransition,
    VotingSession,
)

__all__ = [
    "AUDIENCE_ADMIN",
    "AUDIENCE_USER",
    "AUDIENCES",
    "ELIGIBILITY_ACTIVE",
    "ELIGIBILITY_DISABLED",
    "ELIGIBILITY_PENDING",
    "InboxItem",
    "LifecycleMarkError",
    "LifecycleMarks",
    "LifecycleTransition",
    "MINIMUM_VOTING_AGE",
    "NOTIFICATION_SCOPE_GLOBAL",
    "NotificationEvent",
    "NotificationReceipt",
    "ROLE_ADMIN",
    "ROLE_VOTER",
    "SESSION_SCOPES",
    "SESSION_SCOPE_LOCAL",
    "SESSION_SCOPE_NATIONAL",
    "SESSION_SCOPE_STATE",
    "VoterProfile",
    "VotingSession",
    "sanitize_audience",
    "sanitize_scope",
]
