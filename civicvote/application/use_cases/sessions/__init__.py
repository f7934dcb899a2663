"""Use cases driving the voting session lifecycle."""

from .check_eligibility import check_session_eligibility
from .create_session import build_voting_session, create_voting_session
from .end_session_early import end_voting_session_early
from .errors import (
    LifecycleTransitionError,
    VotingSessionNotFoundError,
    VotingSessionValidationError,
)
from .lifecycle import LifecyclePassReport, fire_transition, run_lifecycle_pass
from .lifecycle_events import EVENT_TYPES, build_lifecycle_event
from .list_sessions import list_sessions_for_admin
from .poller import LifecyclePoller
from .publish_results import publish_voting_session_results

__all__ = [
    "EVENT_TYPES",
    "LifecyclePassReport",
    "LifecyclePoller",
    "LifecycleTransitionError",
    "VotingSessionNotFoundError",
    "VotingSessionValidationError",
    "build_lifecycle_event",
    "build_voting_session",
    "check_session_eligibility",
    "create_voting_session",
    "end_voting_session_early",
    "fire_transition",
    "list_sessions_for_admin",
    "publish_voting_session_results",
    "run_lifecycle_pass",
]
