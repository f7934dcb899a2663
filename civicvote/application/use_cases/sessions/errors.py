"""Errors raised by voting session use cases."""


class VotingSessionNotFoundError(ValueError):
    """Raised when a voting session id does not exist."""


class VotingSessionValidationError(ValueError):
    """Raised when session attributes break the session invariants."""


class LifecycleTransitionError(ValueError):
    """Raised when an administrative transition is not allowed right now."""
