"""Domain entities describing a voting session and its lifecycle markers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

SESSION_SCOPE_NATIONAL = "national"
SESSION_SCOPE_STATE = "state"
SESSION_SCOPE_LOCAL = "local"
SESSION_SCOPES = (SESSION_SCOPE_NATIONAL, SESSION_SCOPE_STATE, SESSION_SCOPE_LOCAL)

MINIMUM_VOTING_AGE = 18


class LifecycleTransition(str, Enum):
    """The four lifecycle notifications a session can fire."""

    SCHEDULED = "scheduled"
    STARTED = "started"
    ENDED = "ended"
    RESULTS = "results"

    @property
    def mark_attribute(self) -> str:
        return f"notify_{self.value}_at"


class LifecycleMarkError(ValueError):
    """Raised when a fired-at marker would be overwritten."""


@dataclass
class LifecycleMarks:
    """Fired-at timestamps for each lifecycle transition.

    Markers are monotonic: once a transition has been marked it can never be
    cleared or moved.
    """

    notify_scheduled_at: datetime | None = None
    notify_started_at: datetime | None = None
    notify_ended_at: datetime | None = None
    notify_results_at: datetime | None = None

    def fired_at(self, transition: LifecycleTransition) -> datetime | None:
        return getattr(self, transition.mark_attribute)

    def has_fired(self, transition: LifecycleTransition) -> bool:
        return self.fired_at(transition) is not None

    def mark(self, transition: LifecycleTransition, at: datetime) -> None:
        """Record that ``transition`` fired at ``at``."""

        if at is None:
            raise LifecycleMarkError("A fired-at marker cannot be cleared")
        current = self.fired_at(transition)
        if current is not None:
            raise LifecycleMarkError(
                f"Transition '{transition.value}' already fired at {current.isoformat()}"
            )
        setattr(self, transition.mark_attribute, at)

    def pending(self) -> list[LifecycleTransition]:
        return [t for t in LifecycleTransition if not self.has_fired(t)]


@dataclass
class VotingSession:
    """A time-boxed election with its geographic scope and eligibility rules."""

    id: int | None
    title: str
    start_time: datetime
    end_time: datetime
    description: str | None = None
    min_age: int = MINIMUM_VOTING_AGE
    scope: str = SESSION_SCOPE_NATIONAL
    scope_state: str | None = None
    scope_lga: str | None = None
    require_whitelist: bool = False
    forced_ended: bool = False
    results_published: bool = False
    created_at: datetime | None = None
    marks: LifecycleMarks = field(default_factory=LifecycleMarks)

    @property
    def display_title(self) -> str:
        return (self.title or "").strip() or f"Session #{self.id}"

    def has_started(self, now: datetime) -> bool:
        return self.start_time <= now

    def has_closed(self, now: datetime) -> bool:
        return self.forced_ended or self.end_time <= now


__all__ = [
    "LifecycleMarkError",
    "LifecycleMarks",
    "LifecycleTransition",
    "MINIMUM_VOTING_AGE",
    "SESSION_SCOPES",
    "SESSION_SCOPE_LOCAL",
    "SESSION_SCOPE_NATIONAL",
    "SESSION_SCOPE_STATE",
    "VotingSession",
]
