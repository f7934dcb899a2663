"""Builders for the notification events announcing lifecycle transitions."""

from __future__ import annotations

from civicvote.application.use_cases.notifications.session_emails import format_session_time
from civicvote.domain.entities import (
    AUDIENCE_USER,
    LifecycleTransition,
    NotificationEvent,
    VotingSession,
)
from civicvote.utils import isoformat_or_none

EVENT_TYPES = {
    LifecycleTransition.SCHEDULED: "session.scheduled",
    LifecycleTransition.STARTED: "session.started",
    LifecycleTransition.ENDED: "session.ended",
    LifecycleTransition.RESULTS: "results.published",
}


def build_lifecycle_event(
    voting_session: VotingSession, transition: LifecycleTransition
) -> NotificationEvent:
    """Return the user-facing event announcing ``transition`` for ``voting_session``."""

    title = voting_session.display_title
    metadata: dict[str, object] = {
        "periodId": voting_session.id,
        "title": voting_session.title,
        "transition": transition.value,
        "startTime": isoformat_or_none(voting_session.start_time),
        "endTime": isoformat_or_none(voting_session.end_time),
    }

    if transition is LifecycleTransition.SCHEDULED:
        headline = f"{title} scheduled"
        message = f"Voting opens on {format_session_time(voting_session.start_time)}."
    elif transition is LifecycleTransition.STARTED:
        headline = f"{title} is now live"
        message = f"Cast your vote before {format_session_time(voting_session.end_time)}."
    elif transition is LifecycleTransition.ENDED:
        metadata["forced"] = bool(voting_session.forced_ended)
        if voting_session.forced_ended:
            headline = f"{title} ended early"
            message = "Administrators ended this election ahead of schedule."
        else:
            headline = f"{title} has closed"
            message = "Voting has ended. Results will follow once they are published."
    else:
        headline = f"{title} results published"
        message = "Final tallies are ready to review."

    scope = voting_session.scope or "national"
    return NotificationEvent(
        id=None,
        type=EVENT_TYPES[transition],
        title=headline,
        message=message,
        audience=AUDIENCE_USER,
        scope=scope,
        scope_state=voting_session.scope_state if scope != "national" else None,
        scope_lga=voting_session.scope_lga if scope == "local" else None,
        period_id=voting_session.id,
        metadata=metadata,
    )


__all__ = ["EVENT_TYPES", "build_lifecycle_event"]
