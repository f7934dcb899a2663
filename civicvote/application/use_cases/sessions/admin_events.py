"""Admin-feed notifications recording who changed a voting session."""

from __future__ import annotations

import logging
from datetime import datetime

from civicvote.application.use_cases.notifications import NotificationDispatcher
from civicvote.domain.entities import (
    AUDIENCE_ADMIN,
    NOTIFICATION_SCOPE_GLOBAL,
    NotificationEvent,
    VoterProfile,
    VotingSession,
)
from civicvote.infrastructure.repositories import VoterRepository
from civicvote.utils import isoformat_or_none

logger = logging.getLogger(__name__)


def actor_label(actor: VoterProfile | None) -> str:
    if actor is None:
        return "An admin"
    if actor.full_name:
        return actor.full_name
    if actor.email:
        return actor.email
    if actor.id:
        return f"Admin #{actor.id}"
    return "An admin"


def _admin_event(
    event_type: str,
    title: str,
    message: str,
    voting_session: VotingSession,
    actor: VoterProfile | None,
    metadata: dict[str, object],
) -> NotificationEvent:
    return NotificationEvent(
        id=None,
        type=event_type,
        title=title,
        message=message,
        audience=AUDIENCE_ADMIN,
        scope=NOTIFICATION_SCOPE_GLOBAL,
        period_id=voting_session.id,
        metadata={
            "periodId": voting_session.id,
            **metadata,
            "actorId": actor.id if actor else None,
            "actorEmail": actor.email if actor else None,
        },
    )


def session_created_event(
    voting_session: VotingSession, actor: VoterProfile | None
) -> NotificationEvent:
    return _admin_event(
        "admin.session.created",
        "Session scheduled",
        f'{actor_label(actor)} scheduled "{voting_session.display_title}".',
        voting_session,
        actor,
        {
            "scope": voting_session.scope,
            "scopeState": voting_session.scope_state,
            "scopeLGA": voting_session.scope_lga,
        },
    )


def session_ended_event(
    voting_session: VotingSession, actor: VoterProfile | None, ended_at: datetime
) -> NotificationEvent:
    return _admin_event(
        "admin.session.ended",
        "Session ended early",
        f"{actor_label(actor)} ended {voting_session.display_title} ahead of schedule.",
        voting_session,
        actor,
        {
            "scheduledEndTime": isoformat_or_none(voting_session.end_time),
            "endedAt": isoformat_or_none(ended_at),
            "forced": True,
        },
    )


def results_published_event(
    voting_session: VotingSession, actor: VoterProfile | None, published_at: datetime
) -> NotificationEvent:
    return _admin_event(
        "admin.results.published",
        "Results published",
        f"{actor_label(actor)} published results for {voting_session.display_title}.",
        voting_session,
        actor,
        {"publishedAt": isoformat_or_none(published_at)},
    )


def notify_admin_action(dispatcher: NotificationDispatcher, event: NotificationEvent) -> None:
    """Store ``event`` in the admin feed and push it to administrators.

    Failures are logged; the admin action has already been committed.
    """

    try:
        admin_ids = VoterRepository(dispatcher.session).list_admin_ids()
        dispatcher.notify(event, recipient_ids=admin_ids)
    except Exception:
        dispatcher.session.rollback()
        logger.exception("Admin notification '%s' could not be recorded", event.type)


__all__ = [
    "actor_label",
    "notify_admin_action",
    "results_published_event",
    "session_created_event",
    "session_ended_event",
]
