"""Use case for force-ending a voting session."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from civicvote.application.use_cases.notifications import (
    NotificationDispatcher,
    send_session_lifecycle_email,
)
from civicvote.domain.entities import LifecycleTransition, VoterProfile, VotingSession
from civicvote.infrastructure.repositories import VotingSessionRepository
from civicvote.utils import now_in_app_timezone

from .admin_events import notify_admin_action, session_ended_event
from .errors import LifecycleTransitionError, VotingSessionNotFoundError
from .lifecycle import EmailSender, fire_transition


def end_voting_session_early(
    session: Session,
    session_id: int,
    *,
    actor: VoterProfile | None = None,
    now: datetime | None = None,
    dispatcher: NotificationDispatcher | None = None,
    email_sender: EmailSender | None = send_session_lifecycle_email,
) -> VotingSession:
    """Close a session before its end time and fire the 'ended' transition."""

    now = now or now_in_app_timezone()
    dispatcher = dispatcher or NotificationDispatcher(session)
    repository = VotingSessionRepository(session)
    voting_session = repository.get(session_id)
    if voting_session is None:
        raise VotingSessionNotFoundError(f"Voting session {session_id} not found")
    if voting_session.has_closed(now):
        raise LifecycleTransitionError("Voting session has already closed")

    voting_session.forced_ended = True
    updated = repository.update(voting_session)
    fire_transition(
        session,
        updated,
        LifecycleTransition.ENDED,
        now=now,
        dispatcher=dispatcher,
        email_sender=email_sender,
    )
    notify_admin_action(dispatcher, session_ended_event(updated, actor, now))
    return repository.get(session_id) or updated
