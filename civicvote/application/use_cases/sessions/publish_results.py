"""Use case for publishing the results of a closed voting session."""

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

from .admin_events import notify_admin_action, results_published_event
from .errors import LifecycleTransitionError, VotingSessionNotFoundError
from .lifecycle import EmailSender, fire_transition


def publish_voting_session_results(
    session: Session,
    session_id: int,
    *,
    actor: VoterProfile | None = None,
    now: datetime | None = None,
    dispatcher: NotificationDispatcher | None = None,
    email_sender: EmailSender | None = send_session_lifecycle_email,
) -> VotingSession:
    """Flag the results as published and fire the 'results' transition."""

    now = now or now_in_app_timezone()
    dispatcher = dispatcher or NotificationDispatcher(session)
    repository = VotingSessionRepository(session)
    voting_session = repository.get(session_id)
    if voting_session is None:
        raise VotingSessionNotFoundError(f"Voting session {session_id} not found")
    if not voting_session.has_closed(now):
        raise LifecycleTransitionError("Results can only be published after voting closes")
    if voting_session.results_published:
        raise LifecycleTransitionError("Results have already been published")

    voting_session.results_published = True
    updated = repository.update(voting_session)
    fire_transition(
        session,
        updated,
        LifecycleTransition.RESULTS,
        now=now,
        dispatcher=dispatcher,
        email_sender=email_sender,
    )
    notify_admin_action(dispatcher, results_published_event(updated, actor, now))
    return repository.get(session_id) or updated
