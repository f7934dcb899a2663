"""Use case for creating a voting session."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from civicvote.application.use_cases.notifications import (
    NotificationDispatcher,
    send_session_lifecycle_email,
)
from civicvote.domain.entities import (
    MINIMUM_VOTING_AGE,
    SESSION_SCOPES,
    LifecycleTransition,
    VoterProfile,
    VotingSession,
)
from civicvote.infrastructure.repositories import VotingSessionRepository
from civicvote.utils import ensure_app_timezone, now_in_app_timezone

from .admin_events import notify_admin_action, session_created_event
from .errors import VotingSessionValidationError
from .lifecycle import EmailSender, fire_transition


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def build_voting_session(
    *,
    title: str,
    start_time: datetime,
    end_time: datetime,
    description: str | None = None,
    min_age: int = MINIMUM_VOTING_AGE,
    scope: str = "national",
    scope_state: str | None = None,
    scope_lga: str | None = None,
    require_whitelist: bool = False,
) -> VotingSession:
    """Validate the attributes and return an unsaved :class:`VotingSession`."""

    title = (title or "").strip()
    if not title:
        raise VotingSessionValidationError("Title is required")
    start = ensure_app_timezone(start_time)
    end = ensure_app_timezone(end_time)
    if start is None or end is None:
        raise VotingSessionValidationError("Start and end times are required")
    if end <= start:
        raise VotingSessionValidationError("End time must be after start time")
    if min_age is None or int(min_age) < MINIMUM_VOTING_AGE:
        raise VotingSessionValidationError(f"Minimum age must be at least {MINIMUM_VOTING_AGE}")

    normalized_scope = (scope or "national").strip().lower()
    if normalized_scope not in SESSION_SCOPES:
        raise VotingSessionValidationError(f"Unknown scope '{scope}'")
    state = _clean(scope_state) if normalized_scope in ("state", "local") else None
    lga = _clean(scope_lga) if normalized_scope == "local" else None
    if normalized_scope in ("state", "local") and not state:
        raise VotingSessionValidationError("A state is required for state and local sessions")
    if normalized_scope == "local" and not lga:
        raise VotingSessionValidationError("An LGA is required for local sessions")

    return VotingSession(
        id=None,
        title=title,
        description=_clean(description),
        start_time=start,
        end_time=end,
        min_age=int(min_age),
        scope=normalized_scope,
        scope_state=state,
        scope_lga=lga,
        require_whitelist=bool(require_whitelist),
    )


def create_voting_session(
    session: Session,
    *,
    actor: VoterProfile | None = None,
    now: datetime | None = None,
    dispatcher: NotificationDispatcher | None = None,
    email_sender: EmailSender | None = send_session_lifecycle_email,
    **attributes,
) -> VotingSession:
    """Persist a new session and announce it right away when it opens later.

    The admin feed records the creation against ``actor``.
    """

    now = now or now_in_app_timezone()
    dispatcher = dispatcher or NotificationDispatcher(session)
    repository = VotingSessionRepository(session)
    created = repository.create(build_voting_session(**attributes))
    if created.start_time > now:
        fire_transition(
            session,
            created,
            LifecycleTransition.SCHEDULED,
            now=now,
            dispatcher=dispatcher,
            email_sender=email_sender,
        )
    notify_admin_action(dispatcher, session_created_event(created, actor))
    return repository.get(created.id) or created
