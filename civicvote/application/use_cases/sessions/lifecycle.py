"""Lifecycle state machine for voting sessions.

Each session carries four independent fired-at markers (scheduled, started,
ended, results). A pass looks for sessions whose condition holds while the
matching marker is still empty and fires them one by one:

* the marker is claimed with a conditional ``UPDATE ... WHERE marker IS NULL``
  so concurrent pollers cannot both win,
* the notification event is inserted in the same transaction, so a failed
  insert rolls the claim back and the next pass retries it,
* push and email run only after the commit and never undo it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from civicvote.application.use_cases.notifications import (
    NotificationDispatcher,
    send_session_lifecycle_email,
)
from civicvote.config import get_settings
from civicvote.domain.entities import LifecycleTransition, NotificationEvent, VotingSession
from civicvote.infrastructure.repositories import VotingSessionRepository
from civicvote.utils import now_in_app_timezone

from .lifecycle_events import build_lifecycle_event

logger = logging.getLogger(__name__)

EmailSender = Callable[[Session, VotingSession, LifecycleTransition], object]

PASS_ORDER = (
    LifecycleTransition.SCHEDULED,
    LifecycleTransition.STARTED,
    LifecycleTransition.ENDED,
    LifecycleTransition.RESULTS,
)


@dataclass
class LifecyclePassReport:
    """Outcome of one lifecycle pass."""

    started_at: datetime
    fired: list[tuple[int, LifecycleTransition]] = field(default_factory=list)
    skipped: list[tuple[int, LifecycleTransition]] = field(default_factory=list)
    failed: list[tuple[int | None, LifecycleTransition]] = field(default_factory=list)

    def fired_for(self, transition: LifecycleTransition) -> list[int]:
        return [session_id for session_id, fired in self.fired if fired is transition]


def fire_transition(
    session: Session,
    voting_session: VotingSession,
    transition: LifecycleTransition,
    *,
    now: datetime | None = None,
    dispatcher: NotificationDispatcher | None = None,
    email_sender: EmailSender | None = send_session_lifecycle_email,
) -> NotificationEvent | None:
    """Fire ``transition`` for ``voting_session`` unless it already fired.

    Returns the stored notification event, or ``None`` when another caller
    claimed the marker first. Store errors propagate after a rollback.
    """

    now = now or now_in_app_timezone()
    dispatcher = dispatcher or NotificationDispatcher(session)
    repository = VotingSessionRepository(session)
    try:
        if not repository.claim_transition(voting_session.id, transition, at=now):
            session.rollback()
            logger.debug(
                "Session %s '%s' already fired; skipping", voting_session.id, transition.value
            )
            return None
        stored = dispatcher.stage(build_lifecycle_event(voting_session, transition))
        session.commit()
    except Exception:
        session.rollback()
        raise

    voting_session.marks.mark(transition, now)
    logger.info(
        "Fired '%s' for session %s as notification %s",
        transition.value,
        voting_session.id,
        stored.id,
    )
    dispatcher.push(stored)
    if email_sender is not None:
        try:
            email_sender(session, voting_session, transition)
        except Exception:
            logger.exception(
                "Lifecycle email '%s' for session %s failed", transition.value, voting_session.id
            )
    return stored


def run_lifecycle_pass(
    session: Session,
    *,
    now: datetime | None = None,
    dispatcher: NotificationDispatcher | None = None,
    email_sender: EmailSender | None = send_session_lifecycle_email,
    started_grace: timedelta | None = None,
) -> LifecyclePassReport:
    """Scan sessions once and fire every due, un-fired transition.

    A failure on one session is logged and the pass moves on; the marker stays
    empty so the next pass retries it.
    """

    now = now or now_in_app_timezone()
    if started_grace is None:
        started_grace = timedelta(seconds=get_settings().lifecycle_started_grace_seconds)
    repository = VotingSessionRepository(session)
    report = LifecyclePassReport(started_at=now)

    for transition in PASS_ORDER:
        try:
            candidates = repository.list_pending(
                transition, now=now, started_grace=started_grace
            )
        except Exception:
            session.rollback()
            logger.exception("Could not load sessions pending '%s'", transition.value)
            report.failed.append((None, transition))
            continue

        for voting_session in candidates:
            try:
                stored = fire_transition(
                    session,
                    voting_session,
                    transition,
                    now=now,
                    dispatcher=dispatcher,
                    email_sender=email_sender,
                )
            except Exception:
                logger.exception(
                    "Failed to fire '%s' for session %s; will retry next pass",
                    transition.value,
                    voting_session.id,
                )
                report.failed.append((voting_session.id, transition))
                continue
            if stored is None:
                report.skipped.append((voting_session.id, transition))
            else:
                report.fired.append((voting_session.id, transition))

    if report.fired or report.failed:
        logger.info(
            "Lifecycle pass fired %d transition(s), %d failure(s)",
            len(report.fired),
            len(report.failed),
        )
    return report


__all__ = [
    "EmailSender",
    "LifecyclePassReport",
    "PASS_ORDER",
    "fire_transition",
    "run_lifecycle_pass",
]
