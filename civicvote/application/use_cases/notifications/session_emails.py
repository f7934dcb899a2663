"""Bulk lifecycle emails sent alongside the in-app notification events."""

from __future__ import annotations

import logging
from datetime import datetime
from html import escape

from sqlalchemy.orm import Session

from civicvote.application.use_cases.eligibility import ActorLocation, scope_matches
from civicvote.config import get_settings
from civicvote.domain.entities import LifecycleTransition, VoterProfile, VotingSession
from civicvote.infrastructure.email import send_bulk_email
from civicvote.infrastructure.repositories import VoterRepository
from civicvote.utils import ensure_app_timezone

logger = logging.getLogger(__name__)


def format_session_time(value: datetime | None) -> str:
    localized = ensure_app_timezone(value)
    if localized is None:
        return "TBA"
    return localized.strftime("%d %b %Y, %H:%M %Z").strip()


def _scope_details(voting_session: VotingSession) -> str:
    parts = [
        (voting_session.scope or "national").upper(),
        voting_session.scope_state if voting_session.scope != "national" else None,
        voting_session.scope_lga if voting_session.scope == "local" else None,
    ]
    return " • ".join(escape(part) for part in parts if part)


def render_session_email(
    transition: LifecycleTransition, voting_session: VotingSession
) -> tuple[str, str]:
    """Return ``(subject, html)`` for a lifecycle email."""

    base_url = get_settings().app_base_url.rstrip("/")
    title = voting_session.display_title
    safe_title = escape(title)
    starts = format_session_time(voting_session.start_time)
    ends = format_session_time(voting_session.end_time)
    button = (f"{base_url}/vote", "Open voting hub")

    if transition is LifecycleTransition.SCHEDULED:
        subject = f"{title} has been scheduled"
        body = (
            f"<p><strong>{safe_title}</strong> is scheduled and will open soon.</p>"
            f"<p>Starts: <strong>{starts}</strong><br/>Ends: <strong>{ends}</strong><br/>"
            f"Scope: <strong>{_scope_details(voting_session)}</strong></p>"
            "<p>We will remind you again when voting begins.</p>"
        )
    elif transition is LifecycleTransition.STARTED:
        subject = f"{title} is now live"
        body = (
            f"<p><strong>{safe_title}</strong> is accepting ballots.</p>"
            f"<p>Cast your vote before <strong>{ends}</strong>.</p>"
        )
    elif transition is LifecycleTransition.ENDED and voting_session.forced_ended:
        subject = f"{title} ended early"
        body = (
            f"<p>Administrators ended <strong>{safe_title}</strong> earlier than planned.</p>"
            f"<p>Original end time: <strong>{ends}</strong>.</p>"
        )
    elif transition is LifecycleTransition.ENDED:
        subject = f"{title} has closed"
        body = (
            f"<p>The ballot for <strong>{safe_title}</strong> is now closed.</p>"
            "<p>Thank you for participating. We will notify you when results are published.</p>"
        )
    else:
        subject = f"{title} results are in"
        body = (
            f"<p>Results for <strong>{safe_title}</strong> have been published.</p>"
            "<p>Visit your dashboard to review the breakdown.</p>"
        )
        button = (f"{base_url}/results", "View results")

    html = (
        f"<h2>{escape(subject)}</h2>{body}"
        f'<p><a href="{escape(button[0])}">{escape(button[1])}</a></p>'
    )
    return subject, html


def select_email_recipients(session: Session, voting_session: VotingSession) -> list[VoterProfile]:
    """Return active, verified voters whose location lies inside the session scope."""

    return [
        voter
        for voter in VoterRepository(session).list_verified_active()
        if scope_matches(voting_session, ActorLocation.of(voter))
    ]


def send_session_lifecycle_email(
    session: Session,
    voting_session: VotingSession,
    transition: LifecycleTransition,
) -> int:
    """Email every recipient in scope about ``transition``; returns accepted count."""

    recipients = select_email_recipients(session, voting_session)
    if not recipients:
        logger.info(
            "No email recipients for session %s (%s)", voting_session.id, transition.value
        )
        return 0
    subject, html = render_session_email(transition, voting_session)
    accepted = send_bulk_email(
        subject, html, [(voter.email, voter.full_name) for voter in recipients if voter.email]
    )
    logger.info(
        "Lifecycle email '%s' for session %s accepted for %d of %d recipients",
        transition.value,
        voting_session.id,
        accepted,
        len(recipients),
    )
    return accepted


__all__ = [
    "format_session_time",
    "render_session_email",
    "select_email_recipients",
    "send_session_lifecycle_email",
]
