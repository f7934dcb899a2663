"""Per-user notification feed, re-filtered by eligibility on every read."""

from __future__ import annotations

from sqlalchemy.orm import Session

from civicvote.application.use_cases.eligibility import (
    ActorLocation,
    evaluate_eligibility,
    scope_matches,
)
from civicvote.config import get_settings
from civicvote.domain.entities import AUDIENCE_ADMIN, InboxItem, VoterProfile, sanitize_audience
from civicvote.infrastructure.repositories import (
    NotificationRepository,
    VoterRepository,
    VotingSessionRepository,
)


class NotificationNotFoundError(ValueError):
    """Raised when a receipt targets an event that does not exist."""


def resolve_inbox_limit(limit: int | None) -> int:
    """Clamp ``limit`` to the configured page bounds."""

    settings = get_settings()
    if not limit or limit < 1:
        return settings.inbox_default_limit
    return min(limit, settings.inbox_max_limit)


def list_inbox(
    session: Session,
    user_id: int,
    audience: str,
    *,
    limit: int | None = None,
) -> list[InboxItem]:
    """Return the notifications ``user_id`` may currently see.

    Stored events are filtered against the user's profile as it is now, not as
    it was when the event was created. Admin feeds are returned unfiltered.
    """

    audience = sanitize_audience(audience)
    candidates = NotificationRepository(session).list_for_user(
        user_id, audience=audience, limit=resolve_inbox_limit(limit)
    )
    if audience == AUDIENCE_ADMIN:
        return list(candidates)

    voters = VoterRepository(session)
    voter = voters.get(user_id)
    if voter is None or voter.is_disabled():
        return []

    visible_periods: dict[int, bool | None] = {}
    return [
        item
        for item in candidates
        if _is_visible(session, item, voter, voters, visible_periods)
    ]


def _is_visible(
    session: Session,
    item: InboxItem,
    voter: VoterProfile,
    voters: VoterRepository,
    cache: dict[int, bool | None],
) -> bool:
    period_id = item.event.period_id
    if period_id:
        if period_id not in cache:
            voting_session = VotingSessionRepository(session).get(period_id)
            cache[period_id] = (
                None
                if voting_session is None
                else evaluate_eligibility(
                    voter, voting_session, whitelist=voters.is_whitelisted
                ).eligible
            )
        if cache[period_id] is not None:
            return bool(cache[period_id])
    return scope_matches(item.event, ActorLocation.of(voter))


def _require_event(repository: NotificationRepository, notification_id: int) -> None:
    if repository.get(notification_id) is None:
        raise NotificationNotFoundError(f"Notification {notification_id} not found")


def mark_notification_read(session: Session, notification_id: int, user_id: int) -> None:
    repository = NotificationRepository(session)
    _require_event(repository, notification_id)
    repository.mark_read(notification_id, user_id)


def clear_notification(session: Session, notification_id: int, user_id: int) -> None:
    repository = NotificationRepository(session)
    _require_event(repository, notification_id)
    repository.clear(notification_id, user_id)


def mark_all_notifications_read(session: Session, user_id: int, audience: str) -> int:
    return NotificationRepository(session).mark_all_read(
        user_id, audience=sanitize_audience(audience)
    )


def clear_all_notifications(session: Session, user_id: int, audience: str) -> int:
    return NotificationRepository(session).clear_all(
        user_id, audience=sanitize_audience(audience)
    )


__all__ = [
    "NotificationNotFoundError",
    "clear_all_notifications",
    "clear_notification",
    "list_inbox",
    "mark_all_notifications_read",
    "mark_notification_read",
    "resolve_inbox_limit",
]
