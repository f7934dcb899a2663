"""Fan-out of notification events: persist first, then push to live connections."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from civicvote.domain.entities import NotificationEvent
from civicvote.infrastructure.notifications import NotificationPublisher, notification_publisher
from civicvote.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationValidationError(ValueError):
    """Raised when a notification lacks the fields required to store it."""


def validate_notification(event: NotificationEvent) -> None:
    if not (event.type or "").strip() or not (event.title or "").strip():
        raise NotificationValidationError("Notification requires at least type and title")


class NotificationDispatcher:
    """Persist notification events and push them to connected users."""

    def __init__(
        self, session: Session, *, publisher: NotificationPublisher | None = None
    ) -> None:
        self.session = session
        self.publisher = publisher or notification_publisher

    def notify(
        self, event: NotificationEvent, recipient_ids: Iterable[int] | None = None
    ) -> NotificationEvent:
        """Persist ``event`` and push it to ``recipient_ids`` or to everyone."""

        validate_notification(event)
        stored = NotificationRepository(self.session).create(event)
        self.push(stored, recipient_ids)
        return stored

    def stage(self, event: NotificationEvent) -> NotificationEvent:
        """Validate and flush ``event`` inside the caller's open transaction.

        The caller commits and then calls :meth:`push`.
        """

        validate_notification(event)
        return NotificationRepository(self.session).create(event, commit=False)

    def push(
        self, stored: NotificationEvent, recipient_ids: Iterable[int] | None = None
    ) -> None:
        try:
            self.publisher.dispatch(stored, recipient_ids)
        except Exception:
            logger.exception("Push of notification %s failed", stored.id)


__all__ = [
    "NotificationDispatcher",
    "NotificationValidationError",
    "validate_notification",
]
