"""Tests for persisting and pushing notification events."""

import pytest

from civicvote.application.use_cases.notifications import (
    NotificationDispatcher,
    NotificationValidationError,
)
from civicvote.domain.entities import NotificationEvent
from civicvote.infrastructure.repositories import NotificationRepository


def test_notify_persists_before_pushing(db_session, dispatcher, publisher):
    event = NotificationEvent(id=None, type="system.notice", title="Maintenance tonight")

    stored = dispatcher.notify(event, recipient_ids=[3, 4])

    assert stored.id is not None
    assert NotificationRepository(db_session).get(stored.id).title == "Maintenance tonight"
    assert publisher.dispatched == [(stored, [3, 4])]


def test_notify_rejects_events_without_type_or_title(db_session, dispatcher, publisher):
    with pytest.raises(NotificationValidationError):
        dispatcher.notify(NotificationEvent(id=None, type="", title="x"))
    with pytest.raises(NotificationValidationError):
        dispatcher.notify(NotificationEvent(id=None, type="x", title="   "))

    assert publisher.dispatched == []


class _BrokenPublisher:
    def dispatch(self, notification, recipient_ids=None):
        raise RuntimeError("socket layer down")


def test_push_failures_do_not_lose_the_event(db_session):
    dispatcher = NotificationDispatcher(db_session, publisher=_BrokenPublisher())

    stored = dispatcher.notify(NotificationEvent(id=None, type="system.notice", title="Hi"))

    assert NotificationRepository(db_session).get(stored.id) is not None
