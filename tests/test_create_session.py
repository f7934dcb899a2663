"""Tests for creating voting sessions and admin visibility."""

from datetime import timedelta

import pytest

from civicvote.application.use_cases.notifications import NotificationDispatcher, list_inbox
from civicvote.application.use_cases.sessions import (
    VotingSessionValidationError,
    build_voting_session,
    check_session_eligibility,
    create_voting_session,
    end_voting_session_early,
    list_sessions_for_admin,
    publish_voting_session_results,
)
from civicvote.domain.entities import AUDIENCE_ADMIN, ELIGIBILITY_DISABLED
from civicvote.infrastructure.repositories import VoterRepository

from tests.factories import NOW, create_admin, create_session, create_voter


def _attributes(**overrides):
    attributes = {
        "title": "Council election",
        "start_time": NOW + timedelta(days=3),
        "end_time": NOW + timedelta(days=4),
    }
    attributes.update(overrides)
    return attributes


def test_future_session_is_announced_on_creation(
    db_session, dispatcher, publisher, email_sender
):
    created = create_voting_session(
        db_session,
        now=NOW,
        dispatcher=dispatcher,
        email_sender=email_sender,
        **_attributes(scope="local", scope_state="Lagos", scope_lga="Ikeja"),
    )

    assert created.id is not None
    assert created.marks.notify_scheduled_at == NOW
    (event, recipients), (admin_event, admin_recipients) = publisher.dispatched
    assert event.type == "session.scheduled"
    assert (event.scope, event.scope_state, event.scope_lga) == ("local", "Lagos", "Ikeja")
    assert event.period_id == created.id
    assert event.metadata["periodId"] == created.id
    assert recipients is None
    assert admin_event.type == "admin.session.created"
    assert admin_recipients == []


def test_session_already_open_is_left_to_the_poller(
    db_session, dispatcher, publisher, email_sender
):
    created = create_voting_session(
        db_session,
        now=NOW,
        dispatcher=dispatcher,
        email_sender=email_sender,
        **_attributes(start_time=NOW - timedelta(minutes=1)),
    )

    assert created.marks.notify_scheduled_at is None
    assert publisher.types == ["admin.session.created"]


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"title": "  "}, "Title is required"),
        ({"end_time": NOW}, "End time must be after start time"),
        ({"min_age": 16}, "Minimum age must be at least 18"),
        ({"scope": "planet"}, "Unknown scope 'planet'"),
        ({"scope": "state"}, "A state is required for state and local sessions"),
        ({"scope": "local", "scope_state": "Lagos"}, "An LGA is required for local sessions"),
    ],
)
def test_build_voting_session_validation(overrides, message):
    with pytest.raises(VotingSessionValidationError, match=message):
        build_voting_session(**_attributes(**overrides))


def test_narrowing_fields_are_dropped_for_wider_scopes():
    built = build_voting_session(
        **_attributes(scope="state", scope_state=" Lagos ", scope_lga="Ikeja")
    )

    assert (built.scope, built.scope_state, built.scope_lga) == ("state", "Lagos", None)


def test_admin_listing_follows_the_admin_state(db_session):
    national = create_session(db_session, title="National")
    lagos = create_session(db_session, title="Lagos", scope="state", scope_state="Lagos")
    kano = create_session(db_session, title="Kano", scope="state", scope_state="Kano")

    everywhere = create_admin(db_session)
    lagos_admin = create_admin(
        db_session, email="lagos-admin@example.com", state="Lagos", residence_lga="Ikeja"
    )

    assert {s.id for s in list_sessions_for_admin(db_session, everywhere)} == {
        national.id,
        lagos.id,
        kano.id,
    }
    assert {s.id for s in list_sessions_for_admin(db_session, lagos_admin)} == {
        national.id,
        lagos.id,
    }


def test_check_eligibility_uses_the_whitelist_and_account_state(db_session):
    voting_session = create_session(db_session, require_whitelist=True)
    voter = create_voter(db_session)

    assert check_session_eligibility(db_session, voting_session.id, voter).reason == (
        "Not on whitelist"
    )

    VoterRepository(db_session).add_to_whitelist(email="ADA@example.com")
    assert check_session_eligibility(db_session, voting_session.id, voter).eligible is True

    voter.eligibility_status = ELIGIBILITY_DISABLED
    assert check_session_eligibility(db_session, voting_session.id, voter).reason == (
        "Account disabled"
    )


def test_admin_actions_are_recorded_in_the_admin_feed(
    db_session, dispatcher, publisher, email_sender
):
    admin = create_admin(db_session, full_name="Grace Eze")
    created = create_voting_session(
        db_session,
        actor=admin,
        now=NOW,
        dispatcher=dispatcher,
        email_sender=email_sender,
        **_attributes(),
    )
    end_voting_session_early(
        db_session, created.id, actor=admin, now=NOW,
        dispatcher=dispatcher, email_sender=email_sender,
    )
    publish_voting_session_results(
        db_session, created.id, actor=admin, now=NOW,
        dispatcher=dispatcher, email_sender=email_sender,
    )

    feed = list_inbox(db_session, admin.id, AUDIENCE_ADMIN)

    assert sorted(item.event.type for item in feed) == [
        "admin.results.published",
        "admin.session.created",
        "admin.session.ended",
    ]
    created_event = next(i.event for i in feed if i.event.type == "admin.session.created")
    assert created_event.message == 'Grace Eze scheduled "Council election".'
    assert created_event.scope == "global"
    assert created_event.period_id == created.id
    assert created_event.metadata["actorId"] == admin.id
    assert created_event.metadata["actorEmail"] == "admin@example.com"
    assert all(
        recipients == [admin.id]
        for event, recipients in publisher.dispatched
        if event.audience == AUDIENCE_ADMIN
    )


class _AdminFeedDownDispatcher(NotificationDispatcher):
    def notify(self, event, recipient_ids=None):
        raise RuntimeError("notification store unavailable")


def test_admin_feed_failure_does_not_undo_the_action(db_session, publisher, email_sender):
    admin = create_admin(db_session)
    broken = _AdminFeedDownDispatcher(db_session, publisher=publisher)

    created = create_voting_session(
        db_session,
        actor=admin,
        now=NOW,
        dispatcher=broken,
        email_sender=email_sender,
        **_attributes(),
    )

    assert created.id is not None
    assert created.marks.notify_scheduled_at == NOW
    assert publisher.types == ["session.scheduled"]
    assert list_inbox(db_session, admin.id, AUDIENCE_ADMIN) == []
