"""Persistence helpers for voting sessions and their lifecycle markers."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import and_, or_, update
from sqlalchemy.orm import Session

from civicvote.domain.entities import LifecycleMarks, LifecycleTransition, VotingSession
from civicvote.infrastructure.models import VotingSessionModel
from civicvote.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class VotingSessionRepository:
    """Provide CRUD operations and lifecycle queries for :class:`VotingSession`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, session_id: int) -> VotingSession | None:
        model = self.session.get(VotingSessionModel, session_id)
        return self._to_entity(model) if model else None

    def list(self, *, skip: int = 0, limit: int = 100) -> Sequence[VotingSession]:
        query = (
            self.session.query(VotingSessionModel)
            .order_by(VotingSessionModel.start_time.desc(), VotingSessionModel.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return [self._to_entity(model) for model in query.all()]

    def create(self, voting_session: VotingSession, *, commit: bool = True) -> VotingSession:
        model = VotingSessionModel()
        self._apply_entity_to_model(model, voting_session)
        model.created_at = ensure_app_naive_datetime(
            voting_session.created_at or now_in_app_timezone()
        )
        self.session.add(model)
        if commit:
            self.session.commit()
            self.session.refresh(model)
        else:
            self.session.flush()
        return self._to_entity(model)

    def update(self, voting_session: VotingSession, *, commit: bool = True) -> VotingSession:
        """Persist the mutable fields of ``voting_session``.

        Lifecycle markers are never written here; see :meth:`claim_transition`.
        """

        if voting_session.id is None:
            raise ValueError("Voting session id is required for updates")
        model = self.session.get(VotingSessionModel, voting_session.id)
        if model is None:
            msg = f"Voting session with id {voting_session.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, voting_session)
        self.session.add(model)
        if commit:
            self.session.commit()
            self.session.refresh(model)
        else:
            self.session.flush()
        return self._to_entity(model)

    def list_pending(
        self,
        transition: LifecycleTransition,
        *,
        now: datetime,
        started_grace: timedelta = timedelta(minutes=1),
    ) -> Sequence[VotingSession]:
        """Return sessions whose ``transition`` is due and has not fired yet."""

        now_naive = ensure_app_naive_datetime(now)
        model = VotingSessionModel
        query = self.session.query(model).filter(
            getattr(model, transition.mark_attribute).is_(None)
        )
        if transition is LifecycleTransition.SCHEDULED:
            query = query.filter(model.start_time > now_naive)
        elif transition is LifecycleTransition.STARTED:
            query = query.filter(
                model.start_time <= now_naive,
                model.forced_ended.is_(False),
                or_(
                    model.notify_scheduled_at.isnot(None),
                    model.created_at <= now_naive - started_grace,
                ),
            )
        elif transition is LifecycleTransition.ENDED:
            query = query.filter(
                or_(model.forced_ended.is_(True), model.end_time <= now_naive)
            )
        else:
            query = query.filter(model.results_published.is_(True))
        query = query.order_by(model.start_time.asc(), model.id.asc())
        return [self._to_entity(row) for row in query.all()]

    def claim_transition(
        self, session_id: int, transition: LifecycleTransition, *, at: datetime
    ) -> bool:
        """Atomically set the fired-at marker for ``transition`` if still unset.

        Returns ``True`` only for the caller whose update changed the row. The
        change is not committed so it can share a transaction with the event
        insert.
        """

        column = getattr(VotingSessionModel, transition.mark_attribute)
        statement = (
            update(VotingSessionModel)
            .where(and_(VotingSessionModel.id == session_id, column.is_(None)))
            .values({column: ensure_app_naive_datetime(at)})
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        return result.rowcount == 1

    @staticmethod
    def _apply_entity_to_model(model: VotingSessionModel, voting_session: VotingSession) -> None:
        model.title = voting_session.title
        model.description = voting_session.description
        model.start_time = ensure_app_naive_datetime(voting_session.start_time)
        model.end_time = ensure_app_naive_datetime(voting_session.end_time)
        model.min_age = voting_session.min_age
        model.scope = voting_session.scope
        model.scope_state = voting_session.scope_state
        model.scope_lga = voting_session.scope_lga
        model.require_whitelist = bool(voting_session.require_whitelist)
        model.forced_ended = bool(voting_session.forced_ended)
        model.results_published = bool(voting_session.results_published)

    @staticmethod
    def _to_entity(model: VotingSessionModel) -> VotingSession:
        return VotingSession(
            id=model.id,
            title=model.title,
            description=model.description,
            start_time=ensure_app_timezone(model.start_time),
            end_time=ensure_app_timezone(model.end_time),
            min_age=model.min_age,
            scope=model.scope,
            scope_state=model.scope_state,
            scope_lga=model.scope_lga,
            require_whitelist=bool(model.require_whitelist),
            forced_ended=bool(model.forced_ended),
            results_published=bool(model.results_published),
            created_at=ensure_app_timezone(model.created_at),
            marks=LifecycleMarks(
                notify_scheduled_at=ensure_app_timezone(model.notify_scheduled_at),
                notify_started_at=ensure_app_timezone(model.notify_started_at),
                notify_ended_at=ensure_app_timezone(model.notify_ended_at),
                notify_results_at=ensure_app_timezone(model.notify_results_at),
            ),
        )


__all__ = ["VotingSessionRepository"]
