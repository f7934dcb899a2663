"""Persistence helpers for notification events and per-user receipts."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from civicvote.domain.entities import (
    InboxItem,
    NotificationEvent,
    NotificationReceipt,
    sanitize_audience,
    sanitize_scope,
)
from civicvote.infrastructure.models import NotificationEventModel, NotificationReceiptModel
from civicvote.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Append-only event log plus upsert-based receipt bookkeeping."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> NotificationEvent | None:
        model = self.session.get(NotificationEventModel, notification_id)
        return self._to_entity(model) if model else None

    def create(self, event: NotificationEvent, *, commit: bool = True) -> NotificationEvent:
        """Append ``event`` to the log, assigning its id and creation time.

        With ``commit=False`` the row is only flushed so it joins the caller's
        transaction.
        """

        model = NotificationEventModel()
        self._apply_entity_to_model(model, event)
        self.session.add(model)
        if commit:
            self.session.commit()
            self.session.refresh(model)
        else:
            self.session.flush()
        return self._to_entity(model)

    def list_for_user(
        self,
        user_id: int,
        *,
        audience: str,
        limit: int | None = 40,
    ) -> Sequence[InboxItem]:
        """Return uncleared ``audience`` events for ``user_id``, newest first."""

        receipt = NotificationReceiptModel
        query = (
            self.session.query(NotificationEventModel, receipt.read_at, receipt.cleared_at)
            .outerjoin(
                receipt,
                and_(
                    receipt.notification_id == NotificationEventModel.id,
                    receipt.user_id == user_id,
                ),
            )
            .filter(NotificationEventModel.audience == sanitize_audience(audience))
            .filter(receipt.cleared_at.is_(None))
            .order_by(
                NotificationEventModel.created_at.desc(), NotificationEventModel.id.desc()
            )
        )
        if limit is not None:
            query = query.limit(limit)
        return [
            InboxItem(
                event=self._to_entity(model),
                read_at=ensure_app_timezone(read_at),
                cleared_at=ensure_app_timezone(cleared_at),
            )
            for model, read_at, cleared_at in query.all()
        ]

    def get_receipt(self, notification_id: int, user_id: int) -> NotificationReceipt | None:
        model = (
            self.session.query(NotificationReceiptModel)
            .filter(NotificationReceiptModel.notification_id == notification_id)
            .filter(NotificationReceiptModel.user_id == user_id)
            .one_or_none()
        )
        if model is None:
            return None
        return NotificationReceipt(
            notification_id=model.notification_id,
            user_id=model.user_id,
            read_at=ensure_app_timezone(model.read_at),
            cleared_at=ensure_app_timezone(model.cleared_at),
        )

    def mark_read(self, notification_id: int, user_id: int) -> None:
        """Record that ``user_id`` read the event; the first read time is kept."""

        self._upsert_receipts([notification_id], user_id=user_id, clear=False)
        self.session.commit()

    def clear(self, notification_id: int, user_id: int) -> None:
        """Remove the event from the user's inbox for good."""

        self._upsert_receipts([notification_id], user_id=user_id, clear=True)
        self.session.commit()

    def mark_all_read(self, user_id: int, *, audience: str) -> int:
        """Mark every unread, uncleared ``audience`` event as read for ``user_id``."""

        ids = self._candidate_ids(user_id, audience=audience, include_read=False)
        upserted = self._upsert_receipts(ids, user_id=user_id, clear=False)
        self.session.commit()
        return upserted

    def clear_all(self, user_id: int, *, audience: str) -> int:
        """Clear every ``audience`` event not yet cleared by ``user_id``."""

        ids = self._candidate_ids(user_id, audience=audience, include_read=True)
        upserted = self._upsert_receipts(ids, user_id=user_id, clear=True)
        self.session.commit()
        return upserted

    def _candidate_ids(self, user_id: int, *, audience: str, include_read: bool) -> list[int]:
        receipt = NotificationReceiptModel
        query = (
            self.session.query(NotificationEventModel.id)
            .outerjoin(
                receipt,
                and_(
                    receipt.notification_id == NotificationEventModel.id,
                    receipt.user_id == user_id,
                ),
            )
            .filter(NotificationEventModel.audience == sanitize_audience(audience))
            .filter(receipt.cleared_at.is_(None))
        )
        if not include_read:
            query = query.filter(receipt.read_at.is_(None))
        return [row.id for row in query.order_by(NotificationEventModel.id.asc()).all()]

    def _upsert_receipts(self, notification_ids: Sequence[int], *, user_id: int, clear: bool) -> int:
        """Insert or merge receipts in one statement per batch.

        ``read_at`` and ``cleared_at`` are coalesced with the stored values so
        concurrent read/clear calls never lose a flag or reopen a notification.
        """

        if not notification_ids:
            return 0
        now = ensure_app_naive_datetime(now_in_app_timezone())
        rows: list[dict[str, Any]] = [
            {
                "notification_id": notification_id,
                "user_id": user_id,
                "read_at": now,
                "cleared_at": now if clear else None,
            }
            for notification_id in notification_ids
        ]
        table = NotificationReceiptModel.__table__
        dialect = self.session.get_bind().dialect.name

        if dialect in ("postgresql", "sqlite"):
            if dialect == "postgresql":
                from sqlalchemy.dialects.postgresql import insert
            else:
                from sqlalchemy.dialects.sqlite import insert
            statement = insert(table)
            values = {"read_at": func.coalesce(table.c.read_at, statement.excluded.read_at)}
            if clear:
                values["cleared_at"] = func.coalesce(
                    table.c.cleared_at, statement.excluded.cleared_at
                )
            statement = statement.on_conflict_do_update(
                index_elements=[table.c.notification_id, table.c.user_id], set_=values
            )
            self.session.execute(statement, rows)
        elif dialect in ("mysql", "mariadb"):
            from sqlalchemy.dialects.mysql import insert

            statement = insert(table)
            values = {"read_at": func.coalesce(table.c.read_at, statement.inserted.read_at)}
            if clear:
                values["cleared_at"] = func.coalesce(
                    table.c.cleared_at, statement.inserted.cleared_at
                )
            statement = statement.on_duplicate_key_update(values)
            self.session.execute(statement, rows)
        else:
            self._merge_receipts_locked(rows)
        return len(rows)

    def _merge_receipts_locked(self, rows: list[dict[str, Any]]) -> None:
        """Row-locking fallback for stores without an upsert statement."""

        for row in rows:
            model = self.session.execute(
                select(NotificationReceiptModel)
                .where(NotificationReceiptModel.notification_id == row["notification_id"])
                .where(NotificationReceiptModel.user_id == row["user_id"])
                .with_for_update()
            ).scalar_one_or_none()
            if model is None:
                self.session.add(NotificationReceiptModel(**row))
                continue
            model.read_at = model.read_at or row["read_at"]
            model.cleared_at = model.cleared_at or row["cleared_at"]
        self.session.flush()

    @staticmethod
    def _apply_entity_to_model(model: NotificationEventModel, event: NotificationEvent) -> None:
        scope = sanitize_scope(event.scope)
        model.type = event.type
        model.title = event.title
        model.message = event.message
        model.audience = sanitize_audience(event.audience)
        model.scope = scope
        model.scope_state = event.scope_state if scope not in ("global", "national") else None
        model.scope_lga = event.scope_lga if scope == "local" else None
        model.period_id = event.period_id
        model.event_metadata = dict(event.metadata) if event.metadata else None
        model.created_at = ensure_app_naive_datetime(
            event.created_at or now_in_app_timezone()
        )

    @staticmethod
    def _to_entity(model: NotificationEventModel) -> NotificationEvent:
        return NotificationEvent(
            id=model.id,
            type=model.type,
            title=model.title,
            message=model.message,
            audience=model.audience,
            scope=sanitize_scope(model.scope),
            scope_state=model.scope_state,
            scope_lga=model.scope_lga,
            period_id=model.period_id,
            metadata=model.event_metadata or {},
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
