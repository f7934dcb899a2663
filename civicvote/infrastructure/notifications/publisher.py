"""Utility helpers to push notifications to websocket subscribers.

Push is advisory: the persisted event is the source of truth. Nothing here
raises into the caller; failed or impossible deliveries are logged and counted
in :attr:`NotificationPublisher.failures`.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from anyio import from_thread

from civicvote.domain.entities import NotificationEvent
from civicvote.utils import isoformat_or_none

from .manager import NotificationConnectionManager, notification_manager

logger = logging.getLogger(__name__)

NEW_NOTIFICATION_MESSAGE = "notification:new"


class NotificationPublisher:
    """Serialize notifications and schedule their delivery."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._tasks: set[asyncio.Task] = set()
        self.failures: Counter[str] = Counter()

    def dispatch(
        self, notification: NotificationEvent, recipient_ids: Iterable[int | None] | None = None
    ) -> None:
        """Push ``notification`` to ``recipient_ids``, or to every connection when ``None``."""

        message = {"type": NEW_NOTIFICATION_MESSAGE, "data": serialize_notification(notification)}
        if recipient_ids is None:
            self._schedule(lambda: self._manager.broadcast(message), target="broadcast")
            return
        for user_id in _normalize_recipients(recipient_ids):
            self._schedule(
                lambda user_id=user_id: self._manager.send_to_user(user_id, dict(message)),
                target=f"user:{user_id}",
            )

    def _schedule(self, factory: Callable[[], Awaitable[int]], *, target: str) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run_sync(self._start_delivery, factory, target)
            except RuntimeError:
                # Not inside an AnyIO worker thread, so no loop owns the sockets.
                self._record_failure("no_event_loop", target)
        else:
            self._start_delivery(factory, target)

    def _start_delivery(self, factory: Callable[[], Awaitable[int]], target: str) -> None:
        task = asyncio.get_running_loop().create_task(self._deliver(factory, target))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, factory: Callable[[], Awaitable[int]], target: str) -> None:
        try:
            failed = await factory()
        except Exception:
            logger.exception("Push delivery to %s crashed", target)
            self._record_failure("error", target)
            return
        if failed:
            self._record_failure("connection_error", target, count=failed)

    def _record_failure(self, reason: str, target: str, *, count: int = 1) -> None:
        self.failures[reason] += count
        logger.warning(
            "Push delivery to %s failed (%s); %d such failures so far",
            target,
            reason,
            self.failures[reason],
        )


def _normalize_recipients(user_ids: Iterable[Any] | None) -> list[int]:
    """Return unique positive integer ids preserving order."""

    unique: list[int] = []
    for value in user_ids or ():
        try:
            user_id = int(value)
        except (TypeError, ValueError):
            continue
        if user_id > 0 and user_id not in unique:
            unique.append(user_id)
    return unique


def serialize_notification(
    notification: NotificationEvent,
    *,
    read_at=None,
    cleared_at=None,
) -> dict[str, Any]:
    """Return the JSON payload representation for ``notification``."""

    return {
        "id": notification.id,
        "type": notification.type,
        "title": notification.title,
        "message": notification.message,
        "audience": notification.audience,
        "scope": notification.scope,
        "scope_state": notification.scope_state,
        "scope_lga": notification.scope_lga,
        "period_id": notification.period_id,
        "metadata": notification.metadata or {},
        "created_at": isoformat_or_none(notification.created_at),
        "read_at": isoformat_or_none(read_at),
        "cleared_at": isoformat_or_none(cleared_at),
    }


notification_publisher = NotificationPublisher(notification_manager)


__all__ = [
    "NEW_NOTIFICATION_MESSAGE",
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
