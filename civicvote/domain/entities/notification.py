"""Domain entities for notification events and per-user receipts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

AUDIENCE_USER = "user"
AUDIENCE_ADMIN = "admin"
AUDIENCES = (AUDIENCE_USER, AUDIENCE_ADMIN)

NOTIFICATION_SCOPE_GLOBAL = "global"
NOTIFICATION_SCOPES = ("global", "national", "state", "local")


def sanitize_scope(scope: str | None) -> str:
    """Return a known notification scope, defaulting to ``global``."""

    normalized = (scope or "").strip().lower()
    return normalized if normalized in NOTIFICATION_SCOPES else NOTIFICATION_SCOPE_GLOBAL


def sanitize_audience(audience: str | None) -> str:
    normalized = (audience or "").strip().lower()
    return normalized if normalized in AUDIENCES else AUDIENCE_USER


@dataclass
class NotificationEvent:
    """Immutable record of something that happened, shown to an audience."""

    id: int | None
    type: str
    title: str
    message: str | None = None
    audience: str = AUDIENCE_USER
    scope: str = NOTIFICATION_SCOPE_GLOBAL
    scope_state: str | None = None
    scope_lga: str | None = None
    period_id: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None


@dataclass
class NotificationReceipt:
    """Read and cleared state of one event for one user."""

    notification_id: int
    user_id: int
    read_at: datetime | None = None
    cleared_at: datetime | None = None


@dataclass
class InboxItem:
    """A notification event as seen by a specific user."""

    event: NotificationEvent
    read_at: datetime | None = None
    cleared_at: datetime | None = None


__all__ = [
    "AUDIENCES",
    "AUDIENCE_ADMIN",
    "AUDIENCE_USER",
    "InboxItem",
    "NOTIFICATION_SCOPES",
    "NOTIFICATION_SCOPE_GLOBAL",
    "NotificationEvent",
    "NotificationReceipt",
    "sanitize_audience",
    "sanitize_scope",
]
