"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    type: str
    title: str
    message: str | None = None
    audience: Literal["user", "admin"]
    scope: Literal["global", "national", "state", "local"]
    scope_state: str | None = None
    scope_lga: str | None = None
    period_id: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    read_at: datetime | None = None
    cleared_at: datetime | None = None


class NotificationActionResponse(BaseModel):
    """Acknowledgement returned by read and clear endpoints."""

    success: bool = True
    updated: int | None = Field(
        default=None, description="Receipts written by a bulk action"
    )


__all__ = ["NotificationActionResponse", "NotificationRead"]
