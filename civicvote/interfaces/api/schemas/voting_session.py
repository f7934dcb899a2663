"""Pydantic models describing voting sessions."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class VotingSessionCreate(BaseModel):
    """Payload used by administrators to schedule a session."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    start_time: datetime
    end_time: datetime
    min_age: int = Field(default=18, ge=18)
    scope: Literal["national", "state", "local"] = "national"
    scope_state: str | None = Field(default=None, max_length=120)
    scope_lga: str | None = Field(default=None, max_length=120)
    require_whitelist: bool = False

    @model_validator(mode="after")
    def _validate_window(self) -> "VotingSessionCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class LifecycleMarksRead(BaseModel):
    scheduled: datetime | None = None
    started: datetime | None = None
    ended: datetime | None = None
    results: datetime | None = None


class VotingSessionRead(BaseModel):
    """Representation of a voting session returned to administrators."""

    id: int
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    min_age: int
    scope: str
    scope_state: str | None = None
    scope_lga: str | None = None
    require_whitelist: bool
    forced_ended: bool
    results_published: bool
    created_at: datetime | None = None
    notified: LifecycleMarksRead


class EligibilityRead(BaseModel):
    eligible: bool
    reason: str | None = None


__all__ = [
    "EligibilityRead",
    "LifecycleMarksRead",
    "VotingSessionCreate",
    "VotingSessionRead",
]
