"""Geographic scope predicate shared by eligibility checks and notification filtering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class ScopedEntity(Protocol):
    scope: str | None
    scope_state: str | None
    scope_lga: str | None


@dataclass(frozen=True)
class ActorLocation:
    """Where a user is registered."""

    state: str | None = None
    lga: str | None = None

    @classmethod
    def of(cls, profile: Any) -> "ActorLocation":
        return cls(
            state=getattr(profile, "state", None),
            lga=getattr(profile, "residence_lga", None),
        )


def normalize_key(value: Any) -> str:
    """Return ``value`` trimmed and lower-cased; ``None`` becomes ``""``."""

    if value is None:
        return ""
    return str(value).strip().lower()


def _field_denial(
    target: Any, actual: Any, *, missing_reason: str, strict: bool
) -> str | None:
    target_key = normalize_key(target)
    actual_key = normalize_key(actual)
    if not actual_key:
        return missing_reason
    if not target_key:
        # Nothing recorded on the entity: anyone with a value qualifies unless
        # the caller requires a recorded target.
        return missing_reason if strict else None
    if actual_key != target_key:
        return f"Restricted to {str(target).strip()}"
    return None


def scope_denial_reason(
    scope: str | None,
    scope_state: str | None,
    scope_lga: str | None,
    location: ActorLocation,
    *,
    strict: bool = False,
) -> str | None:
    """Return why ``location`` falls outside the scope, or ``None`` when it matches.

    ``global`` and ``national`` always match. ``state`` compares the state and
    ``local`` compares the state and then the LGA, case-insensitively after
    trimming. Any other scope that still carries an LGA enforces the LGA.
    With ``strict`` a missing target value denies instead of matching anyone.
    """

    normalized = normalize_key(scope) or "national"
    if normalized in ("state", "local"):
        denial = _field_denial(
            scope_state, location.state, missing_reason="State restriction", strict=strict
        )
        if denial:
            return denial
    if normalized == "local":
        return _field_denial(
            scope_lga, location.lga, missing_reason="LGA restriction", strict=strict
        )
    if normalize_key(scope_lga):
        if not normalize_key(location.lga):
            return "Residence LGA not set"
        return _field_denial(
            scope_lga, location.lga, missing_reason="LGA restriction", strict=True
        )
    return None


def scope_matches(entity: ScopedEntity, location: ActorLocation) -> bool:
    """Return ``True`` when ``location`` lies inside the scope of ``entity``.

    Works for voting sessions and notification events alike and never raises.
    """

    try:
        reason = scope_denial_reason(
            getattr(entity, "scope", None),
            getattr(entity, "scope_state", None),
            getattr(entity, "scope_lga", None),
            location,
        )
    except (TypeError, ValueError):
        return False
    return reason is None


__all__ = [
    "ActorLocation",
    "ScopedEntity",
    "normalize_key",
    "scope_denial_reason",
    "scope_matches",
]
