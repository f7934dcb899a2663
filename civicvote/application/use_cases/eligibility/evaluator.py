"""Eligibility rules deciding whether a voter may take part in a session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Protocol

from .scope import ActorLocation, scope_denial_reason

WhitelistLookup = Callable[[str | None, str | None], bool]


class SessionRules(Protocol):
    start_time: datetime
    min_age: int | None
    scope: str | None
    scope_state: str | None
    scope_lga: str | None
    require_whitelist: bool


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    reason: str | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"eligible": self.eligible}
        if self.reason:
            payload["reason"] = self.reason
        return payload


ELIGIBLE = EligibilityResult(eligible=True)


def _to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                return None
    return None


def calculate_age(date_of_birth: Any, at: Any) -> int | None:
    """Return the number of whole years between ``date_of_birth`` and ``at``.

    ``None`` is returned when either value is missing or cannot be parsed.
    """

    born = _to_date(date_of_birth)
    reference = _to_date(at)
    if born is None or reference is None:
        return None
    age = reference.year - born.year
    if (reference.month, reference.day) < (born.month, born.day):
        age -= 1
    return age


def evaluate_eligibility(
    voter: Any,
    rules: SessionRules | None,
    *,
    whitelist: WhitelistLookup | None = None,
) -> EligibilityResult:
    """Decide whether ``voter`` may participate in the session described by ``rules``.

    Checks run in a fixed order and the first failure wins:

    1. minimum age, computed on the session start date rather than today;
    2. geographic scope, through the same predicate used to filter notifications;
    3. the eligible-voters whitelist, matched by email or national id.

    Malformed input never raises; it yields an ineligible result with a reason.
    """

    if rules is None:
        return EligibilityResult(False, "No active period")

    try:
        min_age = int(getattr(rules, "min_age", 0) or 0)
    except (TypeError, ValueError):
        min_age = 0
    if min_age > 0:
        age = calculate_age(getattr(voter, "date_of_birth", None), rules.start_time)
        if age is None:
            return EligibilityResult(False, "Missing date of birth")
        if age < min_age:
            return EligibilityResult(False, f"Minimum age {min_age}")

    denial = scope_denial_reason(
        getattr(rules, "scope", None),
        getattr(rules, "scope_state", None),
        getattr(rules, "scope_lga", None),
        ActorLocation.of(voter),
        strict=True,
    )
    if denial:
        return EligibilityResult(False, denial)

    if getattr(rules, "require_whitelist", False):
        email = (getattr(voter, "email", None) or "").strip() or None
        national_id = (getattr(voter, "national_id", None) or "").strip() or None
        listed = False
        if whitelist is not None and (email or national_id):
            listed = bool(whitelist(email, national_id))
        if not listed:
            return EligibilityResult(False, "Not on whitelist")

    return ELIGIBLE


__all__ = [
    "ELIGIBLE",
    "EligibilityResult",
    "SessionRules",
    "WhitelistLookup",
    "calculate_age",
    "evaluate_eligibility",
]
