"""Eligibility and scope predicates shared by every delivery path."""

from .evaluator import (
    ELIGIBLE,
    EligibilityResult,
    WhitelistLookup,
    calculate_age,
    evaluate_eligibility,
)
from .scope import ActorLocation, normalize_key, scope_denial_reason, scope_matches

__all__ = [
    "ActorLocation",
    "ELIGIBLE",
    "EligibilityResult",
    "WhitelistLookup",
    "calculate_age",
    "evaluate_eligibility",
    "normalize_key",
    "scope_denial_reason",
    "scope_matches",
]
