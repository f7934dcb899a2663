"""Tests for the eligibility evaluator."""

from datetime import date, datetime, timezone

import pytest

from civicvote.application.use_cases.eligibility import calculate_age, evaluate_eligibility
from civicvote.domain.entities import VoterProfile, VotingSession

START = datetime(2024, 6, 15, 9, 0, tzinfo=timezone.utc)


def _session(**overrides) -> VotingSession:
    attributes = {
        "id": 1,
        "title": "Council election",
        "start_time": START,
        "end_time": datetime(2024, 6, 16, 9, 0, tzinfo=timezone.utc),
        "min_age": 18,
        "scope": "local",
        "scope_state": "Lagos",
        "scope_lga": "Ikeja",
    }
    attributes.update(overrides)
    return VotingSession(**attributes)


def _voter(**overrides) -> VoterProfile:
    attributes = {
        "id": 7,
        "email": "u@example.com",
        "national_id": "NIN-7",
        "date_of_birth": date(2005, 6, 15),
        "state": "Lagos",
        "residence_lga": "Ikeja",
    }
    attributes.update(overrides)
    return VoterProfile(**attributes)


def test_moving_out_of_the_lga_reports_the_target_lga():
    voting_session = _session()
    voter = _voter()

    assert evaluate_eligibility(voter, voting_session).eligible is True

    voter.residence_lga = "Epe"
    result = evaluate_eligibility(voter, voting_session)

    assert result.eligible is False
    assert result.reason == "Restricted to Ikeja"


def test_scope_comparison_ignores_case_and_whitespace():
    voter = _voter(state="  lagos ", residence_lga="IKEJA")

    assert evaluate_eligibility(voter, _session()).eligible is True


@pytest.mark.parametrize(
    ("date_of_birth", "expected"),
    [
        (date(2006, 6, 15), True),
        (date(2006, 6, 16), False),
    ],
)
def test_age_is_measured_on_the_session_start_date(date_of_birth, expected):
    result = evaluate_eligibility(_voter(date_of_birth=date_of_birth), _session())

    assert result.eligible is expected
    if not expected:
        assert result.reason == "Minimum age 18"


def test_missing_or_malformed_date_of_birth_is_a_denial():
    assert evaluate_eligibility(_voter(date_of_birth=None), _session()).reason == (
        "Missing date of birth"
    )
    assert evaluate_eligibility(_voter(date_of_birth="not-a-date"), _session()).reason == (
        "Missing date of birth"
    )


def test_no_session_means_no_active_period():
    assert evaluate_eligibility(_voter(), None).as_dict() == {
        "eligible": False,
        "reason": "No active period",
    }


def test_state_scope_rejects_other_states():
    result = evaluate_eligibility(
        _voter(state="Kano"), _session(scope="state", scope_lga=None)
    )

    assert result.reason == "Restricted to Lagos"


def test_voter_without_lga_is_denied_for_local_sessions():
    result = evaluate_eligibility(_voter(residence_lga=None), _session())

    assert result.reason == "LGA restriction"


def test_whitelist_is_checked_last():
    voting_session = _session(require_whitelist=True)
    lookups = []

    def whitelist(email, national_id):
        lookups.append((email, national_id))
        return national_id == "NIN-7"

    assert evaluate_eligibility(_voter(), voting_session, whitelist=whitelist).eligible is True
    assert lookups == [("u@example.com", "NIN-7")]

    denied = evaluate_eligibility(
        _voter(national_id="NIN-8"), voting_session, whitelist=whitelist
    )
    assert denied.reason == "Not on whitelist"

    too_young = evaluate_eligibility(
        _voter(date_of_birth=date(2010, 1, 1)), voting_session, whitelist=whitelist
    )
    assert too_young.reason == "Minimum age 18"
    assert len(lookups) == 2


def test_calculate_age_handles_birthdays_and_strings():
    assert calculate_age(date(2000, 2, 29), date(2018, 2, 28)) == 17
    assert calculate_age("2000-02-29", "2018-03-01T00:00:00Z") == 18
    assert calculate_age(None, date(2020, 1, 1)) is None
