from __future__ import annotations

import pytest

from admitguard.core import ExceptionGate, evaluate_exceptions
from admitguard.schemas import ExceptionPolicy

VALID_RATIONALE = "Exception due to strong academic background and prior research experience"

SOFT_VIOLATIONS = {
    "age": "Candidate falls outside the standard age eligibility range.",
    "score": "Academic score is below the standard cutoff.",
}


def test_no_overrides_means_no_rationale_requirement():
    gate = evaluate_exceptions({}, {}, "", ExceptionPolicy())

    assert gate.exceptions_used == 0
    assert gate.any_exception_enabled is False
    assert gate.rationale_error is None
    assert gate.all_overridden is True


def test_unoverridden_violation_blocks():
    gate = evaluate_exceptions({"age": "warn"}, {}, "", ExceptionPolicy())

    assert gate.all_overridden is False
    assert gate.rationale_error is None


def test_partial_override_is_not_accepted():
    gate = evaluate_exceptions(SOFT_VIOLATIONS, {"age": True}, VALID_RATIONALE, ExceptionPolicy())

    assert gate.all_overridden is False
    assert gate.exceptions_used == 1


def test_false_entries_do_not_count():
    gate = evaluate_exceptions(
        SOFT_VIOLATIONS,
        {"age": True, "score": False},
        VALID_RATIONALE,
        ExceptionPolicy(),
    )

    assert gate.exceptions_used == 1
    assert gate.all_overridden is False


@pytest.mark.parametrize(
    "rationale",
    ["", "   ", "academic experience", "  Strong academic record  "],
)
def test_short_rationale_fails_regardless_of_content(rationale: str):
    gate = ExceptionGate().evaluate({"age": "warn"}, {"age": True}, rationale, ExceptionPolicy())

    assert gate.rationale_error is not None
    assert gate.rationale_error.code == "rationale_too_short"
    assert gate.rationale_error.message == "Rationale must be at least 30 characters long."


def test_rationale_without_keyword_fails():
    gate = evaluate_exceptions(
        {"age": "warn"},
        {"age": True},
        "The candidate seems fine to proceed for now ok",
        ExceptionPolicy(),
    )

    assert gate.rationale_error is not None
    assert gate.rationale_error.code == "rationale_missing_justification"


def test_keyword_match_is_case_insensitive():
    gate = evaluate_exceptions(
        {"age": "warn"},
        {"age": True},
        "Strong REFERRAL from the faculty admissions panel",
        ExceptionPolicy(),
    )

    assert gate.rationale_error is None
    assert gate.all_overridden is True


def test_gate_does_not_enforce_exception_cap():
    violations = {"age": "a", "graduation_year": "b", "score": "c"}
    overrides = {field: True for field in violations}

    gate = evaluate_exceptions(violations, overrides, VALID_RATIONALE, ExceptionPolicy(max_exceptions=2))

    assert gate.exceptions_used == 3
    assert gate.all_overridden is True
    assert gate.rationale_error is None


def test_empty_keyword_list_only_checks_length():
    policy = ExceptionPolicy(rationale_keywords=(), rationale_min_length=10)

    gate = evaluate_exceptions({"age": "warn"}, {"age": True}, "Approved by the dean", policy)

    assert gate.rationale_error is None
