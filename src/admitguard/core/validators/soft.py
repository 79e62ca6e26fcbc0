"\"\"\"Advisory threshold rules that may be overridden.\"\"\""

from __future__ import annotations

from datetime import date

import pendulum

from ...schemas import CandidateInput, ScoreType, SoftRules


def compute_age(date_of_birth: date, as_of: date) -> int:
    """Completed years between ``date_of_birth`` and ``as_of``."""
    age = as_of.year - date_of_birth.year
    if (as_of.month, as_of.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


class SoftValidator:
    """Evaluate age, graduation year, academic score and screening score.

    Absent inputs are "not yet evaluable" and never produce a warning.
    """

    name = "soft"

    def __init__(self, *, now_provider=None) -> None:
        self._now_provider = now_provider or pendulum.today

    def evaluate(
        self,
        candidate: CandidateInput,
        rules: SoftRules,
        *,
        score_type: ScoreType | None = None,
        as_of: date | None = None,
    ) -> dict[str, str]:
        violations: dict[str, str] = {}
        reference = as_of or self._now_provider().date()

        if candidate.date_of_birth is not None:
            age = compute_age(candidate.date_of_birth, reference)
            if not rules.age.min <= age <= rules.age.max:
                violations["age"] = rules.age.error_message

        year = candidate.graduation_year
        if year is not None and not rules.graduation_year.min <= year <= rules.graduation_year.max:
            violations["graduation_year"] = rules.graduation_year.error_message

        if candidate.score is not None:
            effective_type = score_type or candidate.score_type
            score_rule = rules.cgpa if effective_type == "CGPA" else rules.percentage
            if candidate.score < score_rule.min:
                violations["score"] = score_rule.error_message

        if candidate.test_score is not None and candidate.test_score < rules.screening_score.min:
            violations["test_score"] = rules.screening_score.error_message

        return violations


def evaluate_soft(
    candidate: CandidateInput,
    rules: SoftRules,
    score_type: ScoreType | None = None,
    *,
    as_of: date | None = None,
) -> dict[str, str]:
    return SoftValidator().evaluate(candidate, rules, score_type=score_type, as_of=as_of)
