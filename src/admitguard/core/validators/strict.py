"\"\"\"Mandatory, non-waivable eligibility rules.\"\"\""

from __future__ import annotations

from ...schemas import CandidateInput, PatternRule, StrictRules


class StrictValidator:
    """Evaluate identity, qualification and interview rules.

    Returns a mapping of field name to the rule's fixed message. Any entry
    blocks the candidate outright; no override applies.
    """

    name = "strict"

    def evaluate(self, candidate: CandidateInput, rules: StrictRules) -> dict[str, str]:
        violations: dict[str, str] = {}

        name_rule = rules.full_name
        full_name = candidate.full_name
        if (
            not full_name
            or len(full_name.strip()) < name_rule.min_length
            or not name_rule.matches(full_name)
        ):
            violations["full_name"] = name_rule.error_message

        for field_name in ("email", "phone", "national_id"):
            rule: PatternRule = getattr(rules, field_name)
            if self._fails_pattern(getattr(candidate, field_name), rule):
                violations[field_name] = rule.error_message

        qualification_rule = rules.qualification
        if candidate.qualification not in qualification_rule.allowed:
            violations["qualification"] = qualification_rule.error_message

        status_rule = rules.interview_status
        status = candidate.interview_status
        if status == status_rule.blocked_value:
            violations["interview_status"] = status_rule.error_message
        elif status is not None and status not in status_rule.allowed_values:
            violations["interview_status"] = status_rule.invalid_message

        offer_rule = rules.offer_sent
        if (
            candidate.offer_sent == offer_rule.blocking_value
            and candidate.interview_status not in offer_rule.allowed_interview_statuses
        ):
            violations["offer_sent"] = offer_rule.error_message

        return violations

    @staticmethod
    def _fails_pattern(value: str | None, rule: PatternRule) -> bool:
        if not value:
            return rule.required
        return len(value.strip()) < rule.min_length or not rule.matches(value)


def evaluate_strict(candidate: CandidateInput, rules: StrictRules) -> dict[str, str]:
    return StrictValidator().evaluate(candidate, rules)
