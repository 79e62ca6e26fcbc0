"\"\"\"Final outcome resolution and audit record construction.\"\"\""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

from ..schemas import AuditRecord, CandidateInput, ExceptionPolicy, Outcome
from .exception_gate import GateResult

if TYPE_CHECKING:
    from .engine import EvaluationResult


@dataclass(slots=True)
class Resolution:
    outcome: Outcome
    manager_review_required: bool
    is_ready_to_submit: bool


class OutcomeResolver:
    """Combine strict, soft and gate results into one categorical outcome."""

    name = "outcome"

    def resolve(
        self,
        strict_violations: Mapping[str, str],
        soft_violations: Mapping[str, str],
        gate: GateResult,
        policy: ExceptionPolicy,
        *,
        required_filled: bool = True,
    ) -> Resolution:
        rationale_ok = not gate.any_exception_enabled or gate.rationale_error is None
        is_ready = (
            not strict_violations
            and required_filled
            and gate.all_overridden
            and rationale_ok
        )

        if strict_violations:
            outcome: Outcome = "Blocked"
        elif gate.exceptions_used > 0:
            outcome = "ExceptionApproved"
        else:
            outcome = "Eligible"

        return Resolution(
            outcome=outcome,
            manager_review_required=gate.exceptions_used > policy.max_exceptions,
            is_ready_to_submit=bool(is_ready),
        )

    @staticmethod
    def build_record(
        *,
        candidate: CandidateInput,
        result: EvaluationResult,
        rationale: str,
        record_id: str,
        timestamp: str,
    ) -> AuditRecord:
        """Freeze the current evaluation into an audit record.

        Mappings are copied so later edits to the session cannot leak into the
        stored decision.
        """
        return AuditRecord(
            id=record_id,
            timestamp=timestamp,
            candidate=candidate,
            age=result.age,
            outcome=result.outcome,
            strict_violations=dict(result.strict_violations),
            soft_violations=dict(result.soft_violations),
            exceptions_used=result.exceptions_used,
            overrides=dict(result.overrides),
            rationale=rationale,
            manager_review_required=result.manager_review_required,
        )


def resolve(
    strict_violations: Mapping[str, str],
    soft_violations: Mapping[str, str],
    gate: GateResult,
    policy: ExceptionPolicy,
    *,
    required_filled: bool = True,
) -> Resolution:
    return OutcomeResolver().resolve(
        strict_violations,
        soft_violations,
        gate,
        policy,
        required_filled=required_filled,
    )
