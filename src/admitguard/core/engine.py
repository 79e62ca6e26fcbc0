"\"\"\"Eligibility determination pipeline.\"\"\""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping

import pendulum
import structlog

from ..config import RuleRegistry
from ..schemas import AuditRecord, CandidateInput, Outcome, RuleSchema
from .exception_gate import ExceptionGate, RationaleError
from .outcome import OutcomeResolver
from .validators import SoftValidator, StrictValidator, compute_age

DEFAULT_TIMEZONE = "Asia/Kolkata"

_ID_ALPHABET = string.ascii_uppercase + string.digits


def new_record_id() -> str:
    return "AG-" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


@dataclass(slots=True)
class EvaluationResult:
    """Complete state of one evaluation pass."""

    strict_violations: dict[str, str]
    soft_violations: dict[str, str]
    rationale_error: RationaleError | None
    is_ready_to_submit: bool
    outcome: Outcome
    exceptions_used: int
    overrides: dict[str, bool]
    manager_review_required: bool
    age: int | None = None
    manager_review_message: str | None = None


class SubmissionNotReadyError(ValueError):
    """Raised when a submission is attempted while blocking conditions remain."""

    def __init__(self, result: EvaluationResult):
        super().__init__("Evaluation is not ready to submit")
        self.result = result

    def __str__(self) -> str:  # pragma: no cover - trivial
        blocking = sorted({*self.result.strict_violations, *self.result.soft_violations})
        return f"Evaluation is not ready to submit: {blocking}"


class EligibilityEngine:
    """Run strict, soft, gate and resolver stages as one pure pass.

    The caller re-invokes :meth:`evaluate` after every change to the candidate,
    the overrides or the rationale; nothing is cached between passes.
    """

    def __init__(
        self,
        *,
        registry: RuleRegistry | None = None,
        strict_validator: StrictValidator | None = None,
        soft_validator: SoftValidator | None = None,
        exception_gate: ExceptionGate | None = None,
        outcome_resolver: OutcomeResolver | None = None,
        now_provider: Callable[[], Any] | None = None,
        timezone: str | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._registry = registry or RuleRegistry()
        self._strict = strict_validator or StrictValidator()
        self._soft = soft_validator or SoftValidator()
        self._gate = exception_gate or ExceptionGate()
        self._resolver = outcome_resolver or OutcomeResolver()
        self._now_provider = now_provider or pendulum.now
        self._timezone = timezone or DEFAULT_TIMEZONE
        self._id_factory = id_factory or new_record_id
        self._logger = structlog.get_logger(__name__)

    @property
    def rules(self) -> RuleSchema:
        return self._registry.current

    def evaluate(
        self,
        candidate: CandidateInput,
        overrides: Mapping[str, bool] | None = None,
        rationale: str = "",
        *,
        as_of: date | None = None,
        schema: RuleSchema | None = None,
    ) -> EvaluationResult:
        rules = schema or self._registry.current
        reference = as_of or self._now().date()

        strict_violations = self._strict.evaluate(candidate, rules.strict_rules)
        soft_violations = self._soft.evaluate(
            candidate,
            rules.soft_rules,
            score_type=candidate.score_type,
            as_of=reference,
        )

        # Toggles on fields that are not in violation carry no weight.
        effective_overrides = {
            field: True for field in soft_violations if (overrides or {}).get(field)
        }
        gate = self._gate.evaluate(
            soft_violations,
            effective_overrides,
            rationale,
            rules.exception_policy,
        )
        required_filled = all(
            getattr(candidate, field) for field in rules.strict_rules.required_fields
        )
        resolution = self._resolver.resolve(
            strict_violations,
            soft_violations,
            gate,
            rules.exception_policy,
            required_filled=required_filled,
        )

        age = (
            compute_age(candidate.date_of_birth, reference)
            if candidate.date_of_birth is not None
            else None
        )

        result = EvaluationResult(
            strict_violations=strict_violations,
            soft_violations=soft_violations,
            rationale_error=gate.rationale_error,
            is_ready_to_submit=resolution.is_ready_to_submit,
            outcome=resolution.outcome,
            exceptions_used=gate.exceptions_used,
            overrides=effective_overrides,
            manager_review_required=resolution.manager_review_required,
            age=age,
            manager_review_message=(
                rules.exception_policy.manager_review_message
                if resolution.manager_review_required
                else None
            ),
        )
        self._logger.debug(
            "eligibility.evaluated",
            outcome=result.outcome,
            ready=result.is_ready_to_submit,
            strict_violations=sorted(strict_violations),
            soft_violations=sorted(soft_violations),
            exceptions_used=result.exceptions_used,
        )
        return result

    def submit(
        self,
        candidate: CandidateInput,
        overrides: Mapping[str, bool] | None = None,
        rationale: str = "",
        *,
        as_of: date | None = None,
    ) -> AuditRecord:
        """Evaluate once more and freeze the result into an audit record."""
        result = self.evaluate(candidate, overrides, rationale, as_of=as_of)
        if not result.is_ready_to_submit:
            self._logger.warning(
                "eligibility.submit_rejected",
                strict_violations=sorted(result.strict_violations),
                soft_violations=sorted(result.soft_violations),
                rationale_error=result.rationale_error.code if result.rationale_error else None,
            )
            raise SubmissionNotReadyError(result)

        record = self._resolver.build_record(
            candidate=candidate,
            result=result,
            rationale=rationale,
            record_id=self._id_factory(),
            timestamp=self._now().to_iso8601_string(),
        )
        self._logger.info(
            "eligibility.submitted",
            record_id=record.id,
            outcome=record.outcome,
            exceptions_used=record.exceptions_used,
            manager_review_required=record.manager_review_required,
        )
        return record

    def _now(self) -> pendulum.DateTime:
        return pendulum.instance(self._now_provider()).in_timezone(self._timezone)
