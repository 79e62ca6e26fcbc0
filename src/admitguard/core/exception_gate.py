"\"\"\"Override aggregation and rationale policy checks.\"\"\""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping

from ..schemas import ExceptionPolicy

RationaleErrorCode = Literal["rationale_too_short", "rationale_missing_justification"]

MISSING_JUSTIFICATION_MESSAGE = (
    "Rationale must include a clear professional justification "
    "(e.g., experience, academic background, referral)."
)


@dataclass(slots=True)
class RationaleError:
    code: RationaleErrorCode
    message: str


@dataclass(slots=True)
class GateResult:
    """Outcome of the exception gate for one evaluation pass."""

    rationale_error: RationaleError | None
    all_overridden: bool
    exceptions_used: int
    any_exception_enabled: bool


class ExceptionGate:
    """Decide whether soft violations are fully and properly waived.

    The gate does not enforce ``max_exceptions``; exceeding the cap only
    escalates to manager review downstream.
    """

    name = "exception_gate"

    def evaluate(
        self,
        soft_violations: Mapping[str, str],
        overrides: Mapping[str, bool],
        rationale: str,
        policy: ExceptionPolicy,
    ) -> GateResult:
        exceptions_used = sum(1 for enabled in overrides.values() if enabled)
        any_exception_enabled = exceptions_used > 0

        rationale_error = None
        if any_exception_enabled:
            rationale_error = self._check_rationale(rationale, policy)

        all_overridden = all(overrides.get(field) for field in soft_violations)

        return GateResult(
            rationale_error=rationale_error,
            all_overridden=all_overridden,
            exceptions_used=exceptions_used,
            any_exception_enabled=any_exception_enabled,
        )

    @staticmethod
    def _check_rationale(rationale: str, policy: ExceptionPolicy) -> RationaleError | None:
        trimmed = (rationale or "").strip()
        if len(trimmed) < policy.rationale_min_length:
            return RationaleError(
                code="rationale_too_short",
                message=(
                    f"Rationale must be at least {policy.rationale_min_length} "
                    "characters long."
                ),
            )
        lowered = trimmed.lower()
        # An empty keyword list disables the justification check.
        if policy.rationale_keywords and not any(keyword.lower() in lowered for keyword in policy.rationale_keywords):
            return RationaleError(
                code="rationale_missing_justification",
                message=MISSING_JUSTIFICATION_MESSAGE,
            )
        return None


def evaluate_exceptions(
    soft_violations: Mapping[str, str],
    overrides: Mapping[str, bool],
    rationale: str,
    policy: ExceptionPolicy,
) -> GateResult:
    return ExceptionGate().evaluate(soft_violations, overrides, rationale, policy)
