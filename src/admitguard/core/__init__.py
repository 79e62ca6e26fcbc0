"\"\"\"Core eligibility engine components.\"\"\""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# NOTE: keep imports explicit for export clarity.
from .engine import (
    EligibilityEngine,
    EvaluationResult,
    SubmissionNotReadyError,
    new_record_id,
)
from .exception_gate import ExceptionGate, GateResult, RationaleError, evaluate_exceptions
from .outcome import OutcomeResolver, Resolution, resolve
from .validators import (
    SoftValidator,
    StrictValidator,
    compute_age,
    evaluate_soft,
    evaluate_strict,
)


@runtime_checkable
class Validator(Protocol):
    """Rule validator contract: field name to message for each violation."""

    name: str

    def evaluate(self, candidate, rules, **kwargs) -> dict[str, str]:
        """Return violations of ``rules`` found in ``candidate``."""


__all__ = [
    "Validator",
    "EligibilityEngine",
    "EvaluationResult",
    "SubmissionNotReadyError",
    "new_record_id",
    "StrictValidator",
    "SoftValidator",
    "ExceptionGate",
    "GateResult",
    "RationaleError",
    "OutcomeResolver",
    "Resolution",
    "evaluate_strict",
    "evaluate_soft",
    "evaluate_exceptions",
    "resolve",
    "compute_age",
]
