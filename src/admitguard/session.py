"\"\"\"Interactive per-candidate evaluation session.\"\"\""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

import structlog

from .audit import AuditStore
from .core import EligibilityEngine, EvaluationResult
from .schemas import AuditRecord, CandidateInput, ScoreType


class SessionState(str, Enum):
    EDITING = "Editing"
    READY_TO_SUBMIT = "ReadyToSubmit"
    SUBMITTED = "Submitted"


class SessionClosedError(RuntimeError):
    """Raised when a submitted session is modified."""


class EvaluationSession:
    """Hold form state for one candidate and re-evaluate after every change.

    ``Submitted`` is terminal; call :meth:`reset` to start a new candidate.
    """

    def __init__(
        self,
        engine: EligibilityEngine,
        audit_store: AuditStore | None = None,
        *,
        as_of: date | None = None,
    ) -> None:
        self._engine = engine
        self._audit_store = audit_store
        self._as_of = as_of
        self._logger = structlog.get_logger(__name__)
        self.reset()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def candidate(self) -> CandidateInput:
        return self._candidate

    @property
    def overrides(self) -> dict[str, bool]:
        return dict(self._overrides)

    @property
    def rationale(self) -> str:
        return self._rationale

    @property
    def result(self) -> EvaluationResult:
        return self._result

    @property
    def record(self) -> AuditRecord | None:
        return self._record

    def reset(self) -> EvaluationResult:
        self._candidate = CandidateInput()
        self._overrides: dict[str, bool] = {}
        self._rationale = ""
        self._record: AuditRecord | None = None
        self._state = SessionState.EDITING
        return self._reevaluate()

    def update(self, **fields: Any) -> EvaluationResult:
        """Apply field changes; invalid values leave the session untouched."""
        self._ensure_open()
        data = self._candidate.model_dump()
        data.update(fields)
        self._candidate = CandidateInput.model_validate(data)
        return self._reevaluate()

    def set_score_type(self, score_type: ScoreType) -> EvaluationResult:
        return self.update(score_type=score_type)

    def set_override(self, field: str, enabled: bool) -> EvaluationResult:
        self._ensure_open()
        self._overrides[field] = enabled
        return self._reevaluate()

    def toggle_override(self, field: str) -> EvaluationResult:
        return self.set_override(field, not self._overrides.get(field, False))

    def set_rationale(self, text: str) -> EvaluationResult:
        self._ensure_open()
        self._rationale = text
        return self._reevaluate()

    def submit(self) -> AuditRecord:
        self._ensure_open()
        record = self._engine.submit(
            self._candidate,
            self._overrides,
            self._rationale,
            as_of=self._as_of,
        )
        if self._audit_store is not None:
            self._audit_store.append(record)
        self._record = record
        self._state = SessionState.SUBMITTED
        self._logger.info("session.submitted", record_id=record.id, outcome=record.outcome)
        return record

    def _ensure_open(self) -> None:
        if self._state is SessionState.SUBMITTED:
            raise SessionClosedError("Session already submitted; reset to evaluate a new candidate")

    def _reevaluate(self) -> EvaluationResult:
        self._result = self._engine.evaluate(
            self._candidate,
            self._overrides,
            self._rationale,
            as_of=self._as_of,
        )
        self._state = (
            SessionState.READY_TO_SUBMIT
            if self._result.is_ready_to_submit
            else SessionState.EDITING
        )
        return self._result
