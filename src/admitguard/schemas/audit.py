"\"\"\"Immutable audit record schema.\"\"\""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from .candidate import CandidateInput

Outcome = Literal["Eligible", "ExceptionApproved", "Blocked"]


class AuditRecord(BaseModel):
    """Snapshot of one submitted eligibility decision.

    Violation and override mappings are exposed read-only.
    """

    id: str
    timestamp: str
    candidate: CandidateInput
    age: int | None = None
    outcome: Outcome
    strict_violations: Mapping[str, str]
    soft_violations: Mapping[str, str]
    exceptions_used: int
    overrides: Mapping[str, bool]
    rationale: str = ""
    manager_review_required: bool

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("strict_violations", "soft_violations", "overrides", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("strict_violations", "soft_violations", "overrides")
    def _plain_dict(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)
