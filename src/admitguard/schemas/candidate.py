from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

ScoreType = Literal["Percentage", "CGPA"]


class CandidateInput(BaseModel):
    """Form-state snapshot of one admission candidate.

    Empty strings coming from input widgets are normalized to ``None`` so that
    "not yet entered" and "absent" are the same thing for every rule.
    """

    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    national_id: str | None = None
    date_of_birth: date | None = None

    qualification: str | None = None
    graduation_year: int | None = None
    score_type: ScoreType = "Percentage"
    score: float | None = None

    test_score: float | None = None
    interview_status: str | None = None
    offer_sent: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator(
        "full_name",
        "email",
        "phone",
        "national_id",
        "date_of_birth",
        "qualification",
        "graduation_year",
        "score",
        "test_score",
        "interview_status",
        "offer_sent",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def snapshot(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
