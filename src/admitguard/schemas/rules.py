"\"\"\"Eligibility rule schema: compiled strict rules and editable thresholds.\"\"\""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

Number = int | float


@dataclass(frozen=True, slots=True)
class PatternRule:
    """Mandatory text field validated against a compiled pattern."""

    pattern: re.Pattern[str]
    error_message: str
    required: bool = True
    min_length: int = 0

    def matches(self, value: str) -> bool:
        return self.pattern.fullmatch(value) is not None


@dataclass(frozen=True, slots=True)
class EnumRule:
    """Mandatory field restricted to a fixed set of values."""

    allowed: tuple[str, ...]
    error_message: str
    required: bool = True


@dataclass(frozen=True, slots=True)
class BlockedValueRule:
    """Field whose blocked value is an absolute, non-overridable stop.

    Absent values pass; present values must be one of ``allowed_values``.
    """

    allowed_values: tuple[str, ...]
    blocked_value: str
    error_message: str
    invalid_message: str = "Select a valid interview status."


@dataclass(frozen=True, slots=True)
class PrecedenceRule:
    """A blocking value is only valid after a sufficient interview outcome."""

    blocking_value: str
    allowed_interview_statuses: tuple[str, ...]
    error_message: str


@dataclass(frozen=True, slots=True)
class StrictRules:
    """Non-waivable rules. Loaded once from constants, never persisted."""

    full_name: PatternRule
    email: PatternRule
    phone: PatternRule
    national_id: PatternRule
    qualification: EnumRule
    interview_status: BlockedValueRule
    offer_sent: PrecedenceRule

    @property
    def required_fields(self) -> tuple[str, ...]:
        rules = {
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "national_id": self.national_id,
            "qualification": self.qualification,
        }
        return tuple(name for name, rule in rules.items() if rule.required)


DEFAULT_STRICT_RULES = StrictRules(
    full_name=PatternRule(
        pattern=re.compile(r"[a-zA-Z\s]+", re.ASCII),
        min_length=2,
        error_message="Enter a valid full name as per official documents.",
    ),
    email=PatternRule(
        pattern=re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+"),
        error_message="Enter a valid email address.",
    ),
    phone=PatternRule(
        pattern=re.compile(r"[6-9]\d{9}", re.ASCII),
        error_message="Enter a valid 10-digit Indian mobile number.",
    ),
    national_id=PatternRule(
        pattern=re.compile(r"\d{12}", re.ASCII),
        error_message="Aadhaar number must be a 12-digit numeric value.",
    ),
    qualification=EnumRule(
        allowed=("B.Tech", "B.E.", "B.Sc", "BCA", "M.Tech", "M.Sc", "MCA", "MBA"),
        error_message="Select a highest qualification from the list.",
    ),
    interview_status=BlockedValueRule(
        allowed_values=("Cleared", "Waitlisted", "Rejected"),
        blocked_value="Rejected",
        error_message="Candidates marked as Rejected are not eligible to proceed further.",
    ),
    offer_sent=PrecedenceRule(
        blocking_value="Yes",
        allowed_interview_statuses=("Cleared", "Waitlisted"),
        error_message="Offer letter can only be sent after interview clearance or waitlisting.",
    ),
)


class RangeRule(BaseModel):
    """Inclusive numeric window for an advisory threshold."""

    min: Number
    max: Number
    error_message: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class MinimumRule(BaseModel):
    """Lower bound only."""

    min: Number
    error_message: str

    model_config = ConfigDict(extra="forbid", frozen=True)


_ACADEMIC_SCORE_MESSAGE = (
    "Academic score is below the standard cutoff. Exception may be required."
)


class SoftRules(BaseModel):
    """Advisory thresholds that may be waived through an exception."""

    age: RangeRule = RangeRule(
        min=18,
        max=35,
        error_message=(
            "Candidate falls outside the standard age eligibility range. "
            "Exception may be required."
        ),
    )
    graduation_year: RangeRule = RangeRule(
        min=2015,
        max=2025,
        error_message=(
            "Graduation year is outside the standard eligibility window. "
            "Exception may be required."
        ),
    )
    percentage: MinimumRule = MinimumRule(min=60, error_message=_ACADEMIC_SCORE_MESSAGE)
    cgpa: RangeRule = RangeRule(min=6.0, max=10.0, error_message=_ACADEMIC_SCORE_MESSAGE)
    screening_score: RangeRule = RangeRule(
        min=40,
        max=100,
        error_message=(
            "Screening score is below the standard cutoff. Exception may be required."
        ),
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class ExceptionPolicy(BaseModel):
    """Limits and justification requirements for soft-rule overrides."""

    max_exceptions: int = 2
    rationale_min_length: int = 30
    rationale_keywords: tuple[str, ...] = (
        "experience",
        "background",
        "referral",
        "recommendation",
        "work",
        "academic",
        "profile",
        "institution",
        "performance",
        "exception",
    )
    manager_review_message: str = (
        "Manager review required due to multiple eligibility exceptions."
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class EditableRules(BaseModel):
    """Serializable segment of the rule schema."""

    soft_rules: SoftRules = Field(default_factory=SoftRules)
    exception_policy: ExceptionPolicy = Field(default_factory=ExceptionPolicy)

    model_config = ConfigDict(extra="forbid", frozen=True)

    def bounds_errors(self) -> dict[str, str]:
        """Return bound violations keyed by rule name; empty when valid."""
        soft = self.soft_rules
        policy = self.exception_policy
        errors: dict[str, str] = {}

        if not 0 <= soft.percentage.min <= 100:
            errors["percentage"] = "Percentage must be between 0 and 100."
        if not 0 <= soft.cgpa.min <= soft.cgpa.max:
            errors["cgpa"] = "Min CGPA must be between 0 and Max CGPA."
        if not 0 <= soft.screening_score.min <= soft.screening_score.max:
            errors["screening_score"] = (
                "Min Screening Score must be between 0 and Max Screening Score."
            )
        if not 0 <= soft.age.min <= soft.age.max:
            errors["age"] = "Min Age must be between 0 and Max Age."
        if soft.graduation_year.min > soft.graduation_year.max:
            errors["graduation_year"] = "Start Year cannot be after End Year."
        if policy.max_exceptions < 0:
            errors["max_exceptions"] = "Maximum exceptions cannot be negative."
        if policy.rationale_min_length < 0:
            errors["rationale_min_length"] = "Rationale minimum length cannot be negative."
        return errors


@dataclass(frozen=True, slots=True)
class RuleSchema:
    """Complete rule configuration read by every evaluation pass."""

    strict_rules: StrictRules = DEFAULT_STRICT_RULES
    soft_rules: SoftRules = field(default_factory=SoftRules)
    exception_policy: ExceptionPolicy = field(default_factory=ExceptionPolicy)

    @classmethod
    def default(cls) -> RuleSchema:
        return cls()

    @classmethod
    def from_editable(
        cls,
        editable: EditableRules,
        *,
        strict_rules: StrictRules = DEFAULT_STRICT_RULES,
    ) -> RuleSchema:
        return cls(
            strict_rules=strict_rules,
            soft_rules=editable.soft_rules,
            exception_policy=editable.exception_policy,
        )

    def editable(self) -> EditableRules:
        return EditableRules(
            soft_rules=self.soft_rules,
            exception_policy=self.exception_policy,
        )

    def editable_payload(self) -> dict[str, Any]:
        return self.editable().model_dump(mode="json")


def merge_editable(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``overlay`` onto ``base``; lists and scalars replace."""
    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_editable(current, value)
        else:
            merged[key] = value
    return merged
