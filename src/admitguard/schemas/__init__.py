"\"\"\"Pydantic schema definitions for candidates, rules and audit records.\"\"\""

from __future__ import annotations

from .audit import AuditRecord, Outcome
from .candidate import CandidateInput, ScoreType
from .rules import (
    DEFAULT_STRICT_RULES,
    BlockedValueRule,
    EditableRules,
    EnumRule,
    ExceptionPolicy,
    MinimumRule,
    PatternRule,
    PrecedenceRule,
    RangeRule,
    RuleSchema,
    SoftRules,
    StrictRules,
)

__all__ = [
    "AuditRecord",
    "Outcome",
    "CandidateInput",
    "ScoreType",
    "RuleSchema",
    "StrictRules",
    "SoftRules",
    "ExceptionPolicy",
    "EditableRules",
    "PatternRule",
    "EnumRule",
    "BlockedValueRule",
    "PrecedenceRule",
    "RangeRule",
    "MinimumRule",
    "DEFAULT_STRICT_RULES",
]
