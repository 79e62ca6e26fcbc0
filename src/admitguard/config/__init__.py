"\"\"\"Rule configuration management utilities.\"\"\""

from __future__ import annotations

from .editor import ConfigCommitResult, RuleConfigEditor
from .store import RuleConfigStore, RuleRegistry

__all__ = [
    "RuleRegistry",
    "RuleConfigStore",
    "RuleConfigEditor",
    "ConfigCommitResult",
]
