"\"\"\"Validated, all-or-nothing edits to the shared rule schema.\"\"\""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import structlog
from pydantic import ValidationError

from ..schemas import EditableRules, RuleSchema
from ..schemas.rules import merge_editable
from .store import RuleConfigStore, RuleRegistry

_SEGMENTS = ("soft_rules", "exception_policy")


@dataclass(slots=True)
class ConfigCommitResult:
    accepted: bool
    schema: RuleSchema
    errors: dict[str, str] = field(default_factory=dict)


class RuleConfigEditor:
    """Bounds-check proposed thresholds and swap them in atomically.

    Proposals are plain structured data (``{"soft_rules": ..., "exception_policy":
    ...}``) overlaid on the current editable segment, so a caller may send
    either a full replacement or only the rules it changed.
    """

    def __init__(self, registry: RuleRegistry, store: RuleConfigStore | None = None):
        self._registry = registry
        self._store = store
        self._logger = structlog.get_logger(__name__)

    def draft(self) -> dict[str, Any]:
        """Return an editable copy of the current thresholds."""
        return self._registry.current.editable_payload()

    def validate(self, proposal: Mapping[str, Any]) -> dict[str, str]:
        _, errors = self._parse(proposal)
        return errors

    def commit(self, proposal: Mapping[str, Any]) -> ConfigCommitResult:
        editable, errors = self._parse(proposal)
        if editable is None or errors:
            self._logger.warning("rules.rejected", errors=errors)
            return ConfigCommitResult(
                accepted=False,
                schema=self._registry.current,
                errors=errors,
            )

        schema = RuleSchema.from_editable(
            editable,
            strict_rules=self._registry.current.strict_rules,
        )
        if self._store is not None:
            self._store.save(schema)
        self._registry.replace(schema)
        self._logger.info("rules.committed", changed=sorted(_changed_rules(proposal)))
        return ConfigCommitResult(accepted=True, schema=schema)

    def reset_to_defaults(self) -> ConfigCommitResult:
        return self.commit(RuleSchema.default().editable_payload())

    def _parse(self, proposal: Mapping[str, Any]) -> tuple[EditableRules | None, dict[str, str]]:
        if not isinstance(proposal, Mapping):
            return None, {"rules": "Rule configuration must be a mapping."}

        payload = merge_editable(self.draft(), proposal)
        try:
            editable = EditableRules.model_validate(payload)
        except ValidationError as exc:
            return None, _errors_by_rule(exc)
        return editable, editable.bounds_errors()


def _errors_by_rule(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("rules",)
        key = str(loc[1]) if loc[0] in _SEGMENTS and len(loc) > 1 else str(loc[0])
        errors.setdefault(key, error.get("msg", "Invalid value."))
    return errors


def _changed_rules(proposal: Mapping[str, Any]) -> set[str]:
    changed: set[str] = set()
    for segment in _SEGMENTS:
        value = proposal.get(segment)
        if isinstance(value, Mapping):
            changed.update(value.keys())
    return changed
