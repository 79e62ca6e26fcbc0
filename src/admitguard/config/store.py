"\"\"\"Rule schema storage and the shared schema registry.\"\"\""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from ..schemas import EditableRules, RuleSchema
from ..schemas.rules import merge_editable

EDITABLE_SEGMENTS = ("soft_rules", "exception_policy")


class RuleRegistry:
    """Holds the single authoritative rule schema.

    Replacement is one reference swap; passes that already read ``current``
    keep the schema they started with.
    """

    def __init__(self, schema: RuleSchema | None = None):
        self._schema = schema or RuleSchema.default()

    @classmethod
    def from_store(cls, store: RuleConfigStore) -> RuleRegistry:
        return cls(store.load())

    @property
    def current(self) -> RuleSchema:
        return self._schema

    def replace(self, schema: RuleSchema) -> RuleSchema:
        previous, self._schema = self._schema, schema
        return previous


class RuleConfigStore:
    """YAML-backed persistence for the editable rule segment.

    Only soft rules and the exception policy are written; strict rules always
    come from the compiled defaults.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> RuleSchema:
        """Load persisted thresholds merged over the defaults.

        Only the editable segments are read; other top-level keys such as
        ``strict_rules`` are ignored.
        """
        if not self._path.exists():
            return RuleSchema.default()

        try:
            with self._path.open("r", encoding="utf-8") as handle:
                raw = yaml.safe_load(handle) or {}
            if not isinstance(raw, dict):
                raise ValueError("Rules document must be a mapping")
            ignored = sorted(str(key) for key in raw if key not in EDITABLE_SEGMENTS)
            if ignored:
                self._logger.warning("rules.keys_ignored", path=str(self._path), keys=ignored)
            overlay = {key: raw[key] for key in EDITABLE_SEGMENTS if raw.get(key) is not None}
            payload = merge_editable(RuleSchema.default().editable_payload(), overlay)
            editable = EditableRules.model_validate(payload)
        except (OSError, yaml.YAMLError, ValueError, ValidationError) as exc:
            self._logger.warning("rules.load_failed", path=str(self._path), error=str(exc))
            return RuleSchema.default()

        errors = editable.bounds_errors()
        if errors:
            self._logger.warning("rules.load_failed", path=str(self._path), errors=errors)
            return RuleSchema.default()
        return RuleSchema.from_editable(editable)

    def save(self, schema: RuleSchema) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            yaml.safe_dump(schema.editable_payload(), sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
