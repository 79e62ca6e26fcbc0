from __future__ import annotations

from pathlib import Path

import yaml

from admitguard.config import RuleConfigStore, RuleRegistry
from admitguard.schemas import DEFAULT_STRICT_RULES, RuleSchema


def test_missing_file_loads_defaults(tmp_path: Path):
    store = RuleConfigStore(tmp_path / "rules.yaml")

    assert store.load() == RuleSchema.default()


def test_saved_file_only_holds_editable_segment(tmp_path: Path):
    store = RuleConfigStore(tmp_path / "nested" / "rules.yaml")

    store.save(RuleSchema.default())

    saved = yaml.safe_load(store.path.read_text(encoding="utf-8"))
    assert set(saved) == {"soft_rules", "exception_policy"}
    assert "strict_rules" not in saved


def test_partial_document_is_merged_over_defaults(tmp_path: Path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        yaml.safe_dump({"soft_rules": {"age": {"max": 40}}}),
        encoding="utf-8",
    )

    schema = RuleConfigStore(path).load()

    assert schema.soft_rules.age.max == 40
    assert schema.soft_rules.age.min == 18
    assert schema.exception_policy.max_exceptions == 2
    assert schema.strict_rules is DEFAULT_STRICT_RULES


def test_unknown_segments_are_ignored_and_soft_overlay_kept(tmp_path: Path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "strict_rules": {"phone": {"pattern": ".*"}},
                "legacy_rules": {"height": 170},
                "soft_rules": {"age": {"max": 40}},
            }
        ),
        encoding="utf-8",
    )

    schema = RuleConfigStore(path).load()

    assert schema.soft_rules.age.max == 40
    assert schema.strict_rules is DEFAULT_STRICT_RULES
    assert schema.exception_policy == RuleSchema.default().exception_policy


def test_corrupt_or_out_of_bounds_documents_fall_back(tmp_path: Path):
    corrupt = tmp_path / "corrupt.yaml"
    corrupt.write_text("soft_rules: [unclosed", encoding="utf-8")
    out_of_bounds = tmp_path / "bounds.yaml"
    out_of_bounds.write_text(
        yaml.safe_dump({"soft_rules": {"percentage": {"min": 150}}}),
        encoding="utf-8",
    )

    assert RuleConfigStore(corrupt).load() == RuleSchema.default()
    assert RuleConfigStore(out_of_bounds).load() == RuleSchema.default()


def test_registry_from_store_uses_persisted_values(tmp_path: Path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        yaml.safe_dump({"exception_policy": {"rationale_min_length": 10}}),
        encoding="utf-8",
    )

    registry = RuleRegistry.from_store(RuleConfigStore(path))

    assert registry.current.exception_policy.rationale_min_length == 10
