"\"\"\"Pydantic configuration schema for CLI YAML input.\"\"\""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DATA_DIR = Path(".admitguard")


class StorageConfig(BaseModel):
    audit_log: Path = DEFAULT_DATA_DIR / "audit_log.jsonl"
    rules: Path = DEFAULT_DATA_DIR / "rules.yaml"

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    timezone: str = "Asia/Kolkata"
    log_level: str = "INFO"

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        return {
            "audit_log_path": str(self.storage.audit_log),
            "rules_path": str(self.storage.rules),
            "timezone": self.timezone,
        }


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        raw = {}
    return AppConfig.model_validate(raw)
