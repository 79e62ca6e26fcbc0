"\"\"\"Append-only audit log of submitted eligibility decisions.\"\"\""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import structlog
from pydantic import ValidationError
from rapidfuzz import fuzz

from .schemas import AuditRecord


@dataclass(slots=True)
class AuditMetrics:
    """Dashboard counters derived from the log."""

    total: int
    eligible: int
    exception_approved: int
    blocked: int
    manager_review: int
    exception_rate: float


class AuditStore:
    """Append-only audit log writing JSON lines.

    Records are appended in submission order and read back most-recent-first.
    Individual records are never rewritten or removed; :meth:`clear` empties
    the whole log.
    """

    def __init__(self, path: str | Path, *, fuzzy_threshold: float = 85.0):
        self._path = Path(path)
        self._fuzzy_threshold = fuzzy_threshold
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: AuditRecord) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(record.model_dump_json())
            handle.write("\n")
        self._logger.info("audit.appended", record_id=record.id, outcome=record.outcome)

    def records(self) -> list[AuditRecord]:
        """Return every record, most recent first."""
        if not self._path.exists():
            return []

        records: list[AuditRecord] = []
        with self._path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    records.append(AuditRecord.model_validate(json.loads(raw)))
                except (json.JSONDecodeError, ValidationError) as exc:
                    self._logger.warning(
                        "audit.unreadable_record",
                        path=str(self._path),
                        line=idx,
                        error=str(exc),
                    )
        records.reverse()
        return records

    def __len__(self) -> int:
        return len(self.records())

    def get(self, record_id: str) -> AuditRecord | None:
        for record in self.records():
            if record.id == record_id:
                return record
        return None

    def search(self, query: str) -> list[AuditRecord]:
        """Match name, email or id by substring; names also match fuzzily."""
        needle = query.strip().lower()
        if not needle:
            return self.records()

        matches: list[AuditRecord] = []
        for record in self.records():
            name = (record.candidate.full_name or "").lower()
            email = (record.candidate.email or "").lower()
            if needle in name or needle in email or needle in record.id.lower():
                matches.append(record)
            elif name and fuzz.token_set_ratio(needle, name) >= self._fuzzy_threshold:
                matches.append(record)
        return matches

    def metrics(self) -> AuditMetrics:
        records = self.records()
        total = len(records)
        with_exceptions = sum(1 for record in records if record.exceptions_used > 0)
        rate = round(with_exceptions / total * 100, 1) if total else 0.0
        return AuditMetrics(
            total=total,
            eligible=sum(1 for record in records if record.outcome == "Eligible"),
            exception_approved=sum(
                1 for record in records if record.outcome == "ExceptionApproved"
            ),
            blocked=sum(1 for record in records if record.outcome == "Blocked"),
            manager_review=sum(1 for record in records if record.manager_review_required),
            exception_rate=rate,
        )

    def clear(self) -> int:
        """Delete the entire history. Returns the number of records removed."""
        removed = len(self.records())
        if self._path.exists():
            self._path.unlink()
        self._logger.info("audit.cleared", removed=removed)
        return removed
