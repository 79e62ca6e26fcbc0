"\"\"\"Derived, read-only projections of the audit log.\"\"\""

from __future__ import annotations

import csv
import io
import json
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Literal

import pendulum

from .schemas import AuditRecord, Outcome

ExportFormat = Literal["csv", "json"]

CSV_HEADERS: tuple[str, ...] = (
    "Evaluation ID",
    "Timestamp",
    "Full Name",
    "Email",
    "Phone Number",
    "Aadhaar Number",
    "Date of Birth",
    "Age at Evaluation",
    "Highest Qualification",
    "Graduation Year",
    "Score Type",
    "Percentage Value",
    "CGPA Value",
    "Screening Test Score",
    "Interview Status",
    "Offer Letter Sent",
    "Final Eligibility Status",
    "Exception Count",
    "Manager Review Required",
    "Exception Rules Triggered",
    "Exception Rationales",
)

OUTCOME_LABELS: dict[Outcome, str] = {
    "Eligible": "Eligible",
    "ExceptionApproved": "Eligible with Exceptions",
    "Blocked": "Blocked",
}

OVERRIDE_LABELS: dict[str, str] = {
    "age": "Age Eligibility",
    "graduation_year": "Graduation Year",
    "score": "Academic Score",
    "test_score": "Screening Score",
}


def default_filename(fmt: ExportFormat, today: date | None = None) -> str:
    day = today or pendulum.today().date()
    return f"admitguard_audit_log_{day.isoformat()}.{fmt}"


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return str(value)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


class AuditExporter:
    """Render audit records as a flat CSV table or a JSON summary."""

    def rows(self, records: Iterable[AuditRecord]) -> list[list[str]]:
        rows: list[list[str]] = []
        for record in records:
            candidate = record.candidate
            triggered = ", ".join(
                OVERRIDE_LABELS.get(field, field)
                for field, enabled in record.overrides.items()
                if enabled
            )
            is_percentage = candidate.score_type == "Percentage"
            rows.append(
                [
                    record.id,
                    record.timestamp,
                    _text(candidate.full_name),
                    _text(candidate.email),
                    _text(candidate.phone),
                    _text(candidate.national_id),
                    _text(candidate.date_of_birth),
                    _text(record.age),
                    _text(candidate.qualification),
                    _text(candidate.graduation_year),
                    candidate.score_type,
                    _text(candidate.score) if is_percentage else "",
                    "" if is_percentage else _text(candidate.score),
                    _text(candidate.test_score),
                    _text(candidate.interview_status),
                    _text(candidate.offer_sent),
                    OUTCOME_LABELS[record.outcome],
                    str(record.exceptions_used),
                    _yes_no(record.manager_review_required),
                    triggered,
                    record.rationale,
                ]
            )
        return rows

    def to_csv(self, records: Iterable[AuditRecord]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        writer.writerows(self.rows(records))
        return buffer.getvalue()

    def summarize(self, records: Iterable[AuditRecord]) -> list[dict[str, Any]]:
        return [
            {
                "timestamp": record.timestamp,
                "candidate_name": record.candidate.full_name,
                "email": record.candidate.email,
                "eligibility_outcome": OUTCOME_LABELS[record.outcome],
                "exceptions_used": record.exceptions_used,
                "manager_review_required": _yes_no(record.manager_review_required),
            }
            for record in records
        ]

    def write(
        self,
        records: list[AuditRecord],
        path: Path,
        *,
        fmt: ExportFormat = "csv",
    ) -> Path | None:
        """Write an export file; nothing is written for an empty log."""
        if not records:
            return None
        if fmt == "csv":
            content = self.to_csv(records)
        else:
            content = json.dumps(self.summarize(records), ensure_ascii=False, indent=2)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
