from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterator

import pytest
import structlog
import yaml
from typer.testing import CliRunner

from admitguard.cli import app

VALID_RATIONALE = "Exception due to strong academic background and prior research experience"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    structlog.reset_defaults()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "admitguard.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "storage": {
                    "audit_log": str(tmp_path / "data" / "audit.jsonl"),
                    "rules": str(tmp_path / "data" / "rules.yaml"),
                },
                "timezone": "Asia/Kolkata",
            }
        ),
        encoding="utf-8",
    )
    return path


def write_candidate(path: Path, **overrides: object) -> Path:
    payload = {
        "full_name": "Asha Nair",
        "email": "asha.nair@example.com",
        "phone": "9123456789",
        "national_id": "111122223333",
        "date_of_birth": "2008-09-10",
        "qualification": "BCA",
        "graduation_year": 2024,
        "score": 82,
        "test_score": 70,
        "interview_status": "Cleared",
        "offer_sent": "Yes",
    }
    payload.update(overrides)
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


def invoke(runner: CliRunner, config_path: Path, *args: str):
    return runner.invoke(app, ["--config", str(config_path), "--log-level", "ERROR", *args])


def test_evaluate_reports_soft_violation_without_submitting(
    tmp_path: Path, runner: CliRunner, config_path: Path
) -> None:
    candidate = write_candidate(tmp_path / "candidate.json")

    result = invoke(runner, config_path, "evaluate", str(candidate), "--as-of", "2026-03-01")

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["state"] == "Editing"
    assert payload["result"]["age"] == 17
    assert list(payload["result"]["soft_violations"]) == ["age"]
    assert not (tmp_path / "data" / "audit.jsonl").exists()


def test_evaluate_shows_manager_review_message_over_cap(
    tmp_path: Path, runner: CliRunner, config_path: Path
) -> None:
    candidate = write_candidate(tmp_path / "candidate.json", graduation_year=2012, score=45)

    result = invoke(
        runner,
        config_path,
        "evaluate",
        str(candidate),
        "--as-of",
        "2026-03-01",
        "-o",
        "age",
        "-o",
        "graduation_year",
        "-o",
        "score",
        "--rationale",
        VALID_RATIONALE,
        "--submit",
    )

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["record"]["manager_review_required"] is True
    assert payload["manager_review_message"] == (
        "Manager review required due to multiple eligibility exceptions."
    )


def test_submit_exception_then_browse_export_and_clear(
    tmp_path: Path, runner: CliRunner, config_path: Path
) -> None:
    candidate = write_candidate(tmp_path / "candidate.json")

    submitted = invoke(
        runner,
        config_path,
        "evaluate",
        str(candidate),
        "--as-of",
        "2026-03-01",
        "--override",
        "age",
        "--rationale",
        VALID_RATIONALE,
        "--submit",
    )
    assert submitted.exit_code == 0, submitted.stdout
    record = json.loads(submitted.stdout)["record"]
    assert record["outcome"] == "ExceptionApproved"
    assert record["exceptions_used"] == 1
    assert record["manager_review_required"] is False

    listed = invoke(runner, config_path, "audit", "list", "--query", "asha")
    assert listed.exit_code == 0
    assert record["id"] in listed.stdout

    shown = invoke(runner, config_path, "audit", "show", record["id"])
    assert shown.exit_code == 0
    assert json.loads(shown.stdout)["rationale"] == VALID_RATIONALE

    stats = invoke(runner, config_path, "audit", "stats")
    assert json.loads(stats.stdout)["exception_approved"] == 1

    export_path = tmp_path / "exports" / "log.csv"
    exported = invoke(runner, config_path, "audit", "export", "--format", "csv", "--output", str(export_path))
    assert exported.exit_code == 0
    with export_path.open(encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["Evaluation ID"] == record["id"]
    assert rows[0]["Exception Rules Triggered"] == "Age Eligibility"

    cleared = invoke(runner, config_path, "audit", "clear", "--yes")
    assert cleared.exit_code == 0
    empty = invoke(runner, config_path, "audit", "list")
    assert "No audit records available." in empty.stdout


def test_blocked_candidate_cannot_be_submitted(
    tmp_path: Path, runner: CliRunner, config_path: Path
) -> None:
    candidate = write_candidate(tmp_path / "candidate.json", interview_status="Rejected")

    result = invoke(
        runner,
        config_path,
        "evaluate",
        str(candidate),
        "--as-of",
        "2026-03-01",
        "--override",
        "age",
        "--rationale",
        VALID_RATIONALE,
        "--submit",
    )

    assert result.exit_code == 1
    assert "interview_status" in result.stdout
    assert not (tmp_path / "data" / "audit.jsonl").exists()


def test_invalid_candidate_value_is_a_bad_parameter(
    tmp_path: Path, runner: CliRunner, config_path: Path
) -> None:
    candidate = write_candidate(tmp_path / "candidate.json", graduation_year="twenty")

    result = invoke(runner, config_path, "evaluate", str(candidate))

    assert result.exit_code == 2


def test_unparseable_as_of_is_a_bad_parameter(
    tmp_path: Path, runner: CliRunner, config_path: Path
) -> None:
    candidate = write_candidate(tmp_path / "candidate.json")

    result = invoke(runner, config_path, "evaluate", str(candidate), "--as-of", "not-a-date")

    assert result.exit_code == 2
    assert "Traceback" not in result.output


def test_rules_set_rejects_out_of_range_and_accepts_valid(
    tmp_path: Path, runner: CliRunner, config_path: Path
) -> None:
    rejected = invoke(runner, config_path, "rules", "set", "soft_rules.percentage.min=150")
    assert rejected.exit_code == 1
    assert json.loads(rejected.stdout)["errors"].keys() == {"percentage"}
    assert not (tmp_path / "data" / "rules.yaml").exists()

    accepted = invoke(
        runner,
        config_path,
        "rules",
        "set",
        "soft_rules.age.max=40",
        "exception_policy.max_exceptions=0",
    )
    assert accepted.exit_code == 0, accepted.stdout
    saved = yaml.safe_load((tmp_path / "data" / "rules.yaml").read_text(encoding="utf-8"))
    assert saved["soft_rules"]["age"]["max"] == 40

    shown = invoke(runner, config_path, "rules", "show")
    assert yaml.safe_load(shown.stdout)["exception_policy"]["max_exceptions"] == 0

    candidate = write_candidate(tmp_path / "candidate.json")
    evaluated = invoke(
        runner,
        config_path,
        "evaluate",
        str(candidate),
        "--as-of",
        "2026-03-01",
        "--override",
        "age",
        "--rationale",
        VALID_RATIONALE,
    )
    assert json.loads(evaluated.stdout)["result"]["manager_review_required"] is True

    reset = invoke(runner, config_path, "rules", "reset")
    assert reset.exit_code == 0
    assert json.loads(reset.stdout)["rules"]["soft_rules"]["age"]["max"] == 35
