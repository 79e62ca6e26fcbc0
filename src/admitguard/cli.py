"\"\"\"Typer CLI entrypoint for eligibility evaluation and audit management.\"\"\""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, List, Optional

import pendulum
import typer
import yaml
from pydantic import ValidationError

from .container import AdmitGuardContainer, create_container
from .core import SubmissionNotReadyError
from .export import default_filename
from .logging import configure_logging
from .schemas.config import load_config

app = typer.Typer(help="Admission candidate eligibility CLI.")
rules_app = typer.Typer(help="Inspect and edit the eligibility thresholds.")
audit_app = typer.Typer(help="Browse, export and clear the audit log.")
app.add_typer(rules_app, name="rules")
app.add_typer(audit_app, name="audit")


def _read_mapping(path: Path, *, param_name: str) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise typer.BadParameter(f"{path.name} must contain an object", param_hint=param_name)
    return loaded


def _container(ctx: typer.Context) -> AdmitGuardContainer:
    return ctx.obj


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _parse_as_of(value: str) -> date:
    try:
        parsed = pendulum.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="as_of") from exc
    if not isinstance(parsed, pendulum.DateTime):
        raise typer.BadParameter(f"Expected a calendar date, got {value!r}", param_hint="as_of")
    return parsed.date()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: Optional[str] = typer.Option(None, help="Log level for structured logging."),
) -> None:
    """Load configuration and wire the application container."""
    raw = _read_mapping(config, param_name="config") if config else {}
    try:
        app_config = load_config(raw)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc

    configure_logging(log_level or app_config.log_level)
    ctx.obj = create_container(settings=app_config.to_settings())


@app.command()
def evaluate(
    ctx: typer.Context,
    candidate: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False, help="Candidate JSON or YAML path."),
    override: Optional[List[str]] = typer.Option(None, "--override", "-o", help="Soft-rule field to waive (repeatable)."),
    rationale: str = typer.Option("", help="Justification for the enabled overrides."),
    score_type: Optional[str] = typer.Option(None, help="Percentage or CGPA; overrides the file value."),
    as_of: Optional[str] = typer.Option(None, help="Evaluation date (ISO) used for age calculation."),
    submit: bool = typer.Option(False, "--submit", help="Record the decision in the audit log."),
) -> None:
    """Evaluate a candidate and optionally submit the decision."""
    container = _container(ctx)
    fields = _read_mapping(candidate, param_name="candidate")
    if score_type:
        fields["score_type"] = score_type

    reference = _parse_as_of(as_of) if as_of else None
    session = container.session(as_of=reference)
    try:
        session.update(**fields)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="candidate") from exc

    for field in override or []:
        session.set_override(field, True)
    result = session.set_rationale(rationale)

    if not submit:
        _echo_json({"state": session.state.value, "result": asdict(result)})
        return

    try:
        record = session.submit()
    except SubmissionNotReadyError as exc:
        _echo_json({"state": session.state.value, "result": asdict(exc.result)})
        typer.echo("Candidate is not ready to submit.", err=True)
        raise typer.Exit(code=1) from exc

    _echo_json(
        {
            "state": session.state.value,
            "record": record.model_dump(mode="json"),
            "manager_review_message": session.result.manager_review_message,
        }
    )


@rules_app.command("show")
def rules_show(ctx: typer.Context) -> None:
    """Print the current editable thresholds as YAML."""
    editor = _container(ctx).rule_editor()
    typer.echo(yaml.safe_dump(editor.draft(), sort_keys=False, allow_unicode=True))


@rules_app.command("set")
def rules_set(
    ctx: typer.Context,
    assignments: List[str] = typer.Argument(..., help="Dotted KEY=VALUE pairs, e.g. soft_rules.percentage.min=55"),
) -> None:
    """Change one or more thresholds; nothing is saved if any check fails."""
    proposal: dict[str, Any] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got {assignment!r}", param_hint="assignments")
        cursor = proposal
        *parents, leaf = key.strip().split(".")
        for part in parents:
            cursor = cursor.setdefault(part, {})
        cursor[leaf] = yaml.safe_load(value)

    result = _container(ctx).rule_editor().commit(proposal)
    if not result.accepted:
        _echo_json({"accepted": False, "errors": result.errors})
        raise typer.Exit(code=1)
    _echo_json({"accepted": True, "rules": result.schema.editable_payload()})


@rules_app.command("reset")
def rules_reset(ctx: typer.Context) -> None:
    """Restore the default thresholds and exception policy."""
    result = _container(ctx).rule_editor().reset_to_defaults()
    _echo_json({"accepted": result.accepted, "rules": result.schema.editable_payload()})


@audit_app.command("list")
def audit_list(
    ctx: typer.Context,
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Filter by name, email or evaluation id."),
) -> None:
    """List audit records, most recent first."""
    store = _container(ctx).audit_store()
    records = store.search(query) if query else store.records()
    if not records:
        typer.echo("No records match your search." if query else "No audit records available.")
        return
    for record in records:
        review = "review" if record.manager_review_required else "-"
        typer.echo(
            f"{record.id}\t{record.timestamp}\t{record.candidate.full_name or ''}\t"
            f"{record.outcome}\t{record.exceptions_used}\t{review}"
        )


@audit_app.command("show")
def audit_show(ctx: typer.Context, record_id: str = typer.Argument(..., help="Evaluation id.")) -> None:
    """Print one audit record."""
    record = _container(ctx).audit_store().get(record_id)
    if record is None:
        typer.echo(f"Record {record_id} not found.", err=True)
        raise typer.Exit(code=1)
    _echo_json(record.model_dump(mode="json"))


@audit_app.command("stats")
def audit_stats(ctx: typer.Context) -> None:
    """Print dashboard counters for the audit log."""
    _echo_json(asdict(_container(ctx).audit_store().metrics()))


@audit_app.command("export")
def audit_export(
    ctx: typer.Context,
    fmt: str = typer.Option("csv", "--format", "-f", help="csv (full table) or json (summary)."),
    output: Optional[Path] = typer.Option(None, dir_okay=False, help="Output path; defaults to a dated file name."),
) -> None:
    """Export the audit log."""
    if fmt not in ("csv", "json"):
        raise typer.BadParameter("Format must be csv or json", param_hint="format")
    container = _container(ctx)
    records = container.audit_store().records()
    target = output or Path(default_filename(fmt))
    written = container.exporter().write(records, target, fmt=fmt)
    if written is None:
        typer.echo("No audit records to export.")
        return
    typer.echo(f"Exported {len(records)} records to {written}.")


@audit_app.command("clear")
def audit_clear(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Permanently delete the entire audit history."""
    if not yes:
        typer.confirm("This will permanently delete all audit records. Continue?", abort=True)
    removed = _container(ctx).audit_store().clear()
    typer.echo(f"Audit history cleared ({removed} records removed).")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
