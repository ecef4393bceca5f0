"""Typer CLI for staging rankings, decisions and round pushes."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from .audit import AuditLogger
from .config import load_yaml_settings
from .container import create_container
from .errors import PreconditionFailure, ValidationError
from .logging import configure_logging
from .schemas import Phase
from .service import RecruitmentService
from .store import JsonFileRecordStore

app = typer.Typer(help="Recruitment round pipeline CLI.")

StoreOption = typer.Option(..., exists=True, readable=True, dir_okay=False, help="JSON record store path.")
PhaseOption = typer.Option(..., help="Phase: resume, coffee, first_round or final_round.")
ConfigOption = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path.")
LogLevelOption = typer.Option("WARNING", help="Log level for structured logging.")
CycleOption = typer.Option(None, help="Restrict to one recruiting cycle.")


def _build_service(
    store: Path,
    config: Optional[Path],
    log_level: str,
    audit_log: Optional[Path] = None,
) -> RecruitmentService:
    settings: dict[str, Any] = {}
    if config:
        try:
            settings = load_yaml_settings(config)
        except (TypeError, ValueError) as exc:
            raise typer.BadParameter(str(exc), param_name="config") from exc

    configure_logging(log_level)

    container = create_container(
        settings=settings,
        store=JsonFileRecordStore(store),
        audit_logger=AuditLogger(audit_log) if audit_log else None,
    )
    return container.service()


def _parse_phase(value: str) -> Phase:
    try:
        return Phase.parse(value)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="phase") from exc


@app.command()
def rank(
    store: Path = StoreOption,
    phase: str = PhaseOption,
    search: Optional[str] = typer.Option(None, help="Filter by candidate name or email."),
    cycle: Optional[str] = CycleOption,
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Print the staging ranking for a phase."""
    service = _build_service(store, config, log_level)
    rows = service.staging(_parse_phase(phase), cycle_id=cycle, search=search)
    for position, row in enumerate(rows, start=1):
        label = row.name or row.email or row.candidate_id
        typer.echo(f"{position:>3}. {label}  {row.display}  [{row.decision.value or 'pending'}]")
    typer.echo(f"{len(rows)} candidate(s).")


@app.command("set-decision")
def set_decision(
    store: Path = StoreOption,
    application: str = typer.Option(..., help="Application id."),
    phase: str = PhaseOption,
    decision: str = typer.Option(..., help="yes, maybe_yes, maybe_no, no or '' for pending."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Record the decision for one application in one phase."""
    service = _build_service(store, config, log_level)
    try:
        saved = service.save_decision(application, decision, _parse_phase(phase))
    except ValidationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(f"{application}: {saved.value or 'pending'}")


@app.command()
def validate(
    store: Path = StoreOption,
    phase: str = PhaseOption,
    cycle: Optional[str] = CycleOption,
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """List applications that block a push for the phase."""
    service = _build_service(store, config, log_level)
    result = service.validate(_parse_phase(phase), cycle_id=cycle)
    if result.ok:
        typer.echo("All candidates resolved to yes/no.")
        return
    for app_record in result.invalid:
        current = result.decisions.get(app_record.application_id)
        shown = current.value if current and current.value else "pending"
        typer.echo(f"{app_record.application_id}\t{app_record.name or ''}\t{shown}")
    raise typer.Exit(code=1)


@app.command()
def advance(
    store: Path = StoreOption,
    phase: str = PhaseOption,
    send_emails: bool = typer.Option(False, "--send-emails", help="Notify candidates (final round only)."),
    cycle: Optional[str] = CycleOption,
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Push every resolved candidate in the phase to their next state."""
    service = _build_service(store, config, log_level, audit_log)
    try:
        summary = service.advance(_parse_phase(phase), send_emails=send_emails, cycle_id=cycle)
    except PreconditionFailure as exc:
        typer.echo(f"Error: {exc}", err=True)
        for application_id in exc.invalid_ids:
            typer.echo(f"  unresolved: {application_id}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(
        f"Processed {summary.total_applications} of {summary.requested}: "
        f"{summary.accepted} advanced, {summary.rejected} rejected, "
        f"{summary.emails_sent} email(s) sent."
    )
    if summary.failed:
        raise typer.Exit(code=3)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
