from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from pydantic import ValidationError

from .config import AppConfig, split_csv
from .container import Container
from .cli_formatter import format_findings, format_sync_outcome
from .main import _announce_startup
from ..core.domain.exceptions import (
    ReportUnreadableError,
    SyncAbortedError,
    TrackerError,
)
from ..core.domain.report import ParseFailure

load_dotenv()

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _load_config() -> AppConfig:
    try:
        return AppConfig()
    except ValidationError as e:
        typer.echo(f"Error: invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)


def _fail(error: Exception) -> None:
    """Print a fatal error and its underlying cause to stderr."""
    typer.echo(f"Error: {error}", err=True)
    if error.__cause__ is not None:
        typer.echo(f"Cause: {error.__cause__}", err=True)


@app.command()
def sync(
    report: Path | None = typer.Option(None, "--report", "-r", help="Trivy scan results in JSON format"),
    repository: str | None = typer.Option(None, "--repository", envvar="GITHUB_REPOSITORY", help="Target repository (owner/name)"),
    token: str | None = typer.Option(None, "--token", envvar="GITHUB_TOKEN", help="GitHub token", show_default=False),
    labels: str | None = typer.Option(None, "--labels", help="Comma-separated issue labels"),
    assignees: str | None = typer.Option(None, "--assignees", help="Comma-separated issue assignees"),
    project_id: str | None = typer.Option(None, "--project-id", help="Projects (v2) node ID for created issues"),
    create_labels: bool = typer.Option(False, "--create-labels", help="Create labels that don't exist yet"),
    enable_fix_label: bool = typer.Option(False, "--enable-fix-label", help="Label issues whose finding has a fix"),
    fix_label: str | None = typer.Option(None, "--fix-label", help="Label used when a fix is available"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log planned transitions without touching GitHub"),
    output_file: Path | None = typer.Option(None, "--output-file", envvar="GITHUB_OUTPUT", help="File receiving run outputs"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level", case_sensitive=False),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """Reconcile GitHub tracking issues with a Trivy scan report."""
    config = _load_config()
    config = config.with_overrides(
        github={"repository": repository, "token": token},
        issue={
            "filename": report,
            "labels": split_csv(labels) if labels is not None else None,
            "assignees": split_csv(assignees) if assignees is not None else None,
            "project_id": project_id,
            "create_labels": True if create_labels else None,
            "enable_fix_label": True if enable_fix_label else None,
            "fix_label": fix_label,
        },
        run={"dry_run": True if dry_run else None, "output_file": output_file},
        logging={"level": log_level.upper() if log_level else None, "console_output": True},
    )

    # Configure basic logging for third-party libraries
    level = logging.getLevelName(config.logging.level.upper())
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    # Validate required settings
    if not config.issue.filename:
        typer.echo("Error: report file required via --report or TRISSUE_ISSUE__FILENAME", err=True)
        raise typer.Exit(code=2)

    if not config.github.repository:
        typer.echo("Error: repository required via --repository or GITHUB_REPOSITORY", err=True)
        raise typer.Exit(code=2)

    if not config.github.token and not config.run.dry_run:
        typer.echo("Error: GitHub token required via --token or GITHUB_TOKEN", err=True)
        raise typer.Exit(code=2)

    if not json_output:
        typer.echo(f"Syncing issues in {config.github.repository} from {config.issue.filename}")
        if config.run.dry_run:
            typer.echo("Dry run: no issue will be created, reopened or closed")

    # Create container and execute
    container = Container()
    container.config.from_pydantic(config)
    container.init_resources()

    try:
        _announce_startup(container.logger())
        uc = container.sync_uc()
        outcome = uc.execute()

        if outcome.report_error is not None:
            typer.echo(f"Error: malformed report: {outcome.report_error}", err=True)
            raise typer.Exit(code=1)

        if json_output:
            typer.echo(json.dumps(outcome.to_dict(), ensure_ascii=False, indent=2))
        else:
            typer.echo(format_sync_outcome(outcome))

    except (ReportUnreadableError, TrackerError, SyncAbortedError) as e:
        _fail(e)
        raise typer.Exit(code=1)

    finally:
        # Always shutdown resources to close file handles and the HTTP session
        container.shutdown_resources()


@app.command()
def findings(
    report: Path = typer.Argument(..., help="Trivy scan results in JSON format"),
    json_output: bool = typer.Option(False, "--json", help="Output result as JSON"),
):
    """List the findings of a report with their identifiers."""
    config = _load_config()
    config = config.with_overrides(issue={"filename": report})

    container = Container()
    container.config.from_pydantic(config)
    container.init_resources()

    try:
        uc = container.findings_uc()
        result = uc.execute()

        if isinstance(result, ParseFailure):
            typer.echo(f"Error: malformed report: {result}", err=True)
            raise typer.Exit(code=1)

        if json_output:
            items = [
                {
                    "identifier": record.identifier,
                    "vulnerability_id": record.vulnerability_id,
                    "package_name": record.package_name,
                    "package_version": record.package_version,
                    "fixed_version": record.fixed_version,
                    "severity": record.severity,
                    "target": record.target,
                }
                for record in result
            ]
            typer.echo(json.dumps({"count": len(items), "findings": items}, ensure_ascii=False, indent=2))
        else:
            typer.echo(format_findings(result))

    except ReportUnreadableError as e:
        _fail(e)
        raise typer.Exit(code=1)

    finally:
        container.shutdown_resources()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
