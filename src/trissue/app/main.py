from __future__ import annotations

from pathlib import Path

from .. import __version__
from .config import APP_NAME, AppConfig
from .container import Container
from ..core.domain.exceptions import MalformedReportError
from ..core.domain.issue_body import build_title
from ..core.domain.report import ParseFailure
from ..core.ports import LoggerPort


_announced = False


def _announce_startup(logger: LoggerPort) -> None:
    """Log the version line once per process."""
    global _announced
    if _announced:
        return
    _announced = True
    logger.info(f"{APP_NAME} {__version__} starting", version=__version__)


def _create_container(config: AppConfig | None = None) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        # Load from environment variables (BaseSettings default behavior)
        config = AppConfig()

    container.config.from_pydantic(config)
    container.init_resources()

    return container


def sync(
    *,
    report: str | Path | None = None,
    repository: str | None = None,
    token: str | None = None,
    dry_run: bool = False,
    config: AppConfig | None = None,
) -> dict[str, object]:
    """Reconcile tracking issues with a scan report.

    Args:
        report: Report path override (optional, otherwise from config/env)
        repository: owner/name override (optional, otherwise from config/env)
        token: GitHub token override (optional, otherwise from config/env)
        dry_run: Log planned transitions without touching the tracker
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        Run outcome dictionary (plan, applied transitions, outputs)

    Raises:
        ValueError: If required settings are missing
        ReportUnreadableError: If the report cannot be read
        TrackerError: If label bootstrap or issue listing fails
        SyncAbortedError: If applying the plan fails part-way
    """
    base = config if config is not None else AppConfig()
    config = base.with_overrides(
        issue={"filename": Path(report) if report is not None else None},
        github={"repository": repository, "token": token},
        run={"dry_run": True if dry_run else None},
    )

    if not config.issue.filename:
        raise ValueError("Report file required via TRISSUE_ISSUE__FILENAME")
    if not config.github.repository:
        raise ValueError("Repository required via TRISSUE_GITHUB__REPOSITORY")
    if not config.github.token and not config.run.dry_run:
        raise ValueError("GitHub token required via TRISSUE_GITHUB__TOKEN")

    container = _create_container(config)
    try:
        _announce_startup(container.logger())
        outcome = container.sync_uc().execute()
    finally:
        container.shutdown_resources()
    return outcome.to_dict()


def findings(
    report: str | Path | None = None,
    config: AppConfig | None = None,
) -> list[dict[str, object]]:
    """List the findings of a report with their identifiers and issue titles.

    Args:
        report: Report path override (optional, otherwise from config/env)
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        One dictionary per finding, in report order

    Raises:
        MalformedReportError: If the report does not have the expected shape
    """
    base = config if config is not None else AppConfig()
    config = base.with_overrides(issue={"filename": Path(report) if report is not None else None})

    container = _create_container(config)
    try:
        result = container.findings_uc().execute()
    finally:
        container.shutdown_resources()

    if isinstance(result, ParseFailure):
        raise MalformedReportError(result.path, result.message)

    return [
        {
            "identifier": record.identifier,
            "title": build_title(record),
            "vulnerability_id": record.vulnerability_id,
            "package_name": record.package_name,
            "package_version": record.package_version,
            "fixed_version": record.fixed_version,
            "severity": record.severity,
            "target": record.target,
        }
        for record in result
    ]
