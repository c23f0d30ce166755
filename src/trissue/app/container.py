from __future__ import annotations

from dependency_injector import containers, providers

from ..core.domain.models import IssueOptions
from ..core.services import PlanExecutor, Reconciler, SyncOrchestrator
from ..core.usecases.findings import FindingsUseCase
from ..core.usecases.sync import SyncUseCase
from ..infra.action_outputs import ActionOutputs
from ..infra.github_tracker import init_github_tracker
from ..infra.logging import RunLogger
from ..infra.report_source import JsonFileReportSource


class Container(containers.DeclarativeContainer):
    """DI container fed from AppConfig via ``config.from_pydantic``."""

    config = providers.Configuration()

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        RunLogger,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        console_output=config.logging.console_output,
        file_output=config.logging.file_output,
        level=config.logging.level,
    )

    # Adapters
    tracker = providers.Resource(
        init_github_tracker,
        token=config.github.token,
        repository=config.github.repository,
        api_url=config.github.api_url,
        timeout=config.github.timeout,
    )

    report_source = providers.Singleton(
        JsonFileReportSource,
        path=config.issue.filename,
    )

    outputs = providers.Singleton(
        ActionOutputs,
        output_file=config.run.output_file,
    )

    issue_options = providers.Singleton(
        IssueOptions,
        labels=config.issue.labels,
        assignees=config.issue.assignees,
        project_id=config.issue.project_id,
        enable_fix_label=config.issue.enable_fix_label,
        fix_label=config.issue.fix_label,
    )

    # Domain services
    reconciler = providers.Factory(
        Reconciler,
        logger=logger,
    )

    executor = providers.Factory(
        PlanExecutor,
        tracker=tracker,
        logger=logger,
        options=issue_options,
        dry_run=config.run.dry_run,
    )

    sync_orchestrator = providers.Factory(
        SyncOrchestrator,
        tracker=tracker,
        report_source=report_source,
        reconciler=reconciler,
        executor=executor,
        logger=logger,
        options=issue_options,
        create_labels=config.issue.create_labels,
        dry_run=config.run.dry_run,
    )

    # Use cases
    sync_uc = providers.Factory(
        SyncUseCase,
        orchestrator=sync_orchestrator,
        outputs=outputs,
    )

    findings_uc = providers.Factory(
        FindingsUseCase,
        report_source=report_source,
        logger=logger,
    )
