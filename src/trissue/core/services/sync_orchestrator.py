from __future__ import annotations

from ..domain.identity import identify_issue
from ..domain.models import (
    IssueOptions,
    RunOutcome,
    TrackingIssue,
    TransitionPlan,
    VulnerabilityRecord,
)
from ..domain.report import ParseFailure, try_parse_results
from ..ports import LoggerPort, ReportSourcePort, TrackerPort
from .plan_executor import PlanExecutor
from .reconciler import Reconciler


class SyncOrchestrator:
    """Orchestrates one complete sync run.

    Coordinates the report source, tracker, reconciler and executor. The
    issue snapshot is taken once, before any transition is planned.
    """

    def __init__(
        self,
        *,
        tracker: TrackerPort,
        report_source: ReportSourcePort,
        reconciler: Reconciler,
        executor: PlanExecutor,
        logger: LoggerPort,
        options: IssueOptions,
        create_labels: bool = False,
        dry_run: bool = False,
    ) -> None:
        self._tracker = tracker
        self._report_source = report_source
        self._reconciler = reconciler
        self._executor = executor
        self._logger = logger
        self._options = options
        self._create_labels = create_labels
        self._dry_run = dry_run

    def sync(self) -> RunOutcome:
        """Execute the complete sync workflow.

        Returns:
            RunOutcome; ``report_error`` is set and nothing is touched when
            the report is malformed

        Raises:
            ReportUnreadableError: If the report cannot be loaded
            TrackerError: If label bootstrap or issue listing fails
            SyncAbortedError: If applying the plan fails part-way
        """
        self._logger.info("sync_started", dry_run=self._dry_run)

        # 1) Labels
        if self._create_labels:
            self._ensure_labels()

        # 2) Report
        raw_report = self._report_source.load()
        parsed = try_parse_results(raw_report, logger=self._logger)
        if isinstance(parsed, ParseFailure):
            return RunOutcome(plan=TransitionPlan(), dry_run=self._dry_run, report_error=str(parsed))

        # 3) Snapshot
        existing = self._tracker.list_issues(list(self._options.labels))

        # 4) Plan
        plan = self._reconciler.reconcile(parsed, existing)
        self._log_overview(parsed, existing, plan)

        # 5) Apply
        outcome = self._executor.execute(plan)
        outcome.fixable_vulnerability = any(record.has_fix for record in parsed)

        self._logger.info(
            "sync_completed",
            created=len(outcome.created),
            reopened=len(outcome.reopened),
            closed=len(outcome.closed),
            fixable_vulnerability=outcome.fixable_vulnerability,
        )
        return outcome

    def _ensure_labels(self) -> None:
        labels = list(self._options.labels)
        if self._options.enable_fix_label and self._options.fix_label:
            labels.append(self._options.fix_label)

        for label in labels:
            if not label:
                continue
            if self._dry_run:
                self._logger.info("dry_run_create_label", label=label)
            else:
                self._tracker.create_label_if_missing(label)

    def _log_overview(
        self,
        records: list[VulnerabilityRecord],
        issues: list[TrackingIssue],
        plan: TransitionPlan,
    ) -> None:
        known = {record.identifier for record in records}
        self._logger.info(
            "scan_findings",
            count=len(records),
            identifiers=[record.identifier for record in records],
        )
        self._logger.info(
            "existing_issues",
            count=len(issues),
            issues=[
                {
                    "number": issue.number,
                    "identifier": identify_issue(issue, known=known) or "N/A",
                    "state": issue.state,
                    "title": issue.title,
                }
                for issue in issues
            ],
        )
        self._logger.info("plan_create", identifiers=[item.identifier for item in plan.to_create])
        self._logger.info("plan_reopen", identifiers=[item.identifier for item in plan.to_reopen])
        self._logger.info("plan_close", identifiers=[item.identifier for item in plan.to_close])
