from __future__ import annotations

from ..domain.exceptions import SyncAbortedError, TrackerError
from ..domain.models import IssueOptions, RunOutcome, TransitionPlan
from ..ports import LoggerPort, TrackerPort


class PlanExecutor:
    """Applies a TransitionPlan through the tracker.

    Reopens, then closes, then creates. In dry-run mode every transition is
    only logged. The first tracker failure aborts the run.
    """

    def __init__(
        self,
        *,
        tracker: TrackerPort,
        logger: LoggerPort,
        options: IssueOptions,
        dry_run: bool = False,
    ) -> None:
        self._tracker = tracker
        self._logger = logger
        self._options = options
        self._dry_run = dry_run

    def execute(self, plan: TransitionPlan) -> RunOutcome:
        """Apply every transition of ``plan``.

        Returns:
            RunOutcome holding the issues returned by the tracker

        Raises:
            SyncAbortedError: On the first tracker failure, chained to the
                TrackerError and carrying what was applied so far
        """
        outcome = RunOutcome(plan=plan, dry_run=self._dry_run)
        try:
            self._apply(plan, outcome)
        except TrackerError as e:
            if e.created is not None:
                outcome.created.append(e.created)
            self._logger.error(
                "sync_aborted",
                operation=e.operation,
                applied=outcome.applied_count,
                planned=plan.size,
            )
            raise SyncAbortedError(
                f"Aborted after {outcome.applied_count} of {plan.size} transitions: {e}",
                applied=outcome,
            ) from e
        return outcome

    def _apply(self, plan: TransitionPlan, outcome: RunOutcome) -> None:
        for item in plan.to_reopen:
            if self._dry_run:
                self._logger.info("dry_run_reopen", number=item.issue_number, title=item.title)
                continue
            issue = self._tracker.reopen_issue(item.issue_number)
            outcome.reopened.append(issue)
            self._logger.info("issue_reopened", number=issue.number, identifier=item.identifier)

        for item in plan.to_close:
            if self._dry_run:
                self._logger.info("dry_run_close", number=item.issue_number, title=item.title)
                continue
            issue = self._tracker.close_issue(item.issue_number)
            outcome.closed.append(issue)
            self._logger.info("issue_closed", number=issue.number, identifier=item.identifier)

        for item in plan.to_create:
            fix_label = self._options.fix_label_for(item.draft)
            if self._dry_run:
                self._logger.info("dry_run_create", title=item.draft.title, fix_label=fix_label)
                continue
            issue = self._tracker.create_issue(
                title=item.draft.title,
                body=item.draft.body,
                labels=list(self._options.labels),
                assignees=list(self._options.assignees) or None,
                project_id=self._options.project_id,
                fix_label=fix_label,
            )
            outcome.created.append(issue)
            self._logger.info("issue_created", number=issue.number, identifier=item.identifier)
