from __future__ import annotations

from typing import Iterable

from ..domain.identity import identify_issue, identify_record
from ..domain.issue_body import materialize
from ..domain.models import (
    PlannedCreate,
    PlannedTransition,
    TrackingIssue,
    TransitionPlan,
    VulnerabilityRecord,
)
from ..domain.report import collapse_duplicates
from ..ports import LoggerPort


class Reconciler:
    """Domain service that diffs current findings against existing issues.

    Produces the minimal set of create/reopen/close transitions that makes
    the tracker mirror the scan. Pure apart from logging.
    """

    def __init__(self, *, logger: LoggerPort) -> None:
        self._logger = logger

    def reconcile(
        self,
        records: Iterable[VulnerabilityRecord],
        issues: Iterable[TrackingIssue],
    ) -> TransitionPlan:
        """Compute the transition plan.

        Issues whose titles cannot be identified are excluded from every
        group. When the snapshot holds several issues for one identifier,
        a present finding keeps an open one as is (or reopens the first
        closed one), and an absent finding closes all open ones.

        Args:
            records: Current findings in parse order
            issues: Snapshot of existing tracking issues

        Returns:
            TransitionPlan with pairwise disjoint identifier groups
        """
        # 1) Materialize findings, last write wins on collision
        pending: dict[str, PlannedCreate] = {}
        for record in collapse_duplicates(records, logger=self._logger):
            identifier = identify_record(record)
            pending[identifier] = PlannedCreate(identifier=identifier, draft=materialize(record))

        # 2) Group identifiable issues, snapshot order. Titles are resolved
        # against the current findings first.
        groups: dict[str, list[TrackingIssue]] = {}
        for issue in issues:
            identifier = identify_issue(issue, known=pending)
            if identifier is None:
                self._logger.debug("issue_unidentifiable", number=issue.number, title=issue.title)
                continue
            groups.setdefault(identifier, []).append(issue)

        # 3) Match groups against findings
        to_reopen: list[PlannedTransition] = []
        to_close: list[PlannedTransition] = []
        for identifier, group in groups.items():
            if pending.pop(identifier, None) is not None:
                if any(issue.is_open for issue in group):
                    continue
                first = group[0]
                to_reopen.append(
                    PlannedTransition(identifier=identifier, issue_number=first.number, title=first.title)
                )
            else:
                to_close.extend(
                    PlannedTransition(identifier=identifier, issue_number=issue.number, title=issue.title)
                    for issue in group
                    if issue.is_open
                )

        # 4) Whatever is left is new
        return TransitionPlan(
            to_create=tuple(pending.values()),
            to_reopen=tuple(to_reopen),
            to_close=tuple(to_close),
        )
