from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Literal, Sequence

from .identity import identify_record


IssueState = Literal["open", "closed"]


@dataclass(frozen=True)
class VulnerabilityRecord:
    """One finding from a scan report.

    Built fresh by the report parser on every run and never mutated.
    The lowercased (vulnerability_id, package_name) pair is the natural key.
    """
    vulnerability_id: str
    package_name: str
    package_version: str
    package_type: str
    target: str
    fixed_version: str | None = None

    # Descriptive only
    title: str = ""
    description: str = ""
    severity: str = ""
    primary_url: str = ""
    references: tuple[str, ...] = ()

    @property
    def identifier(self) -> str:
        """Stable join key shared with tracking issues."""
        return identify_record(self)

    @property
    def has_fix(self) -> bool:
        return bool(self.fixed_version)


@dataclass(frozen=True)
class TrackingIssue:
    """A tracking issue as reported by the tracker gateway."""
    number: int
    title: str
    state: IssueState
    labels: frozenset[str] = frozenset()
    url: str | None = None

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    def to_dict(self) -> dict[str, object]:
        return {
            "number": self.number,
            "title": self.title,
            "state": self.state,
            "labels": sorted(self.labels),
            "url": self.url,
        }


@dataclass(frozen=True)
class IssueDraft:
    """Rendered title/body pair for a finding that needs a new issue."""
    title: str
    body: str
    has_fix: bool


@dataclass(frozen=True)
class IssueOptions:
    """Static attributes applied to every issue the run creates."""
    labels: Sequence[str] = ()
    assignees: Sequence[str] = ()
    project_id: str | None = None
    enable_fix_label: bool = False
    fix_label: str | None = None

    def fix_label_for(self, draft: IssueDraft) -> str | None:
        if self.enable_fix_label and self.fix_label and draft.has_fix:
            return self.fix_label
        return None


@dataclass(frozen=True)
class PlannedCreate:
    identifier: str
    draft: IssueDraft


@dataclass(frozen=True)
class PlannedTransition:
    identifier: str
    issue_number: int
    title: str


@dataclass(frozen=True)
class TransitionPlan:
    """Reconciliation output.

    The identifier sets of the three groups are pairwise disjoint. ``to_close``
    only references issues that were open and ``to_reopen`` only issues that
    were closed when the snapshot was taken.
    """
    to_create: tuple[PlannedCreate, ...] = ()
    to_reopen: tuple[PlannedTransition, ...] = ()
    to_close: tuple[PlannedTransition, ...] = ()

    @property
    def create_ids(self) -> set[str]:
        return {item.identifier for item in self.to_create}

    @property
    def reopen_ids(self) -> set[str]:
        return {item.identifier for item in self.to_reopen}

    @property
    def close_ids(self) -> set[str]:
        return {item.identifier for item in self.to_close}

    @property
    def size(self) -> int:
        return len(self.to_create) + len(self.to_reopen) + len(self.to_close)

    @property
    def is_empty(self) -> bool:
        return self.size == 0

    def to_dict(self) -> dict[str, object]:
        return {
            "to_create": [
                {"identifier": item.identifier, "title": item.draft.title}
                for item in self.to_create
            ],
            "to_reopen": [
                {"identifier": item.identifier, "number": item.issue_number, "title": item.title}
                for item in self.to_reopen
            ],
            "to_close": [
                {"identifier": item.identifier, "number": item.issue_number, "title": item.title}
                for item in self.to_close
            ],
        }


@dataclass
class RunOutcome:
    """Observable result of one sync run."""
    plan: TransitionPlan
    dry_run: bool = False
    fixable_vulnerability: bool = False
    created: list[TrackingIssue] = field(default_factory=list)
    reopened: list[TrackingIssue] = field(default_factory=list)
    closed: list[TrackingIssue] = field(default_factory=list)
    report_error: str | None = None

    @property
    def applied_count(self) -> int:
        return len(self.created) + len(self.reopened) + len(self.closed)

    def to_outputs(self) -> dict[str, str]:
        """Render the run outputs as the string values an Actions step exposes."""
        return {
            "fixable_vulnerability": "true" if self.fixable_vulnerability else "false",
            "created_issues": json.dumps([i.to_dict() for i in self.created], ensure_ascii=False),
            "closed_issues": json.dumps([i.to_dict() for i in self.closed], ensure_ascii=False),
            "updated_issues": json.dumps([i.to_dict() for i in self.reopened], ensure_ascii=False),
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "dry_run": self.dry_run,
            "fixable_vulnerability": self.fixable_vulnerability,
            "report_error": self.report_error,
            "plan": self.plan.to_dict(),
            "created_issues": [i.to_dict() for i in self.created],
            "closed_issues": [i.to_dict() for i in self.closed],
            "updated_issues": [i.to_dict() for i in self.reopened],
        }
