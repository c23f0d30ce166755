"""Shared fakes for core tests."""
from __future__ import annotations

import copy
from typing import Any

import pytest

from trissue.core.domain.exceptions import TrackerError
from trissue.core.domain.models import TrackingIssue, TransitionPlan, VulnerabilityRecord


LABELS = ("trivy", "vulnerability")


def make_issue(number: int, title: str, state: str = "open", labels=LABELS) -> TrackingIssue:
    return TrackingIssue(number=number, title=title, state=state, labels=frozenset(labels))  # type: ignore[arg-type]


def make_record(
    vid: str = "CVE-2021-0001",
    name: str = "lodash",
    version: str = "4.17.20",
    fixed: str | None = "4.17.21",
    *,
    pkg_type: str = "npm",
    target: str = "package-lock.json",
    severity: str = "HIGH",
) -> VulnerabilityRecord:
    """Build a record with realistic defaults."""
    return VulnerabilityRecord(
        vulnerability_id=vid,
        package_name=name,
        package_version=version,
        package_type=pkg_type,
        target=target,
        fixed_version=fixed,
        title=f"{name}: vulnerability {vid}",
        description=f"Description of {vid}",
        severity=severity,
        primary_url=f"https://avd.aquasec.com/nvd/{vid.lower()}",
        references=(f"https://nvd.nist.gov/vuln/detail/{vid}",),
    )


def vuln_entry(
    vid: str = "CVE-2021-0001",
    name: str = "lodash",
    version: str = "4.17.20",
    fixed: str | None = "4.17.21",
    **extra: Any,
) -> dict[str, Any]:
    """Build one raw report vulnerability entry."""
    entry: dict[str, Any] = {
        "VulnerabilityID": vid,
        "PkgName": name,
        "InstalledVersion": version,
        "Title": f"{name}: vulnerability {vid}",
        "Description": f"Description of {vid}",
        "Severity": "HIGH",
        "PrimaryURL": f"https://avd.aquasec.com/nvd/{vid.lower()}",
        "References": [f"https://nvd.nist.gov/vuln/detail/{vid}"],
    }
    if fixed is not None:
        entry["FixedVersion"] = fixed
    entry.update(extra)
    return entry


def sample_report() -> dict[str, Any]:
    """A small two-target report: two npm findings and one os finding."""
    return {
        "SchemaVersion": 2,
        "ArtifactName": ".",
        "Results": [
            {
                "Target": "package-lock.json",
                "Class": "lang-pkgs",
                "Type": "npm",
                "Vulnerabilities": [
                    vuln_entry("CVE-2021-23337", "lodash", "4.17.20", "4.17.21"),
                    vuln_entry("CVE-2022-25883", "semver", "5.7.1", "7.5.2"),
                ],
            },
            {
                "Target": "alpine:3.18 (alpine 3.18.0)",
                "Class": "os-pkgs",
                "Type": "alpine",
                "Vulnerabilities": [
                    vuln_entry("CVE-2023-5363", "libcrypto3", "3.1.0-r4", None),
                ],
            },
            {
                "Target": "Dockerfile",
                "Class": "config",
                "Type": "dockerfile",
            },
        ],
    }


class FakeLogger:
    """Records every event as (level, message, fields)."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def debug(self, message: str, **fields: Any) -> None:
        self.events.append(("debug", message, fields))

    def info(self, message: str, **fields: Any) -> None:
        self.events.append(("info", message, fields))

    def warning(self, message: str, **fields: Any) -> None:
        self.events.append(("warning", message, fields))

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self.events.append(("error", message, fields))

    def exception(self, message: str, **fields: Any) -> None:
        self.events.append(("error", message, fields))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for (lvl, m, _) in self.events if level is None or lvl == level]

    def find(self, message: str) -> list[dict[str, Any]]:
        return [f for (_, m, f) in self.events if m == message]


class FakeTracker:
    """In-memory tracker.

    Issue numbers are assigned sequentially. ``fail_on`` makes the named
    operation raise TrackerError, optionally only after ``fail_after``
    successful calls of that operation.
    """

    def __init__(self, issues: list[TrackingIssue] | None = None) -> None:
        self.issues: dict[int, TrackingIssue] = {}
        self.calls: list[tuple[str, Any]] = []
        self.created_payloads: list[dict[str, Any]] = []
        self.labels: set[str] = set()
        self.fail_on: str | None = None
        self.fail_after = 0
        self._counts: dict[str, int] = {}
        self._next = 1
        for issue in issues or []:
            self.issues[issue.number] = issue
            self._next = max(self._next, issue.number + 1)

    def _check(self, operation: str) -> None:
        count = self._counts.get(operation, 0)
        self._counts[operation] = count + 1
        if self.fail_on == operation and count >= self.fail_after:
            try:
                raise ConnectionError("connection reset by peer")
            except ConnectionError as e:
                raise TrackerError(operation, str(e)) from e

    def list_issues(self, labels):
        self.calls.append(("list_issues", list(labels)))
        self._check("list_issues")
        wanted = set(labels)
        return [i for i in sorted(self.issues.values(), key=lambda i: i.number) if wanted <= i.labels]

    def create_issue(self, *, title, body, labels, assignees=None, project_id=None, fix_label=None):
        self.calls.append(("create_issue", title))
        self._check("create_issue")
        issue_labels = set(labels)
        if fix_label:
            issue_labels.add(fix_label)
        issue = TrackingIssue(
            number=self._next,
            title=title,
            state="open",
            labels=frozenset(issue_labels),
            url=f"https://github.com/octo/app/issues/{self._next}",
        )
        self.issues[issue.number] = issue
        self._next += 1
        self.created_payloads.append(
            {
                "title": title,
                "body": body,
                "labels": list(labels),
                "assignees": assignees,
                "project_id": project_id,
                "fix_label": fix_label,
            }
        )
        return issue

    def _set_state(self, operation: str, number: int, state: str) -> TrackingIssue:
        self.calls.append((operation, number))
        self._check(operation)
        current = self.issues[number]
        updated = TrackingIssue(
            number=current.number,
            title=current.title,
            state=state,  # type: ignore[arg-type]
            labels=current.labels,
            url=current.url,
        )
        self.issues[number] = updated
        return updated

    def reopen_issue(self, number):
        return self._set_state("reopen_issue", number, "open")

    def close_issue(self, number):
        return self._set_state("close_issue", number, "closed")

    def create_label_if_missing(self, label):
        self.calls.append(("create_label_if_missing", label))
        self._check("create_label_if_missing")
        self.labels.add(label)

    def snapshot(self) -> list[TrackingIssue]:
        return sorted(self.issues.values(), key=lambda i: i.number)

    def mutating_calls(self) -> list[tuple[str, Any]]:
        return [c for c in self.calls if c[0] != "list_issues"]


class FakeReportSource:
    def __init__(self, report: Any = None) -> None:
        self.report = report if report is not None else sample_report()
        self.loads = 0

    def load(self) -> Any:
        self.loads += 1
        return copy.deepcopy(self.report)


class FakeOutputs:
    def __init__(self) -> None:
        self.published: list[dict[str, str]] = []

    def publish(self, outputs) -> None:
        self.published.append(dict(outputs))


def apply_plan(issues: list[TrackingIssue], plan: TransitionPlan) -> list[TrackingIssue]:
    """Apply a plan to a snapshot in memory, as a tracker would."""
    reopen = {item.issue_number for item in plan.to_reopen}
    close = {item.issue_number for item in plan.to_close}
    result = []
    for issue in issues:
        state = issue.state
        if issue.number in reopen:
            state = "open"
        elif issue.number in close:
            state = "closed"
        result.append(TrackingIssue(number=issue.number, title=issue.title, state=state, labels=issue.labels))
    next_number = max((i.number for i in issues), default=0) + 1
    for offset, item in enumerate(plan.to_create):
        result.append(TrackingIssue(number=next_number + offset, title=item.draft.title, state="open"))
    return result


@pytest.fixture
def logger() -> FakeLogger:
    return FakeLogger()


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker()
