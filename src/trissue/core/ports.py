from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .domain.models import TrackingIssue


class ReportSourcePort(Protocol):
    """Port for loading the raw scan report."""

    def load(self) -> Any:
        """Return the deserialized report.

        Raises:
            ReportUnreadableError: If the report cannot be read or decoded
        """
        ...


class TrackerPort(Protocol):
    """Port for the external issue tracker.

    Every method raises TrackerError on failure. Retrying is the
    implementation's business; the core treats a failure as fatal for the run.
    """

    def list_issues(self, labels: Sequence[str]) -> list[TrackingIssue]:
        """List open and closed issues carrying all of ``labels``."""
        ...

    def create_issue(
        self,
        *,
        title: str,
        body: str,
        labels: Sequence[str],
        assignees: Optional[Sequence[str]] = None,
        project_id: Optional[str] = None,
        fix_label: Optional[str] = None,
    ) -> TrackingIssue:
        ...

    def reopen_issue(self, number: int) -> TrackingIssue:
        ...

    def close_issue(self, number: int) -> TrackingIssue:
        ...

    def create_label_if_missing(self, label: str) -> None:
        ...


class RunOutputPort(Protocol):
    """Port for publishing the outputs of a completed run."""

    def publish(self, outputs: Mapping[str, str]) -> None:
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Messages are short event names; details travel as keyword fields.
    """

    def debug(self, message: str, **fields: Any) -> None:
        ...

    def info(self, message: str, **fields: Any) -> None:
        ...

    def warning(self, message: str, **fields: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        ...

    def exception(self, message: str, **fields: Any) -> None:
        ...
