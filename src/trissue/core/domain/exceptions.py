"""Domain exceptions for trissue."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RunOutcome, TrackingIssue


class MalformedReportError(Exception):
    """Raised when a scan report does not have the expected shape.

    ``path`` names the offending location, e.g. ``.Results[2].Vulnerabilities``.
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.detail = message
        super().__init__(f"{message} (at {path})")


class ReportUnreadableError(Exception):
    """Raised when the report file cannot be read or is not JSON at all."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


class TrackerError(Exception):
    """Raised when a call to the issue tracker fails.

    Always chained to the underlying transport or HTTP error. ``created``
    is set when the failing call had already created an issue.
    """

    def __init__(self, operation: str, message: str, *, created: TrackingIssue | None = None) -> None:
        self.operation = operation
        self.created = created
        super().__init__(f"{operation} failed: {message}")


class SyncAbortedError(Exception):
    """Raised when a run stops part-way through applying its plan.

    ``applied`` holds only the transitions that completed before the failure.
    """

    def __init__(self, message: str, *, applied: RunOutcome) -> None:
        self.applied = applied
        super().__init__(message)
