from __future__ import annotations

from ..domain.models import VulnerabilityRecord
from ..domain.report import ParseFailure, try_parse_results
from ..ports import LoggerPort, ReportSourcePort


class FindingsUseCase:
    """Use case for listing the findings of a report without touching the tracker."""

    def __init__(self, *, report_source: ReportSourcePort, logger: LoggerPort) -> None:
        self._report_source = report_source
        self._logger = logger

    def execute(self) -> list[VulnerabilityRecord] | ParseFailure:
        """Load and parse the configured report.

        Returns:
            list[VulnerabilityRecord] in report order, possibly empty
            ParseFailure when the report is malformed
        """
        return try_parse_results(self._report_source.load(), logger=self._logger)
