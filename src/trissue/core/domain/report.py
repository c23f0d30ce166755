"""Trivy JSON report parsing.

Turns the ``Results`` of a report into an ordered list of
``VulnerabilityRecord`` (result-major, then vulnerability-minor).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from .exceptions import MalformedReportError
from .identity import identify_record
from .models import VulnerabilityRecord

if TYPE_CHECKING:
    from ..ports import LoggerPort


UNKNOWN_VERSION = "unknown"


@dataclass(frozen=True)
class ParseFailure:
    """Distinguished result for a report that could not be parsed.

    Returned instead of an empty list so that a broken report is never
    mistaken for a scan without findings.
    """
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (at {self.path})"


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "list"
    if isinstance(value, Mapping):
        return "dictionary"
    return type(value).__name__


def _text(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    return "" if value is None else str(value)


def _build_record(
    entry: Any,
    *,
    path: str,
    package_type: str,
    target: str,
) -> VulnerabilityRecord:
    if not isinstance(entry, Mapping):
        raise MalformedReportError(path, f"The JSON entry {path} is not a dictionary, got: {_type_name(entry)}")

    vulnerability_id = _text(entry, "VulnerabilityID").strip()
    if not vulnerability_id:
        raise MalformedReportError(f"{path}.VulnerabilityID", "Vulnerability entry has no VulnerabilityID")

    package_name = _text(entry, "PkgName").strip()
    if not package_name:
        raise MalformedReportError(f"{path}.PkgName", "Vulnerability entry has no PkgName")

    references = entry.get("References")
    if references is None:
        references = []
    if not isinstance(references, list):
        raise MalformedReportError(
            f"{path}.References",
            f"The JSON entry {path}.References is not a list, got: {_type_name(references)}",
        )

    return VulnerabilityRecord(
        vulnerability_id=vulnerability_id,
        package_name=package_name,
        package_version=_text(entry, "InstalledVersion").strip() or UNKNOWN_VERSION,
        package_type=package_type,
        target=target,
        fixed_version=_text(entry, "FixedVersion").strip() or None,
        title=_text(entry, "Title"),
        description=_text(entry, "Description"),
        severity=_text(entry, "Severity"),
        primary_url=_text(entry, "PrimaryURL"),
        references=tuple(str(ref) for ref in references),
    )


def collapse_duplicates(
    records: Iterable[VulnerabilityRecord],
    *,
    logger: LoggerPort | None = None,
) -> list[VulnerabilityRecord]:
    """Keep one record per identifier, last write wins.

    The later record takes the earlier one's position. Each collapse is
    logged as a ``duplicate_finding`` warning.
    """
    collapsed: dict[str, VulnerabilityRecord] = {}
    for record in records:
        key = identify_record(record)
        previous = collapsed.get(key)
        if previous is not None and logger is not None:
            logger.warning(
                "duplicate_finding",
                identifier=key,
                replaced_target=previous.target,
                target=record.target,
            )
        collapsed[key] = record
    return list(collapsed.values())


def parse_results(report: Any, *, logger: LoggerPort | None = None) -> list[VulnerabilityRecord]:
    """Parse a deserialized Trivy report.

    Results without a ``Vulnerabilities`` list are skipped. Entries that share
    an identifier collapse last-write-wins: the later entry replaces the
    earlier one at the earlier one's position, and a ``duplicate_finding``
    warning is logged.

    Args:
        report: Deserialized JSON report
        logger: Optional logger for duplicate warnings

    Returns:
        Records in report order

    Raises:
        MalformedReportError: If the report does not have the expected shape
    """
    if not isinstance(report, Mapping):
        raise MalformedReportError("$", f"The report is not a dictionary, got: {_type_name(report)}")

    results = report.get("Results")
    if not isinstance(results, list):
        raise MalformedReportError(".Results", f"The JSON entry .Results is not a list, got: {_type_name(results)}")

    records: list[VulnerabilityRecord] = []
    for idx, result in enumerate(results):
        result_path = f".Results[{idx}]"
        if not isinstance(result, Mapping):
            raise MalformedReportError(
                result_path,
                f"The JSON entry {result_path} is not a dictionary, got: {_type_name(result)}",
            )

        vulnerabilities = result.get("Vulnerabilities")
        if vulnerabilities is None:
            # No findings for this target
            continue
        if not isinstance(vulnerabilities, list):
            raise MalformedReportError(
                f"{result_path}.Vulnerabilities",
                f"The JSON entry {result_path}.Vulnerabilities is not a list, got: {_type_name(vulnerabilities)}",
            )

        package_type = _text(result, "Type")
        target = _text(result, "Target")
        for jdx, entry in enumerate(vulnerabilities):
            entry_path = f"{result_path}.Vulnerabilities[{jdx}]"
            records.append(_build_record(entry, path=entry_path, package_type=package_type, target=target))

    return collapse_duplicates(records, logger=logger)


def try_parse_results(
    report: Any,
    *,
    logger: LoggerPort | None = None,
) -> list[VulnerabilityRecord] | ParseFailure:
    """Parse a report, returning ParseFailure instead of raising.

    The failure is logged with the offending location.
    """
    try:
        return parse_results(report, logger=logger)
    except MalformedReportError as e:
        if logger is not None:
            logger.error("report_malformed", location=e.path, reason=e.detail)
        return ParseFailure(path=e.path, message=e.detail)
