"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from ..core.domain.issue_body import build_title
from ..core.domain.models import RunOutcome, TrackingIssue, VulnerabilityRecord


def _issue_line(issue: TrackingIssue) -> str:
    line = f"  #{issue.number} {issue.title}"
    if issue.url:
        line += f" ({issue.url})"
    return line


def format_sync_outcome(outcome: RunOutcome) -> str:
    """Format a sync outcome for human-readable CLI output.

    Args:
        outcome: Result of a sync run

    Returns:
        Formatted string for display
    """
    lines = []
    lines.append("=" * 80)
    lines.append("SYNC RESULT (DRY RUN)" if outcome.dry_run else "SYNC RESULT")
    lines.append("=" * 80)

    plan = outcome.plan
    if plan.is_empty:
        lines.append("\nNothing to do: tracking issues match the report.")
    else:
        lines.append(
            f"\nPlanned: {len(plan.to_create)} to create, "
            f"{len(plan.to_reopen)} to reopen, {len(plan.to_close)} to close"
        )

    if outcome.dry_run:
        for item in plan.to_create:
            lines.append(f"  [dry run] would create: {item.draft.title}")
        for item in plan.to_reopen:
            lines.append(f"  [dry run] would reopen: #{item.issue_number} {item.title}")
        for item in plan.to_close:
            lines.append(f"  [dry run] would close: #{item.issue_number} {item.title}")
    else:
        for heading, issues in (
            ("Created", outcome.created),
            ("Reopened", outcome.reopened),
            ("Closed", outcome.closed),
        ):
            if issues:
                lines.append(f"\n{heading}:")
                lines.extend(_issue_line(issue) for issue in issues)

    lines.append(f"\nFix available: {'yes' if outcome.fixable_vulnerability else 'no'}")
    lines.append("\n" + "=" * 80)

    return "\n".join(lines)


def format_findings(records: list[VulnerabilityRecord]) -> str:
    """Format report findings for human-readable CLI output.

    Args:
        records: Parsed findings in report order

    Returns:
        Formatted string for display
    """
    if not records:
        return "No vulnerabilities found."

    lines = [f"Found {len(records)} vulnerabilities:\n"]
    for i, record in enumerate(records, 1):
        fix = record.fixed_version or "no fix"
        lines.append(f"{i}. {record.identifier}")
        lines.append(f"   {build_title(record)}")
        lines.append(f"   Severity: {record.severity or 'UNKNOWN'} | Fixed in: {fix}")
        lines.append("")

    return "\n".join(lines)
