from __future__ import annotations

from .models import IssueDraft, VulnerabilityRecord


NO_KNOWN_FIX = "No known fix at this time"


def build_title(record: VulnerabilityRecord) -> str:
    """Build the issue title. Parseable by ``identify_title`` by construction."""
    return (
        f"{record.vulnerability_id}: {record.package_type} package "
        f"{record.package_name}-{record.package_version}"
    )


def build_body(record: VulnerabilityRecord) -> str:
    """Render the fixed-section Markdown body for a finding."""
    lines = [
        "## Title",
        record.title,
        "## Description",
        record.description,
        "## Severity",
        f"**{record.severity}**",
        "## Fixed in Version",
        f"**{record.fixed_version or NO_KNOWN_FIX}**",
        "",
        "## Primary URL",
        record.primary_url,
        "## Additional Information",
        f"- **Vulnerability ID:** {record.vulnerability_id}",
        f"- **Package Name:** {record.package_name}",
        f"- **Package Version:** {record.package_version}",
        f"- **Package Type:** {record.package_type}",
        f"- **Target:** {record.target}",
        "## References",
    ]
    lines.extend(f"- {reference}" for reference in record.references)
    return "\n".join(lines) + "\n"


def materialize(record: VulnerabilityRecord) -> IssueDraft:
    return IssueDraft(
        title=build_title(record),
        body=build_body(record),
        has_fix=record.has_fix,
    )
