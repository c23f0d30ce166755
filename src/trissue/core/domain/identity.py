"""Stable identity shared by scan findings and tracking issues.

An identifier is ``<vulnerability id>-<package name>``, lowercased. It never
depends on installed or fixed versions, target paths or free-text wording,
so a re-scan recognizes the same finding while its versions drift.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Container

if TYPE_CHECKING:
    from .models import TrackingIssue, VulnerabilityRecord


# "<id>: <type> package <name>-<version>"
_TITLE_RE = re.compile(r"^(?P<id>[^:\s]+): (?:\S* )?package (?P<subject>\S+)$")

# Guess for titles with no known identifier: the name is the shortest prefix
# whose remainder is a digit-led version, so "musl-utils-1.2.4-r2" yields
# "musl-utils". Otherwise the last hyphen segment is the version.
_NAME_VERSION_RE = re.compile(r"^(?P<name>.+?)-(?P<version>v?\d.*)$")
_NAME_LAST_SEGMENT_RE = re.compile(r"^(?P<name>.+)-(?P<version>[^-]+)$")


def make_identifier(vulnerability_id: str, package_name: str) -> str:
    return f"{vulnerability_id.lower()}-{package_name.lower()}"


def identify_record(record: VulnerabilityRecord) -> str:
    return make_identifier(record.vulnerability_id, record.package_name)


def _split_points(subject: str) -> list[int]:
    return [i for i, char in enumerate(subject) if char == "-" and 0 < i < len(subject) - 1]


def identify_title(title: str, known: Container[str] | None = None) -> str | None:
    """Recover the identifier from an issue title.

    ``<name>-<version>`` is ambiguous when the package name itself holds
    hyphens followed by digits (``gcc-12-base-12.2.0-14``). When ``known``
    identifiers are given, every split point is tried and the longest name
    that yields a known identifier wins. Titles matching none of them fall
    back to the version-shape guess.

    Returns None for titles that were not produced by the issue materializer
    (older or manually filed issues). Those issues must never be touched.
    """
    match = _TITLE_RE.match(title.strip())
    if match is None:
        return None
    vulnerability_id, subject = match.group("id"), match.group("subject")

    points = _split_points(subject)
    if not points:
        return None

    if known is not None:
        for point in reversed(points):
            identifier = make_identifier(vulnerability_id, subject[:point])
            if identifier in known:
                return identifier

    guess = _NAME_VERSION_RE.match(subject) or _NAME_LAST_SEGMENT_RE.match(subject)
    if guess is None:
        return None
    return make_identifier(vulnerability_id, guess.group("name"))


def identify_issue(issue: TrackingIssue, known: Container[str] | None = None) -> str | None:
    return identify_title(issue.title, known)
