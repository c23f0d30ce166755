"""Tests for Trivy report parsing."""
import pytest

from trissue.core.domain.exceptions import MalformedReportError
from trissue.core.domain.report import UNKNOWN_VERSION, ParseFailure, parse_results, try_parse_results

from tests.trissue.core.conftest import FakeLogger, sample_report, vuln_entry


def test_parse_sample_report_in_report_order():
    records = parse_results(sample_report())

    assert [r.identifier for r in records] == [
        "cve-2021-23337-lodash",
        "cve-2022-25883-semver",
        "cve-2023-5363-libcrypto3",
    ]
    lodash = records[0]
    assert lodash.package_type == "npm"
    assert lodash.target == "package-lock.json"
    assert lodash.package_version == "4.17.20"
    assert lodash.fixed_version == "4.17.21"
    assert lodash.severity == "HIGH"
    assert lodash.references == ("https://nvd.nist.gov/vuln/detail/CVE-2021-23337",)

    libcrypto = records[2]
    assert libcrypto.package_type == "alpine"
    assert libcrypto.fixed_version is None
    assert not libcrypto.has_fix


def test_results_without_vulnerabilities_are_skipped():
    report = {
        "Results": [
            {"Target": "Dockerfile", "Type": "dockerfile"},
            {"Target": "go.sum", "Type": "gomod", "Vulnerabilities": None},
        ]
    }
    assert parse_results(report) == []


def test_empty_results_is_empty_list_not_failure():
    assert try_parse_results({"Results": []}) == []


def test_empty_fixed_version_means_no_fix():
    report = {"Results": [{"Type": "npm", "Target": "x", "Vulnerabilities": [vuln_entry(fixed="")]}]}
    assert parse_results(report)[0].fixed_version is None


def test_missing_installed_version_is_unknown():
    entry = vuln_entry()
    del entry["InstalledVersion"]
    report = {"Results": [{"Type": "npm", "Target": "x", "Vulnerabilities": [entry]}]}
    assert parse_results(report)[0].package_version == UNKNOWN_VERSION


def test_results_as_string_is_parse_failure_not_empty():
    """A malformed report is distinguishable from a scan with no findings."""
    logger = FakeLogger()

    result = try_parse_results({"Results": "oops"}, logger=logger)

    assert isinstance(result, ParseFailure)
    assert result != []
    assert result.path == ".Results"
    assert "not a list" in result.message
    assert str(result).endswith("(at .Results)")
    assert logger.find("report_malformed") == [{"location": ".Results", "reason": result.message}]


@pytest.mark.parametrize(
    "report, path",
    [
        ([], "$"),
        ({}, ".Results"),
        ({"Results": [1]}, ".Results[0]"),
        ({"Results": [{"Vulnerabilities": {}}]}, ".Results[0].Vulnerabilities"),
        ({"Results": [{}, {"Vulnerabilities": ["x"]}]}, ".Results[1].Vulnerabilities[0]"),
        ({"Results": [{"Vulnerabilities": [vuln_entry(VulnerabilityID="")]}]}, ".Results[0].Vulnerabilities[0].VulnerabilityID"),
        ({"Results": [{"Vulnerabilities": [vuln_entry(PkgName=None)]}]}, ".Results[0].Vulnerabilities[0].PkgName"),
        ({"Results": [{"Vulnerabilities": [vuln_entry(References="https://x")]}]}, ".Results[0].Vulnerabilities[0].References"),
    ],
)
def test_malformed_reports_name_the_offending_path(report, path):
    with pytest.raises(MalformedReportError) as exc:
        parse_results(report)
    assert exc.value.path == path


def test_duplicate_findings_collapse_last_write_wins():
    logger = FakeLogger()
    report = {
        "Results": [
            {
                "Type": "npm",
                "Target": "a/package-lock.json",
                "Vulnerabilities": [vuln_entry("CVE-1", "lodash", "4.17.20"), vuln_entry("CVE-2", "axios", "0.21.1")],
            },
            {
                "Type": "npm",
                "Target": "b/package-lock.json",
                "Vulnerabilities": [vuln_entry("cve-1", "Lodash", "4.17.19")],
            },
        ]
    }

    records = parse_results(report, logger=logger)

    assert [r.identifier for r in records] == ["cve-1-lodash", "cve-2-axios"]
    assert records[0].target == "b/package-lock.json"
    assert records[0].package_version == "4.17.19"
    warnings = logger.find("duplicate_finding")
    assert len(warnings) == 1
    assert warnings[0]["identifier"] == "cve-1-lodash"
    assert warnings[0]["replaced_target"] == "a/package-lock.json"


def test_parse_does_not_mutate_input():
    report = sample_report()
    before = repr(report)
    parse_results(report)
    assert repr(report) == before
