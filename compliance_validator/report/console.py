"""Line-oriented report written to stdout while the run progresses."""
from __future__ import annotations
import os
import sys
from typing import List, Optional, TextIO

from ..checks.base import ComplianceReport, Finding, STATUS_FAIL, STATUS_PASS

PIPELINE_FORMATS = ("plain", "azure-devops", "github")

_PREFIX = {
    STATUS_PASS: "[PASS]",
    STATUS_FAIL: "[FAIL]",
}


def finding_line(f: Finding) -> str:
    return f"  {_PREFIX.get(f.status, '[UNKNOWN]')} {f.message}"


class ConsoleReporter:
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def _write(self, line: str = "") -> None:
        print(line, file=self.stream, flush=True)

    def header(self, resource_group: str, subscription_id: str) -> None:
        self._write(f"Compliance validation: resource group '{resource_group}' in subscription {subscription_id}")

    def phase(self, name: str) -> None:
        self._write()
        self._write(f"== {name} checks ==")

    def finding(self, f: Finding) -> None:
        self._write(finding_line(f))

    def summary(self, report: ComplianceReport) -> None:
        self._write()
        self._write("=" * 60)
        if report.scope:
            self._write(report.scope)
        self._write(report.summary())
        if report.issues:
            self._write("Issues:")
            for issue in report.issues:
                self._write(f"  - {issue}")
        if report.unknown:
            self._write("Not evaluated (resource listing failed):")
            for u in report.unknown:
                self._write(f"  - {u.message}")
        self._write("RESULT: " + ("COMPLIANT" if report.compliant else "NON-COMPLIANT"))
        self._write("=" * 60)


def pipeline_variables(report: ComplianceReport) -> List[tuple]:
    return [("CompliancePassed", report.passed_count), ("ComplianceFailed", report.failed_count)]


def emit_pipeline_variables(report: ComplianceReport, fmt: str = "plain", stream: Optional[TextIO] = None) -> None:
    """Publish pass/fail counts for the calling pipeline.

    plain        -> ``CompliancePassed=N`` on stdout
    azure-devops -> ``##vso[task.setvariable variable=CompliancePassed]N`` logging commands
    github       -> appended to the file named by $GITHUB_OUTPUT (plain stdout when unset)
    """
    stream = stream or sys.stdout
    pairs = pipeline_variables(report)
    if fmt == "azure-devops":
        for key, value in pairs:
            print(f"##vso[task.setvariable variable={key}]{value}", file=stream)
        return
    if fmt == "github":
        path = os.environ.get("GITHUB_OUTPUT")
        if path:
            with open(path, "a", encoding="utf-8") as fh:
                for key, value in pairs:
                    fh.write(f"{key}={value}\n")
            return
    elif fmt != "plain":
        raise ValueError(f"Unknown pipeline format: {fmt!r}")
    for key, value in pairs:
        print(f"{key}={value}", file=stream)
