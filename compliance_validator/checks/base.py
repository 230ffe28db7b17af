from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from ..utils.controls import load_controls
from ..utils.logging_utils import exc_to_text

STATUS_PASS = "PASS"
STATUS_FAIL = "FAIL"
STATUS_UNKNOWN = "UNKNOWN"


@dataclass
class Finding:
    check_id: str
    title: str
    phase: str  # TLS / Network / Encryption / Monitoring / AccessControl
    remediation: str
    status: str
    category: str  # resource category, e.g. FunctionApp
    resource: str = ""  # resource (or subnet) name; empty for UNKNOWN
    message: str = ""
    evidence: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ComplianceReport:
    """Accumulates the findings of one validation run.

    ``passed_count + failed_count`` is the number of predicates evaluated.
    Every FAIL adds its message to ``issues``. UNKNOWN findings (a category
    that could not be listed) are kept apart and never count as passed.
    """
    scope: str = ""
    passed_count: int = 0
    failed_count: int = 0
    issues: List[str] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)
    unknown: List[Finding] = field(default_factory=list)

    def add(self, finding: Finding) -> None:
        self.findings.append(finding)
        if finding.status == STATUS_PASS:
            self.passed_count += 1
        elif finding.status == STATUS_FAIL:
            self.failed_count += 1
            self.issues.append(finding.message)
        else:
            self.unknown.append(finding)

    def extend(self, findings: Iterable[Finding]) -> None:
        for f in findings:
            self.add(f)

    @property
    def total(self) -> int:
        return self.passed_count + self.failed_count

    @property
    def compliant(self) -> bool:
        return self.failed_count == 0 and not self.unknown

    @property
    def exit_code(self) -> int:
        return 0 if self.compliant else 1

    def summary(self) -> str:
        text = f"Passed: {self.passed_count} / Failed: {self.failed_count}"
        if self.unknown:
            text += f" / Unknown: {len(self.unknown)}"
        return text


class Check:
    """Base class for one compliance predicate over one resource category."""
    check_id: str = ""
    category: str = ""

    def evaluate(self, resource: Any, ctx: Dict[str, Any]) -> List[Finding]:
        raise NotImplementedError

    def run(self, resources: Iterable[Any], ctx: Dict[str, Any]) -> List[Finding]:
        findings: List[Finding] = []
        for resource in resources:
            findings.extend(self.evaluate(resource, ctx))
        return findings

    def _finding(self, status: str, resource: str, message: str, evidence: str = "") -> Finding:
        c = load_controls()[self.check_id]
        return Finding(**c, status=status, category=self.category, resource=resource,
                       message=message, evidence=evidence)

    def result(self, ok: bool, resource: str, pass_message: str, fail_message: str, evidence: str = "") -> Finding:
        if ok:
            return self._finding(STATUS_PASS, resource, pass_message, evidence)
        return self._finding(STATUS_FAIL, resource, fail_message, evidence)

    def unknown(self, error: Exception) -> Finding:
        title = load_controls()[self.check_id]["title"]
        return self._finding(STATUS_UNKNOWN, "", f"{self.category} could not be listed; '{title}' was not evaluated",
                             evidence=exc_to_text(error))
