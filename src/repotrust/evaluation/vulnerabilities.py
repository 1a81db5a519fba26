"""Vulnerabilities scoring: one point off per open advisory."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.evaluation.common import any_outcome, require_probes, with_outcome
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes.vulnerabilities import HAS_OSV_VULNERABILITIES


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """One point off per known vulnerability, floored at zero."""
    require_probes(findings, [HAS_OSV_VULNERABILITIES])

    if any_outcome(findings, Outcome.NOT_AVAILABLE):
        return scoring.create_inconclusive_result(name, "unable to determine the commit to query")

    vulns = with_outcome(findings, Outcome.TRUE)
    for finding in vulns:
        dl.warn(message_from_finding(finding))

    score = max(scoring.MIN_RESULT_SCORE, scoring.MAX_RESULT_SCORE - len(vulns))
    if not vulns:
        return scoring.create_max_score_result(name, "0 existing vulnerabilities detected")
    return scoring.create_result_with_score(
        name, f"{len(vulns)} existing vulnerabilities detected", score
    )
