"""Security-Policy scoring: points for links, text and disclosure content."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.evaluation.common import of_probe, require_probes
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes import security_policy as probes

PROBE_POINTS = {
    probes.SECURITY_POLICY_CONTAINS_LINKS: 6,
    probes.SECURITY_POLICY_CONTAINS_TEXT: 3,
    probes.SECURITY_POLICY_CONTAINS_DISCLOSURE: 1,
}


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    require_probes(findings, probes.ALL_PROBES)

    present = [f for f in of_probe(findings, probes.SECURITY_POLICY_PRESENT) if f.outcome is Outcome.TRUE]
    if not present:
        return scoring.create_min_score_result(name, "security policy file not detected")
    for finding in present:
        dl.info(message_from_finding(finding))

    score = 0
    for probe, points in PROBE_POINTS.items():
        probe_findings = of_probe(findings, probe)
        if any(f.outcome is Outcome.TRUE for f in probe_findings):
            score += points
        for finding in probe_findings:
            if finding.outcome is Outcome.TRUE:
                dl.info(message_from_finding(finding))
            else:
                dl.warn(message_from_finding(finding))
    return scoring.create_result_with_score(name, "security policy file detected", score)
