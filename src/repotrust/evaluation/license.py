"""License scoring: points for a license file, its location and an approved license."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.evaluation.common import of_probe, require_probes
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes import license as probes

PROBE_POINTS = {
    probes.HAS_LICENSE_FILE: 6,
    probes.HAS_LICENSE_FILE_AT_TOP_DIR: 3,
    probes.HAS_FSF_OR_OSI_APPROVED_LICENSE: 1,
}


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """Points per probe that passed at least once: file 6, location 3, approved 1."""
    require_probes(findings, PROBE_POINTS)

    if not any(f.outcome is Outcome.TRUE for f in of_probe(findings, probes.HAS_LICENSE_FILE)):
        return scoring.create_min_score_result(name, "license file not detected")

    score = 0
    for probe, points in PROBE_POINTS.items():
        probe_findings = of_probe(findings, probe)
        if any(f.outcome is Outcome.TRUE for f in probe_findings):
            score += points
        for finding in probe_findings:
            if finding.outcome is Outcome.TRUE:
                dl.info(message_from_finding(finding))
            elif finding.outcome is Outcome.FALSE:
                dl.warn(message_from_finding(finding))
    return scoring.create_result_with_score(name, "license file detected", score)
