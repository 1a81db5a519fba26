"""Binary-Artifacts scoring: one point off per committed binary."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.evaluation.common import require_probes, with_outcome
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes.binary_artifacts import HAS_UNVERIFIED_BINARY_ARTIFACTS


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """One point off per binary artifact, floored at zero."""
    require_probes(findings, [HAS_UNVERIFIED_BINARY_ARTIFACTS])

    binaries = with_outcome(findings, Outcome.TRUE)
    if not binaries:
        return scoring.create_max_score_result(name, "no binaries found in the repo")

    for finding in binaries:
        dl.warn(message_from_finding(finding))
    score = max(scoring.MIN_RESULT_SCORE, scoring.MAX_RESULT_SCORE - len(binaries))
    return scoring.create_result_with_score(name, "binaries present in source code", score)
