"""Packaging scoring."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.evaluation.common import require_probes, with_outcome
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes.packaging import PACKAGED_WITH_AUTOMATED_WORKFLOW


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """A publishing workflow earns the maximum; its absence proves nothing."""
    require_probes(findings, [PACKAGED_WITH_AUTOMATED_WORKFLOW])

    packaged = with_outcome(findings, Outcome.TRUE)
    if not packaged:
        for finding in findings:
            dl.warn(message_from_finding(finding))
        return scoring.create_inconclusive_result(name, "packaging workflow not detected")

    for finding in packaged:
        dl.info(message_from_finding(finding))
    return scoring.create_max_score_result(name, "packaging workflow detected")
