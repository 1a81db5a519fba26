"""Dependency-Update-Tool scoring."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.evaluation.common import require_probes, with_outcome
from repotrust.models.results import CheckResult, Finding, LogMessage, Outcome
from repotrust.probes.dependency_update_tool import DEPENDENCY_UPDATE_TOOL_CONFIGURED


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    require_probes(findings, [DEPENDENCY_UPDATE_TOOL_CONFIGURED])

    configured = with_outcome(findings, Outcome.TRUE)
    if not configured:
        dl.warn(LogMessage(text="no dependency update tool configurations found"))
        return scoring.create_min_score_result(name, "no update tool detected")

    for finding in configured:
        dl.info(message_from_finding(finding))
    return scoring.create_max_score_result(name, "update tool detected")
