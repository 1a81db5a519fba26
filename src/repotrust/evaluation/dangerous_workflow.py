"""Dangerous-Workflow scoring: any dangerous pattern scores zero."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.evaluation.common import any_outcome, require_probes, with_outcome
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes.dangerous_workflow import HAS_SCRIPT_INJECTION, HAS_UNTRUSTED_CHECKOUT


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """Any dangerous pattern zeroes the check."""
    require_probes(findings, [HAS_UNTRUSTED_CHECKOUT, HAS_SCRIPT_INJECTION])

    if any_outcome(findings, Outcome.NOT_APPLICABLE):
        return scoring.create_inconclusive_result(name, "no workflows found")

    dangerous = with_outcome(findings, Outcome.TRUE)
    if not dangerous:
        return scoring.create_max_score_result(name, "no dangerous workflow patterns detected")

    for finding in dangerous:
        dl.warn(message_from_finding(finding))
    return scoring.create_min_score_result(name, "dangerous workflow patterns detected")
