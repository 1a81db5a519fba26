"""Code-Review scoring: share of recent changesets that were reviewed."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.evaluation.common import require_probes, with_outcome
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes.code_review import CODE_APPROVED


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    require_probes(findings, [CODE_APPROVED])

    not_applicable = with_outcome(findings, Outcome.NOT_APPLICABLE)
    if not_applicable:
        return scoring.create_inconclusive_result(name, not_applicable[0].message)

    unreviewed = with_outcome(findings, Outcome.FALSE)
    for finding in unreviewed:
        dl.warn(message_from_finding(finding))

    total = len(findings)
    approved = total - len(unreviewed)
    reason = f"found {len(unreviewed)} unreviewed changesets out of {total}"
    return scoring.create_proportional_score_result(name, reason, approved, total)
