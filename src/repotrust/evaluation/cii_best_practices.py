"""CII-Best-Practices scoring from the badge level."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger
from repotrust.checker.errors import InternalError, UnhandledCaseError
from repotrust.evaluation.common import require_probes
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes import cii_best_practices as probes

LEVEL_SCORES = {
    probes.IN_PROGRESS: 2,
    probes.PASSING: 5,
    probes.SILVER: 7,
    probes.GOLD: 10,
}


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """Map the badge level onto a fixed score.

    Raises:
        UnhandledCaseError: If the badge service reported a level we do not know.
    """
    require_probes(findings, [probes.HAS_OPENSSF_BADGE])
    if len(findings) != 1:
        raise InternalError(f"expected one badge finding, got {len(findings)}")
    finding = findings[0]

    if finding.outcome is Outcome.FALSE:
        return scoring.create_min_score_result(name, "no effort to earn an OpenSSF best practices badge detected")

    level = finding.values.get(probes.LEVEL_KEY, "")
    if finding.outcome is not Outcome.TRUE or level not in LEVEL_SCORES:
        raise UnhandledCaseError("badge level", level)

    score = LEVEL_SCORES[level]
    if level == probes.IN_PROGRESS:
        reason = "badge detected: InProgress"
    else:
        reason = f"badge detected: {level.capitalize()}"
    return scoring.create_result_with_score(name, reason, score)
