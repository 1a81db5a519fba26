"""SAST scoring.

Sonar, Snyk, Pysa or Qodana configured anywhere earns the maximum. Otherwise
the share of merged PRs analyzed by a SAST check run is combined with
whether CodeQL is configured, favouring tools that run on every change over
scheduled scans.
"""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.checker.errors import InternalError
from repotrust.evaluation.common import of_probe, require_probes
from repotrust.models.results import CheckResult, Finding, LogMessage, Outcome
from repotrust.probes import sast as probes

SAST_WEIGHT = 3
CODEQL_WEIGHT = 7

# Checked in this order; the first one present wins.
MAX_SCORE_TOOLS = (
    (probes.SAST_TOOL_SONAR_INSTALLED, "SAST tool detected"),
    (probes.SAST_TOOL_SNYK_INSTALLED, "SAST tool detected: Snyk"),
    (probes.SAST_TOOL_PYSA_INSTALLED, "SAST tool detected: Pysa"),
    (probes.SAST_TOOL_QODANA_INSTALLED, "SAST tool detected: Qodana"),
)


def _sast_score(finding: Finding, dl: DetailLogger) -> int:
    if finding.outcome is Outcome.NOT_APPLICABLE:
        dl.warn(LogMessage(text=finding.message))
        return scoring.INCONCLUSIVE_RESULT_SCORE
    if finding.outcome is Outcome.TRUE:
        dl.info(LogMessage(text=finding.message))
    else:
        dl.warn(LogMessage(text=finding.message))
    try:
        analyzed = int(finding.values[probes.ANALYZED_PRS_KEY])
        total = int(finding.values[probes.TOTAL_PRS_KEY])
    except (KeyError, ValueError) as e:
        raise InternalError("invalid analyzed PR counts") from e
    return scoring.proportional_score(analyzed, total)


def _tool_score(findings: list[Finding], dl: DetailLogger) -> int:
    """10 if any finding is True, 0 if all are False, else inconclusive."""
    positive = [f for f in findings if f.outcome is Outcome.TRUE]
    for finding in positive:
        dl.info(message_from_finding(finding))
    if positive:
        return scoring.MAX_RESULT_SCORE
    if findings and all(f.outcome is Outcome.FALSE for f in findings):
        return scoring.MIN_RESULT_SCORE
    return scoring.INCONCLUSIVE_RESULT_SCORE


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    require_probes(
        findings,
        [
            probes.SAST_TOOL_RUNS_ON_ALL_COMMITS,
            probes.SAST_TOOL_CODEQL_INSTALLED,
            probes.SAST_TOOL_SNYK_INSTALLED,
            probes.SAST_TOOL_PYSA_INSTALLED,
            probes.SAST_TOOL_QODANA_INSTALLED,
            probes.SAST_TOOL_SONAR_INSTALLED,
        ],
    )

    for probe, reason in MAX_SCORE_TOOLS:
        if _tool_score(of_probe(findings, probe), dl) == scoring.MAX_RESULT_SCORE:
            return scoring.create_max_score_result(name, reason)

    sast_score = _sast_score(of_probe(findings, probes.SAST_TOOL_RUNS_ON_ALL_COMMITS)[0], dl)
    codeql_score = _tool_score(of_probe(findings, probes.SAST_TOOL_CODEQL_INSTALLED), dl)

    if sast_score == scoring.INCONCLUSIVE_RESULT_SCORE:
        if codeql_score == scoring.MAX_RESULT_SCORE:
            return scoring.create_max_score_result(name, "SAST tool detected: CodeQL")
        if codeql_score == scoring.MIN_RESULT_SCORE:
            return scoring.create_min_score_result(name, "no SAST tool detected")
        raise InternalError("neither SAST check runs nor CodeQL configuration could be assessed")

    if sast_score == scoring.MAX_RESULT_SCORE:
        return scoring.create_max_score_result(name, "SAST tool is run on all commits")

    if codeql_score == scoring.MAX_RESULT_SCORE:
        score = scoring.aggregate_scores_with_weight(
            [(sast_score, SAST_WEIGHT), (codeql_score, CODEQL_WEIGHT)]
        )
        return scoring.create_result_with_score(
            name, "SAST tool detected but not run on all commits", score
        )

    return scoring.create_result_with_score(
        name, scoring.normalize_reason("SAST tool is not run on all commits", sast_score), sast_score
    )
