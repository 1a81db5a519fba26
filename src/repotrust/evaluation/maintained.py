"""Maintained scoring: weekly commit and issue activity over the last 90 days."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.checker.errors import InternalError
from repotrust.evaluation.common import require_probes
from repotrust.models.results import CheckResult, Finding, Outcome
from repotrust.probes import maintained as probes

DAYS_IN_WEEK = 7
ACTIVITY_PER_WEEK = 1


def _count(finding: Finding, key: str) -> int:
    try:
        return int(finding.values[key])
    except (KeyError, ValueError) as e:
        raise InternalError(f"{finding.probe}: missing or invalid {key}") from e


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """Archived or brand-new projects score 0; otherwise expect weekly activity."""
    require_probes(
        findings,
        [
            probes.ARCHIVED,
            probes.CREATED_RECENTLY,
            probes.HAS_RECENT_COMMITS,
            probes.ISSUE_ACTIVITY_BY_PROJECT_MEMBER,
        ],
    )

    is_archived = False
    recently_created = False
    commits = 0
    issues = 0
    for finding in findings:
        if finding.outcome is Outcome.TRUE:
            if finding.probe == probes.ARCHIVED:
                is_archived = True
                dl.warn(message_from_finding(finding))
            elif finding.probe == probes.CREATED_RECENTLY:
                recently_created = True
                dl.warn(message_from_finding(finding))
            elif finding.probe == probes.HAS_RECENT_COMMITS:
                commits = _count(finding, probes.NUM_COMMITS_KEY)
            elif finding.probe == probes.ISSUE_ACTIVITY_BY_PROJECT_MEMBER:
                issues = _count(finding, probes.NUM_ISSUES_KEY)
        elif finding.outcome is not Outcome.FALSE:
            dl.debug(message_from_finding(finding))

    if is_archived:
        return scoring.create_min_score_result(name, "project is archived")
    if recently_created:
        return scoring.create_min_score_result(
            name,
            f"project was created in last {probes.LOOKBACK_DAYS} days. please review its contents carefully",
        )

    expected = ACTIVITY_PER_WEEK * probes.LOOKBACK_DAYS // DAYS_IN_WEEK
    reason = (
        f"{commits} commit(s) and {issues} issue activity found in the last {probes.LOOKBACK_DAYS} days"
    )
    return scoring.create_proportional_score_result(name, reason, commits + issues, expected)
