"""Branch-Protection scoring.

Each criterion is worth points inside one of five tiers. A branch earns a
tier's level in proportion to the points it got there, and only moves on to
the next tier once the current one is complete. Settings the caller could
not observe are left out of both the earned and the available points.

Some settings are only readable with admin rights. When any of them is not
observable for a branch, that branch is scored on the publicly visible
criteria alone. A branch whose deletion and force-push settings cannot be
seen is inconclusive. The check score is the worst branch score: a well protected
default branch cannot make up for an unprotected release branch.
"""

import math
from dataclasses import dataclass
from enum import IntEnum

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger
from repotrust.checker.errors import InternalError
from repotrust.evaluation.common import any_outcome, require_probes
from repotrust.models.results import CheckResult, Finding, LogMessage, Outcome
from repotrust.probes import branch_protection as bp


class Tier(IntEnum):
    BASIC = 1
    REVIEW = 2
    CONTEXT = 3
    THOROUGH_REVIEW = 4
    ADMIN_THOROUGH_REVIEW = 5


# Share of the 10-point scale each tier contributes.
TIER_LEVELS = {
    Tier.BASIC: 3,
    Tier.REVIEW: 3,
    Tier.CONTEXT: 2,
    Tier.THOROUGH_REVIEW: 1,
    Tier.ADMIN_THOROUGH_REVIEW: 1,
}

MIN_REVIEWS = 2


@dataclass(frozen=True)
class Criterion:
    tier: Tier
    points: int
    admin_only: bool = False


CRITERIA = {
    bp.BLOCKS_DELETE: Criterion(Tier.BASIC, 1),
    bp.BLOCKS_FORCE_PUSH: Criterion(Tier.BASIC, 1),
    bp.REQUIRES_APPROVERS: Criterion(Tier.REVIEW, 2),
    bp.REQUIRES_PRS_TO_CHANGE_CODE: Criterion(Tier.REVIEW, 1, admin_only=True),
    bp.REQUIRES_UP_TO_DATE_BRANCHES: Criterion(Tier.REVIEW, 1, admin_only=True),
    bp.REQUIRES_LAST_PUSH_APPROVAL: Criterion(Tier.REVIEW, 1, admin_only=True),
    bp.RUNS_STATUS_CHECKS: Criterion(Tier.CONTEXT, 1),
    bp.REQUIRES_CODE_OWNERS_REVIEW: Criterion(Tier.THOROUGH_REVIEW, 1),
    bp.DISMISSES_STALE_REVIEWS: Criterion(Tier.ADMIN_THOROUGH_REVIEW, 1, admin_only=True),
    bp.APPLIES_TO_ADMINS: Criterion(Tier.ADMIN_THOROUGH_REVIEW, 1, admin_only=True),
}

# Second criterion scored from the approver count: at least MIN_REVIEWS reviewers.
THOROUGH_APPROVERS = Criterion(Tier.THOROUGH_REVIEW, 1)


class TierTotals:
    """Earned and available points per tier."""

    def __init__(self) -> None:
        self.earned = {tier: 0 for tier in Tier}
        self.available = {tier: 0 for tier in Tier}

    def add(self, criterion: Criterion, earned: int) -> None:
        self.earned[criterion.tier] += earned
        self.available[criterion.tier] += criterion.points

    def score(self) -> int:
        """Tiered 0-10 score, or -1 if no criterion was observable."""
        possible = sum(TIER_LEVELS[t] for t in Tier if self.available[t] > 0)
        if possible == 0:
            return scoring.INCONCLUSIVE_RESULT_SCORE

        earned = 0.0
        gate_open = True
        for tier in Tier:
            available = self.available[tier]
            if available == 0:
                continue
            if gate_open:
                earned += TIER_LEVELS[tier] * self.earned[tier] / available
            if self.earned[tier] < available:
                gate_open = False

        # Small epsilon keeps exact fractions from flooring one point low.
        return int(math.floor(earned * scoring.MAX_RESULT_SCORE / possible + 1e-9))


def _reviewer_count(finding: Finding) -> int:
    if finding.outcome is not Outcome.TRUE:
        return 0
    try:
        return int(finding.values[bp.REQUIRED_REVIEWERS_KEY])
    except (KeyError, ValueError) as e:
        raise InternalError("unable to get reviewer count") from e


def _awards(finding: Finding) -> list[tuple[Criterion, int]]:
    """Points each observable finding earns against its criteria."""
    criterion = CRITERIA[finding.probe]
    passed = finding.outcome is Outcome.TRUE
    if finding.probe == bp.REQUIRES_APPROVERS:
        count = _reviewer_count(finding)
        return [
            (criterion, criterion.points if passed and count > 0 else 0),
            (THOROUGH_APPROVERS, 1 if passed and count >= MIN_REVIEWS else 0),
        ]
    return [(criterion, criterion.points if passed else 0)]


def _log(dl: DetailLogger, finding: Finding) -> None:
    msg = LogMessage(text=finding.message, finding=finding)
    if finding.outcome is Outcome.NOT_AVAILABLE:
        dl.debug(msg)
    elif finding.probe == bp.REQUIRES_APPROVERS and finding.outcome is Outcome.TRUE:
        if _reviewer_count(finding) >= MIN_REVIEWS:
            dl.info(msg)
        else:
            dl.warn(msg)
    elif finding.outcome is Outcome.TRUE:
        dl.info(msg)
    else:
        dl.warn(msg)


def score_branch(branch: str, findings: list[Finding], dl: DetailLogger) -> int:
    """Score one branch from its findings, logging each observation."""
    protection = [f for f in findings if f.probe == bp.BRANCHES_ARE_PROTECTED]
    if protection and protection[0].outcome is Outcome.FALSE:
        dl.warn(LogMessage(text=f"branch protection not enabled for branch '{branch}'"))
    elif protection and protection[0].outcome is Outcome.NOT_AVAILABLE:
        dl.debug(LogMessage(text=f"unable to retrieve branch protection for branch '{branch}'"))
        return scoring.INCONCLUSIVE_RESULT_SCORE

    full = TierTotals()
    public = TierTotals()
    admin_missing = False
    logging_enabled = not protection or protection[0].outcome is Outcome.TRUE

    for finding in findings:
        if finding.probe == bp.BRANCHES_ARE_PROTECTED:
            continue
        if logging_enabled:
            _log(dl, finding)
        if finding.outcome is Outcome.NOT_AVAILABLE:
            if CRITERIA[finding.probe].admin_only:
                admin_missing = True
            continue
        for criterion, earned in _awards(finding):
            full.add(criterion, earned)
            if not criterion.admin_only:
                public.add(criterion, earned)

    if full.available[Tier.BASIC] == 0:
        dl.debug(LogMessage(text=f"basic protection settings not visible for branch '{branch}'"))
        return scoring.INCONCLUSIVE_RESULT_SCORE
    if admin_missing:
        dl.debug(
            LogMessage(
                text=(
                    f"some protection settings of branch '{branch}' need admin access to read; "
                    "scoring on publicly visible settings"
                )
            )
        )
        return public.score()
    return full.score()


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    require_probes(findings, bp.ALL_PROBES)

    if any_outcome(findings, Outcome.NOT_APPLICABLE):
        return scoring.create_inconclusive_result(
            name, "unable to detect any development/release branches"
        )

    by_branch: dict[str, list[Finding]] = {}
    for finding in findings:
        branch = finding.values.get(bp.BRANCH_NAME_KEY, "")
        if not branch:
            raise InternalError("probe is missing branch name")
        by_branch.setdefault(branch, []).append(finding)

    branch_scores = [score_branch(b, fs, dl) for b, fs in by_branch.items()]
    score = scoring.aggregate_scores(*branch_scores)

    if score == scoring.INCONCLUSIVE_RESULT_SCORE:
        return scoring.create_inconclusive_result(
            name, "unable to observe branch protection settings on development/release branches"
        )
    if score == scoring.MIN_RESULT_SCORE:
        return scoring.create_min_score_result(
            name, "branch protection not enabled on development/release branches"
        )
    if score == scoring.MAX_RESULT_SCORE:
        return scoring.create_max_score_result(
            name, "branch protection is fully enabled on development and all release branches"
        )
    return scoring.create_result_with_score(
        name, "branch protection is not maximal on development and all release branches", score
    )
