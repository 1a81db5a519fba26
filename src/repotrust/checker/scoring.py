"""Scoring primitives shared by every evaluator.

All check scores live on a fixed 0-10 scale. ``INCONCLUSIVE_RESULT_SCORE``
(-1) means the score could not be computed and is never averaged in as 0.
"""

import logging
import math
from dataclasses import dataclass

from repotrust.checker.errors import InternalError, RepoTrustError
from repotrust.models.results import CheckDetail, CheckResult, CheckStatus, Finding

logger = logging.getLogger(__name__)

MAX_RESULT_SCORE = 10
MIN_RESULT_SCORE = 0
INCONCLUSIVE_RESULT_SCORE = -1


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def proportional_score(achieved: float, total: float) -> int:
    """Scale ``achieved`` out of ``total`` onto the 0-10 range.

    Args:
        achieved: Points earned.
        total: Points available across applicable criteria.

    Returns:
        Rounded score clamped to [0, 10], or -1 if nothing was applicable.
    """
    if total <= 0:
        return INCONCLUSIVE_RESULT_SCORE
    score = _round_half_up(MAX_RESULT_SCORE * achieved / total)
    return max(MIN_RESULT_SCORE, min(score, MAX_RESULT_SCORE))


@dataclass(frozen=True)
class WeightedProportion:
    """One group of a weighted proportional score."""

    success: int
    total: int
    weight: int


def proportional_score_weighted(*groups: WeightedProportion) -> int:
    """Combine several success/total groups, each scaled by its weight.

    Groups with a zero total are not applicable and are ignored. If every
    applicable group has weight zero the result is the maximum score.

    Raises:
        InternalError: If a group reports more successes than its total.
    """
    weighted_success = 0
    weighted_total = 0
    applicable = False
    all_weights_zero = True
    for group in groups:
        if group.success > group.total:
            raise InternalError(f"success exceeds total: {group.success} > {group.total}")
        if group.total == 0:
            continue
        applicable = True
        if group.weight != 0:
            all_weights_zero = False
        weighted_success += group.success * group.weight
        weighted_total += group.total * group.weight

    if not applicable:
        return INCONCLUSIVE_RESULT_SCORE
    if all_weights_zero:
        return MAX_RESULT_SCORE
    return proportional_score(weighted_success, weighted_total)


def aggregate_scores(*scores: int) -> int:
    """AND-compose sub-scores: the worst conclusive score wins.

    Inconclusive (-1) inputs are excluded. If nothing is conclusive the
    aggregate is inconclusive.
    """
    conclusive = [s for s in scores if s != INCONCLUSIVE_RESULT_SCORE]
    if not conclusive:
        return INCONCLUSIVE_RESULT_SCORE
    return min(conclusive)


def aggregate_scores_with_weight(scores: list[tuple[int, int]]) -> int:
    """Floor of the weighted mean of ``(score, weight)`` pairs.

    Inconclusive scores are dropped along with their weight.
    """
    total = 0
    weights = 0
    for score, weight in scores:
        if score == INCONCLUSIVE_RESULT_SCORE:
            continue
        total += score * weight
        weights += weight
    if weights == 0:
        return INCONCLUSIVE_RESULT_SCORE
    return int(math.floor(total / weights))


def normalize_reason(reason: str, score: int) -> str:
    return f"{reason} -- score normalized to {score}"


# --- CheckResult constructors ---


def create_result_with_score(
    name: str,
    reason: str,
    score: int,
    findings: list[Finding] | None = None,
) -> CheckResult:
    """Build a conclusive result.

    A score outside [0, 10] is an internal bug and yields an error result
    instead of a clamped one.
    """
    if score < MIN_RESULT_SCORE or score > MAX_RESULT_SCORE:
        err = InternalError(f"invalid score ({score}), please report this")
        return create_runtime_error_result(name, err)
    return CheckResult(name=name, score=score, reason=reason, findings=findings or [])


def create_proportional_score_result(
    name: str,
    reason: str,
    achieved: int,
    total: int,
    findings: list[Finding] | None = None,
) -> CheckResult:
    score = proportional_score(achieved, total)
    if score == INCONCLUSIVE_RESULT_SCORE:
        return create_inconclusive_result(name, reason, findings)
    return create_result_with_score(name, normalize_reason(reason, score), score, findings)


def create_max_score_result(
    name: str, reason: str, findings: list[Finding] | None = None
) -> CheckResult:
    return create_result_with_score(name, reason, MAX_RESULT_SCORE, findings)


def create_min_score_result(
    name: str, reason: str, findings: list[Finding] | None = None
) -> CheckResult:
    return create_result_with_score(name, reason, MIN_RESULT_SCORE, findings)


def create_inconclusive_result(
    name: str, reason: str, findings: list[Finding] | None = None
) -> CheckResult:
    return CheckResult(
        name=name,
        score=INCONCLUSIVE_RESULT_SCORE,
        reason=reason,
        findings=findings or [],
    )


def create_runtime_error_result(
    name: str,
    error: BaseException,
    status: CheckStatus = CheckStatus.FAILED,
    details: list[CheckDetail] | None = None,
) -> CheckResult:
    """Build a -1 result carrying the error that prevented scoring."""
    if not isinstance(error, RepoTrustError):
        logger.debug(f"{name}: unexpected {type(error).__name__}", exc_info=error)
    message = str(error) or type(error).__name__
    return CheckResult(
        name=name,
        score=INCONCLUSIVE_RESULT_SCORE,
        reason=f"internal error: {message}",
        error=message,
        status=status,
        details=details or [],
    )
