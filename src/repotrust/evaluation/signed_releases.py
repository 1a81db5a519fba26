"""Signed-Releases scoring: per-release points for signatures and provenance."""

import math

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger, message_from_finding
from repotrust.checker.errors import InternalError
from repotrust.evaluation.common import any_outcome, require_probes
from repotrust.models.results import CheckResult, Finding, LogMessage, Outcome
from repotrust.probes import signed_releases as probes

SIGNED_POINTS = 8
PROVENANCE_POINTS = 10

MAX_RELEASES = 5


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """Average per-release points: provenance 10, signature 8, neither 0."""
    require_probes(findings, [probes.RELEASES_ARE_SIGNED, probes.RELEASES_HAVE_PROVENANCE])

    if any_outcome(findings, Outcome.NOT_APPLICABLE):
        return scoring.create_inconclusive_result(name, "no releases found")

    releases: list[str] = []
    for finding in findings:
        release = finding.values.get(probes.RELEASE_NAME_KEY, "")
        if not release:
            raise InternalError("no release name in finding")
        if release not in releases:
            releases.append(release)
            dl.debug(LogMessage(text=f"GitHub release found: {release}"))

    if len(releases) > MAX_RELEASES:
        raise InternalError(f"too many releases: {len(releases)}")

    points: dict[str, int] = {}
    total_positive = 0
    for finding in findings:
        if finding.outcome is not Outcome.TRUE:
            dl.warn(message_from_finding(finding))
            continue
        dl.info(message_from_finding(finding))
        total_positive += 1
        release = finding.values[probes.RELEASE_NAME_KEY]
        if finding.probe == probes.RELEASES_HAVE_PROVENANCE:
            points[release] = PROVENANCE_POINTS
        else:
            points.setdefault(release, SIGNED_POINTS)

    if total_positive == 0:
        return scoring.create_min_score_result(
            name, "Project has not signed or included provenance with any releases."
        )

    score = int(math.floor(sum(points.values()) / len(releases)))
    reason = (
        f"{len(points)} out of the last {len(releases)} releases have a total of "
        f"{total_positive} signed artifacts."
    )
    return scoring.create_result_with_score(name, reason, score)
