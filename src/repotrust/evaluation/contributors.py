"""Contributors scoring: distinct organizations among regular contributors."""

from repotrust.checker import scoring
from repotrust.checker.detail_logger import DetailLogger
from repotrust.evaluation.common import require_probes, with_outcome
from repotrust.models.results import CheckResult, Finding, LogMessage, Outcome
from repotrust.probes.contributors import CONTRIBUTORS_FROM_ORG_OR_COMPANY, ENTITY_KEY

NUM_ENTITIES_FOR_MAX = 3


def evaluate(name: str, findings: list[Finding], dl: DetailLogger) -> CheckResult:
    """Three or more distinct contributing organizations earn the maximum."""
    require_probes(findings, [CONTRIBUTORS_FROM_ORG_OR_COMPANY])

    entities = sorted(f.values[ENTITY_KEY] for f in with_outcome(findings, Outcome.TRUE))
    if entities:
        dl.info(LogMessage(text=f"found contributions from: {', '.join(entities)}"))
    else:
        dl.warn(LogMessage(text="no contributions from organizations or companies found"))

    reason = f"project has {len(entities)} contributing companies or organizations"
    return scoring.create_proportional_score_result(
        name, reason, min(len(entities), NUM_ENTITIES_FOR_MAX), NUM_ENTITIES_FOR_MAX
    )
