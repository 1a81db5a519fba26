"""Repository-level aggregation of check results."""

import logging
from collections.abc import Iterable
from datetime import datetime

from repotrust.checker.context import RunContext
from repotrust.checker.evidence import EvidenceStore
from repotrust.checker.registry import CheckRegistry
from repotrust.checker.request import CheckRequest
from repotrust.checker.runner import DEFAULT_CHECK_TIMEOUT, DEFAULT_CONCURRENCY, Dispatcher, StatusCallback
from repotrust.clients.base import BadgeClient, RepoClient, VulnerabilityClient
from repotrust.models.evidence import RepoRef
from repotrust.models.raw import RawResults
from repotrust.models.results import CheckResult, Report, RiskLevel, ScoredCheck

logger = logging.getLogger(__name__)


def build_report(
    repo: RepoRef,
    results: dict[str, CheckResult],
    registry: CheckRegistry,
) -> Report:
    """Combine per-check results into a report sorted by check name.

    Checks missing from the registry (unknown names) are weighted as Low risk;
    they are always inconclusive and so never move the overall score.
    """
    checks = []
    for name in sorted(results):
        registration = registry.get(name)
        risk = registration.risk if registration else RiskLevel.LOW
        checks.append(ScoredCheck(result=results[name], risk=risk))
    return Report(repo=repo, checks=checks)


async def run_checks(
    client: RepoClient,
    registry: CheckRegistry,
    names: Iterable[str] | None = None,
    *,
    vuln_client: VulnerabilityClient | None = None,
    badge_client: BadgeClient | None = None,
    concurrency: int = DEFAULT_CONCURRENCY,
    check_timeout: float | None = DEFAULT_CHECK_TIMEOUT,
    run_timeout: float | None = None,
    on_status: StatusCallback | None = None,
    now: datetime | None = None,
) -> tuple[Report, RawResults]:
    """Evaluate one repository and build its report.

    Args:
        client: Repository backend.
        registry: Available checks.
        names: Checks to run. Defaults to every registered check.
        vuln_client: Vulnerability database client.
        badge_client: Best-practices badge client.
        concurrency: Maximum number of checks running at once.
        check_timeout: Per-check time limit in seconds.
        run_timeout: Time limit for the whole run in seconds.
        on_status: Called on every check status transition.
        now: Reference time for recency-based checks.

    Returns:
        The report and the raw evidence records of every check that ran.
    """
    ctx = RunContext(timeout=run_timeout)
    store = EvidenceStore(client, ctx, vuln_client=vuln_client, badge_client=badge_client)
    raw_results = RawResults()
    request_args = {}
    if now is not None:
        request_args["now"] = now
    req = CheckRequest(
        repo=client.repo,
        access_mode=client.access_mode,
        ctx=ctx,
        evidence=store,
        raw_results=raw_results,
        **request_args,
    )

    dispatcher = Dispatcher(
        registry,
        concurrency=concurrency,
        check_timeout=check_timeout,
        on_status=on_status,
    )
    selected = list(names) if names is not None else registry.names()
    logger.info(f"Running {len(selected)} checks against {client.repo.display_name}")
    try:
        results = await dispatcher.run(req, selected)
    finally:
        await store.cache.aclose()
    return build_report(client.repo, results, registry), raw_results
