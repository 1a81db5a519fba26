"""CI-Tests: whether merged pull requests were tested in CI."""

import asyncio
import logging

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import ci_tests as evaluation
from repotrust.models.evidence import AccessMode, MergeRequest
from repotrust.models.raw import CITestData, RevisionCIInfo
from repotrust.models.results import RiskLevel
from repotrust.probes import ci_tests as probes

logger = logging.getLogger(__name__)

CHECK_NAME = "CI-Tests"


async def merged_pull_requests(req: CheckRequest) -> list[MergeRequest]:
    """Merged PRs behind the recent default-branch commits, newest first."""
    seen: set[int] = set()
    merged = []
    for commit in await req.evidence.commits():
        mr = commit.merge_request
        if mr is None or mr.merged_at is None or mr.number in seen:
            continue
        seen.add(mr.number)
        merged.append(mr)
    return merged


async def collect(req: CheckRequest) -> CITestData:
    prs = [pr for pr in await merged_pull_requests(req) if pr.head_sha]
    runs = await asyncio.gather(*(req.evidence.check_runs(pr.head_sha) for pr in prs))
    logger.debug(f"Collected check runs for {len(prs)} merged PRs")
    return CITestData(
        ci_info=tuple(
            RevisionCIInfo(
                head_sha=pr.head_sha,
                pull_request_number=pr.number,
                check_runs=tuple(check_runs),
            )
            for pr, check_runs in zip(prs, runs)
        )
    )


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.COMMIT_BASED}),
        risk=RiskLevel.LOW,
        description="Determines if the project runs tests before pull requests are merged.",
    )
