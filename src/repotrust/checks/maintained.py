"""Maintained: recent commit and issue activity."""

import asyncio

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import maintained as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import MaintainedData
from repotrust.models.results import RiskLevel
from repotrust.probes import maintained as probes

CHECK_NAME = "Maintained"


async def collect(req: CheckRequest) -> MaintainedData:
    info, commits, issues = await asyncio.gather(
        req.evidence.repo_info(),
        req.evidence.commits(),
        req.evidence.issues(),
    )
    return MaintainedData(
        archived=info.archived,
        created_at=info.created_at,
        default_branch_commit_dates=tuple(c.committed_at for c in commits if c.committed_at),
        issues=tuple(issues),
        now=req.now,
    )


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.COMMIT_BASED}),
        risk=RiskLevel.HIGH,
        description="Determines if the project is \"actively maintained\".",
    )
