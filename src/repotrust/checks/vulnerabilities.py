"""Vulnerabilities: open advisories affecting the current HEAD."""

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import vulnerabilities as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import VulnerabilitiesData
from repotrust.models.results import RiskLevel
from repotrust.probes import vulnerabilities as probes

CHECK_NAME = "Vulnerabilities"


async def collect(req: CheckRequest) -> VulnerabilitiesData:
    info = await req.evidence.repo_info()
    if not info.head_sha:
        return VulnerabilitiesData()
    ids = await req.evidence.vulnerabilities(info.head_sha)
    return VulnerabilitiesData(commit=info.head_sha, vulnerability_ids=tuple(ids))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.COMMIT_BASED}),
        risk=RiskLevel.HIGH,
        description="Determines if the project has open, known unfixed vulnerabilities.",
    )
