"""Contributors: diversity of the organizations behind regular contributors."""

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import contributors as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import ContributorsData
from repotrust.models.results import RiskLevel
from repotrust.probes import contributors as probes

CHECK_NAME = "Contributors"


async def collect(req: CheckRequest) -> ContributorsData:
    users = await req.evidence.contributors()
    return ContributorsData(users=tuple(users))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.COMMIT_BASED}),
        risk=RiskLevel.LOW,
        description="Determines if the project has a set of contributors from multiple organizations.",
    )
