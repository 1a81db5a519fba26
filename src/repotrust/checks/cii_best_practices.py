"""CII-Best-Practices: the project's OpenSSF Best Practices badge level."""

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import cii_best_practices as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import BestPracticesData
from repotrust.models.results import RiskLevel
from repotrust.probes import cii_best_practices as probes

CHECK_NAME = "CII-Best-Practices"


async def collect(req: CheckRequest) -> BestPracticesData:
    level = await req.evidence.badge_level(req.repo.url)
    return BestPracticesData(badge=level)


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.FILE_BASED, AccessMode.COMMIT_BASED}),
        risk=RiskLevel.LOW,
        description="Determines if the project has an OpenSSF (formerly CII) Best Practices Badge.",
    )
