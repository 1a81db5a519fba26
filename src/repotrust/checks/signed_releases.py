"""Signed-Releases: signatures and provenance attached to recent releases."""

import logging

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import signed_releases as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import SignedReleasesData
from repotrust.models.results import RiskLevel
from repotrust.probes import signed_releases as probes

logger = logging.getLogger(__name__)

CHECK_NAME = "Signed-Releases"

RELEASE_LOOKBACK = 5


async def collect(req: CheckRequest) -> SignedReleasesData:
    """The most recent releases that ship assets; assetless releases are ignored."""
    releases = await req.evidence.releases()
    with_assets = [r for r in releases if r.assets]
    logger.debug(f"{len(releases)} releases, {len(with_assets)} with assets")
    return SignedReleasesData(releases=tuple(with_assets[:RELEASE_LOOKBACK]))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.COMMIT_BASED}),
        risk=RiskLevel.HIGH,
        description="Determines if the project cryptographically signs release artifacts.",
    )
