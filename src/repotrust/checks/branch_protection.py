"""Branch-Protection: protection of the default branch and release branches."""

import logging
import re

from repotrust.checker.errors import InternalError
from repotrust.checker.evidence import EvidenceStore
from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import branch_protection as evaluation
from repotrust.models.evidence import AccessMode, BranchRef
from repotrust.models.raw import BranchProtectionData
from repotrust.models.results import RiskLevel
from repotrust.probes import branch_protection as probes

logger = logging.getLogger(__name__)

CHECK_NAME = "Branch-Protection"

CODEOWNERS_PATHS = ("CODEOWNERS", ".github/CODEOWNERS", "docs/CODEOWNERS")

_COMMIT_SHA = re.compile(r"^[0-9a-fA-F]{40}$")

# Common renames a release may still point at.
BRANCH_REDIRECTS = {"master": "main"}


def is_codeowners_file(path: str) -> bool:
    return path in CODEOWNERS_PATHS


class _BranchSet:
    """Branches in discovery order, unique by name."""

    def __init__(self) -> None:
        self.branches: list[BranchRef] = []
        self._names: set[str] = set()

    def add(self, branch: BranchRef | None) -> bool:
        if branch is None:
            return False
        if branch.name not in self._names:
            self._names.add(branch.name)
            self.branches.append(branch)
        return True

    def __contains__(self, name: str) -> bool:
        return name in self._names


async def _add_release_branch(evidence: EvidenceStore, branches: _BranchSet, target: str) -> None:
    redirect = BRANCH_REDIRECTS.get(target)
    if target in branches or (redirect and redirect in branches):
        return
    if branches.add(await evidence.branch(target)):
        return
    if redirect is None:
        logger.debug(f"Release branch not found: {target}")
        return
    if not branches.add(await evidence.branch(redirect)):
        logger.debug(f"Release branch not found: {target} (nor {redirect})")


async def collect(req: CheckRequest) -> BranchProtectionData:
    """Gather the default branch and every branch a release was cut from.

    Raises:
        InternalError: If a release has no target.
    """
    evidence = req.evidence
    branches = _BranchSet()
    branches.add(await evidence.default_branch())

    for release in await evidence.releases():
        target = release.target_commitish
        if not target:
            raise InternalError(f"release {release.tag_name} has no target commitish")
        # Releases pinned to a commit have no branch to inspect.
        if _COMMIT_SHA.match(target):
            continue
        await _add_release_branch(evidence, branches, target)

    codeowners = sorted(await evidence.files(is_codeowners_file))
    return BranchProtectionData(
        branches=tuple(branches.branches),
        codeowners_files=tuple(codeowners),
    )


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.COMMIT_BASED}),
        risk=RiskLevel.HIGH,
        description="Determines if the default and release branches are protected with GitHub's branch protection settings.",
    )
