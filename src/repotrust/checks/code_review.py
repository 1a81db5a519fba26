"""Code-Review: whether changes to the default branch were reviewed."""

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import code_review as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import Changeset, CodeReviewData
from repotrust.models.results import RiskLevel
from repotrust.probes import code_review as probes

CHECK_NAME = "Code-Review"


async def collect(req: CheckRequest) -> CodeReviewData:
    """Group recent default-branch commits into changesets.

    Commits merged through the same pull request form one changeset; commits
    pushed directly stand alone.
    """
    changesets = []
    seen: set[int] = set()
    for commit in await req.evidence.commits():
        mr = commit.merge_request
        if mr is None:
            changesets.append(Changeset(revision_id=commit.sha, author=commit.committer))
            continue
        if mr.number in seen:
            continue
        seen.add(mr.number)
        changesets.append(Changeset(revision_id=str(mr.number), author=mr.author, reviews=mr.reviews))
    return CodeReviewData(changesets=tuple(changesets))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.COMMIT_BASED}),
        risk=RiskLevel.HIGH,
        description="Determines if the project requires human code review before pull requests are merged.",
    )
