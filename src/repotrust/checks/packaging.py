"""Packaging: workflows that publish the project as a package."""

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.checks.fileparser import (
    JobMatcher,
    StepMatcher,
    first_job_match,
    read_workflows,
)
from repotrust.evaluation import packaging as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import File, FileType, PackagingData, Tool
from repotrust.models.results import RiskLevel
from repotrust.probes import packaging as probes

CHECK_NAME = "Packaging"

PUBLISHING_MATCHERS = [
    JobMatcher(
        "candidate node publishing workflow using npm",
        (
            StepMatcher(uses="actions/setup-node", with_={"registry-url": "https://registry.npmjs.org"}),
            StepMatcher(run="npm.*publish"),
        ),
    ),
    JobMatcher(
        "candidate java publishing workflow using maven",
        (StepMatcher(uses="actions/setup-java"), StepMatcher(run="mvn.*deploy")),
    ),
    JobMatcher(
        "candidate java publishing workflow using gradle",
        (StepMatcher(uses="actions/setup-java"), StepMatcher(run="gradle.*publish")),
    ),
    JobMatcher("candidate ruby publishing workflow using gem", (StepMatcher(run="gem.*push"),)),
    JobMatcher("candidate nuget publishing workflow", (StepMatcher(run="nuget.*push"),)),
    JobMatcher("candidate docker publishing workflow", (StepMatcher(run="docker.*push"),)),
    JobMatcher("candidate docker publishing workflow", (StepMatcher(uses="docker/build-push-action"),)),
    JobMatcher(
        "candidate python publishing workflow using pypi",
        (StepMatcher(uses="pypa/gh-action-pypi-publish"),),
    ),
    JobMatcher(
        "candidate python publishing workflow using python-semantic-release",
        (StepMatcher(uses="relekang/python-semantic-release"),),
    ),
    JobMatcher(
        "candidate golang publishing workflow",
        (StepMatcher(uses="actions/setup-go"), StepMatcher(uses="goreleaser/goreleaser-action")),
    ),
    JobMatcher("candidate rust publishing workflow using cargo", (StepMatcher(run="cargo.*publish"),)),
    JobMatcher("candidate container publishing workflow using ko", (StepMatcher(uses="imjasonh/setup-ko"),)),
    JobMatcher("candidate container publishing workflow using ko", (StepMatcher(uses="ko-build/setup-ko"),)),
]


async def collect(req: CheckRequest) -> PackagingData:
    """Match every workflow against the known publishing job shapes.

    Unparseable workflows are skipped.
    """
    workflows = await read_workflows(req.evidence, strict=False)
    packages = []
    for workflow in workflows:
        match = first_job_match(workflow, PUBLISHING_MATCHERS)
        if match is None:
            continue
        packages.append(
            Tool(
                name=match.matcher.log_text,
                files=(File(path=match.path, type=FileType.SOURCE, offset=match.job.line),),
            )
        )
    return PackagingData(packages=tuple(packages), num_workflows=len(workflows))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.FILE_BASED, AccessMode.COMMIT_BASED}),
        risk=RiskLevel.MEDIUM,
        description="Determines if the project is published as a package.",
    )
