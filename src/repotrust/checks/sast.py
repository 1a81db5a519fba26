"""SAST: static analysis run on merged changes or configured in workflows."""

import asyncio
import logging
import re

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.checks.ci_tests import merged_pull_requests
from repotrust.checks.fileparser import Workflow, read_workflows
from repotrust.evaluation import sast as evaluation
from repotrust.models.evidence import AccessMode, CheckRun
from repotrust.models.raw import File, FileType, SASTCommit, SASTData, Tool
from repotrust.models.results import RiskLevel
from repotrust.probes import sast as probes

logger = logging.getLogger(__name__)

CHECK_NAME = "SAST"

SAST_APPS = frozenset(
    {
        "github-advanced-security",
        "github-code-scanning",
        "lgtm-com",
        "sonarcloud",
        "sonarqubecloud",
    }
)

SAST_APP_PATTERNS = ("codeql", "sonar", "snyk")

ALLOWED_CONCLUSIONS = frozenset({"success", "neutral"})

SONAR_CONFIG_FILE = "sonar-project.properties"

# Tool name -> pattern matched against the action name of a step (before '@').
WORKFLOW_ACTIONS = {
    probes.CODEQL: re.compile(r"^github/codeql-action/analyze$"),
    probes.SNYK: re.compile(r"^snyk/actions/"),
    probes.PYSA: re.compile(r"^facebook/pysa-action$"),
    probes.QODANA: re.compile(r"^JetBrains/qodana-action$"),
    probes.SONAR: re.compile(r"^SonarSource/"),
}


def is_sast_app(slug: str) -> bool:
    lowered = slug.lower()
    return lowered in SAST_APPS or any(p in lowered for p in SAST_APP_PATTERNS)


def _sast_runs(runs: list[CheckRun]) -> tuple[str, ...]:
    return tuple(
        sorted(
            {
                run.app_slug
                for run in runs
                if run.status == "completed"
                and run.conclusion in ALLOWED_CONCLUSIONS
                and is_sast_app(run.app_slug)
            }
        )
    )


def workflow_tools(workflow: Workflow) -> list[Tool]:
    """SAST tools whose actions the workflow runs, one entry per tool."""
    lines: dict[str, int] = {}
    for job in workflow.jobs:
        for step in job.steps:
            action = step.uses.split("@", 1)[0]
            for tool, pattern in WORKFLOW_ACTIONS.items():
                if action and pattern.search(action) and tool not in lines:
                    lines[tool] = step.line
    return [
        Tool(name=tool, files=(File(path=workflow.path, type=FileType.SOURCE, offset=line),))
        for tool, line in lines.items()
    ]


async def collect(req: CheckRequest) -> SASTData:
    prs = [pr for pr in await merged_pull_requests(req) if pr.head_sha]
    runs = await asyncio.gather(*(req.evidence.check_runs(pr.head_sha) for pr in prs))
    commits = tuple(
        SASTCommit(pull_request_number=pr.number, head_sha=pr.head_sha, sast_tools=_sast_runs(check_runs))
        for pr, check_runs in zip(prs, runs)
    )

    tools = []
    for workflow in await read_workflows(req.evidence):
        tools.extend(workflow_tools(workflow))
    for path in await req.evidence.files(lambda p: p == SONAR_CONFIG_FILE):
        tools.append(Tool(name=probes.SONAR, files=(File(path=path, type=FileType.SOURCE),)))

    logger.debug(f"SAST: {len(commits)} merged PRs, {len(tools)} tool configurations")
    return SASTData(commits=commits, workflows=tuple(tools))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.COMMIT_BASED}),
        risk=RiskLevel.MEDIUM,
        description="Determines if the project uses static code analysis.",
    )
