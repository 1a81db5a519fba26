"""Dangerous-Workflow: GitHub Actions patterns that let attackers run code.

Two patterns are detected: checking out pull request code from a privileged
trigger (``pull_request_target``/``workflow_run``), and interpolating
attacker-controlled event fields into inline scripts.
"""

import logging
import re

from repotrust.checker.errors import InvalidWorkflowError
from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.checks.fileparser import Job, Workflow, read_workflows
from repotrust.evaluation import dangerous_workflow as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import (
    DangerousWorkflow,
    DangerousWorkflowData,
    DangerousWorkflowType,
    File,
    FileType,
)
from repotrust.models.results import RiskLevel
from repotrust.probes import dangerous_workflow as probes

logger = logging.getLogger(__name__)

CHECK_NAME = "Dangerous-Workflow"

PRIVILEGED_TRIGGERS = frozenset({"pull_request_target", "workflow_run"})

UNTRUSTED_CHECKOUT_REFS = ("github.event.pull_request", "github.event.workflow_run")

CHECKOUT_ACTION = "actions/checkout"
GITHUB_SCRIPT_ACTION = "actions/github-script"

# Event fields an outside contributor controls.
_UNTRUSTED_CONTEXT = re.compile(
    r"issue\.title|"
    r"issue\.body|"
    r"pull_request\.title|"
    r"pull_request\.body|"
    r"comment\.body|"
    r"review\.body|"
    r"review_comment\.body|"
    r"pages.*\.page_name|"
    r"commits.*\.message|"
    r"head_commit\.message|"
    r"head_commit\.author\.email|"
    r"head_commit\.author\.name|"
    r"commits.*\.author\.email|"
    r"commits.*\.author\.name|"
    r"pull_request\.head\.ref|"
    r"pull_request\.head\.label|"
    r"pull_request\.head\.repo\.default_branch"
)


def is_untrusted_context(expression: str) -> bool:
    if "github.head_ref" in expression:
        return True
    return "github.event." in expression and bool(_UNTRUSTED_CONTEXT.search(expression))


def script_expressions(path: str, script: str) -> list[str]:
    """Return the bodies of every ``${{ ... }}`` expression in ``script``.

    Raises:
        InvalidWorkflowError: If an expression is never closed.
    """
    expressions = []
    rest = script
    while True:
        start = rest.find("${{")
        if start == -1:
            return expressions
        end = rest.find("}}", start)
        if end == -1:
            raise InvalidWorkflowError(path, "unterminated expression in script")
        expressions.append(rest[start + 3 : end].strip())
        rest = rest[end:]


def _job_label(job: Job) -> str:
    return job.name or job.id


def untrusted_checkouts(workflow: Workflow) -> list[DangerousWorkflow]:
    if not workflow.triggers & PRIVILEGED_TRIGGERS:
        return []
    found = []
    for job in workflow.jobs:
        for step in job.steps:
            if CHECKOUT_ACTION not in step.uses:
                continue
            ref = step.with_.get("ref", "")
            if any(untrusted in ref for untrusted in UNTRUSTED_CHECKOUT_REFS):
                found.append(
                    DangerousWorkflow(
                        type=DangerousWorkflowType.UNTRUSTED_CHECKOUT,
                        file=File(path=workflow.path, type=FileType.SOURCE, offset=step.line, snippet=ref),
                        job=_job_label(job),
                    )
                )
    return found


def script_injections(workflow: Workflow) -> list[DangerousWorkflow]:
    found = []
    for job in workflow.jobs:
        for step in job.steps:
            scripts = []
            if step.run:
                scripts.append((step.run, step.run_line or step.line))
            if step.uses.startswith(f"{GITHUB_SCRIPT_ACTION}@") and step.with_.get("script"):
                scripts.append((step.with_["script"], step.line))
            for script, line in scripts:
                for expression in script_expressions(workflow.path, script):
                    if not is_untrusted_context(expression):
                        continue
                    found.append(
                        DangerousWorkflow(
                            type=DangerousWorkflowType.SCRIPT_INJECTION,
                            file=File(
                                path=workflow.path,
                                type=FileType.SOURCE,
                                offset=line,
                                snippet=expression,
                            ),
                            job=_job_label(job),
                        )
                    )
    return found


async def collect(req: CheckRequest) -> DangerousWorkflowData:
    workflows = await read_workflows(req.evidence)
    dangerous = []
    for workflow in workflows:
        dangerous.extend(untrusted_checkouts(workflow))
        dangerous.extend(script_injections(workflow))
    logger.debug(f"Scanned {len(workflows)} workflows, {len(dangerous)} dangerous patterns")
    return DangerousWorkflowData(workflows=tuple(dangerous), num_workflows=len(workflows))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.FILE_BASED, AccessMode.COMMIT_BASED}),
        risk=RiskLevel.CRITICAL,
        description="Determines if the project's GitHub Action workflows avoid dangerous patterns.",
    )
