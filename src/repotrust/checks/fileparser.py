"""GitHub Actions workflow parsing and job matching.

Workflows are parsed with PyYAML's composer so every job and step keeps the
line it was declared on; those lines end up in remediation hints.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from repotrust.checker.errors import InvalidWorkflowError
from repotrust.checker.evidence import EvidenceStore

logger = logging.getLogger(__name__)

WORKFLOW_DIR = ".github/workflows"

_LINE_CONTINUATION = re.compile(r"\\(\r\n|\n|\r)")


@dataclass(frozen=True)
class Step:
    """A single workflow step."""

    line: int
    name: str = ""
    id: str = ""
    uses: str = ""
    with_: dict[str, str] = field(default_factory=dict)
    run: str = ""
    run_line: int = 0


@dataclass(frozen=True)
class Job:
    """A workflow job, or a call to a reusable workflow when ``uses`` is set."""

    id: str
    line: int
    name: str = ""
    uses: str = ""
    steps: tuple[Step, ...] = ()


@dataclass(frozen=True)
class Workflow:
    path: str
    triggers: frozenset[str]
    jobs: tuple[Job, ...]


def is_workflow_file(path: str) -> bool:
    """Whether ``path`` is a GitHub Actions workflow definition."""
    p = PurePosixPath(path)
    return str(p.parent) == WORKFLOW_DIR and p.suffix in (".yml", ".yaml")


def is_github_owned_action(uses: str) -> bool:
    return uses.startswith("actions/") or uses.startswith("github/")


# --- Node helpers ---


def _line(node: Node) -> int:
    return node.start_mark.line + 1


def _mapping(node: Node | None) -> dict[str, tuple[Node, Node]]:
    """Map scalar keys to their (key node, value node) pairs."""
    if not isinstance(node, MappingNode):
        return {}
    return {
        key.value: (key, value)
        for key, value in node.value
        if isinstance(key, ScalarNode)
    }


def _scalar(node: Node | None) -> str:
    if isinstance(node, ScalarNode):
        return str(node.value)
    return ""


def _value(entries: dict[str, tuple[Node, Node]], key: str) -> Node | None:
    entry = entries.get(key)
    return entry[1] if entry else None


def _triggers(node: Node | None) -> frozenset[str]:
    if isinstance(node, ScalarNode):
        return frozenset({node.value})
    if isinstance(node, SequenceNode):
        return frozenset(_scalar(item) for item in node.value if _scalar(item))
    return frozenset(_mapping(node))


def _step(node: Node) -> Step:
    entries = _mapping(node)
    with_node = _value(entries, "with")
    run_node = _value(entries, "run")
    return Step(
        line=_line(node),
        name=_scalar(_value(entries, "name")),
        id=_scalar(_value(entries, "id")),
        uses=_scalar(_value(entries, "uses")),
        with_={key: _scalar(value) for key, (_, value) in _mapping(with_node).items()},
        run=_scalar(run_node),
        run_line=_line(run_node) if run_node is not None else 0,
    )


def _job(job_id: str, key: Node, node: Node) -> Job:
    entries = _mapping(node)
    steps_node = _value(entries, "steps")
    steps = ()
    if isinstance(steps_node, SequenceNode):
        steps = tuple(_step(s) for s in steps_node.value if isinstance(s, MappingNode))
    return Job(
        id=job_id,
        line=_line(key),
        name=_scalar(_value(entries, "name")),
        uses=_scalar(_value(entries, "uses")),
        steps=steps,
    )


def parse_workflow(path: str, content: str) -> Workflow:
    """Parse a workflow file into its triggers and job/step graph.

    Args:
        path: Repository path of the file, used in errors and locations.
        content: File content.

    Raises:
        InvalidWorkflowError: If the file is not valid YAML or has no
            mapping at its root.
    """
    try:
        root = yaml.compose(content, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise InvalidWorkflowError(path, str(e).splitlines()[0]) from e

    if not isinstance(root, MappingNode):
        raise InvalidWorkflowError(path, "top level is not a mapping")

    entries = _mapping(root)
    # YAML 1.1 reads a bare `on` as boolean true; composed nodes keep the raw text.
    triggers = _triggers(_value(entries, "on"))
    jobs_node = _value(entries, "jobs")
    if jobs_node is not None and not isinstance(jobs_node, MappingNode):
        raise InvalidWorkflowError(path, "jobs is not a mapping")

    jobs = tuple(
        _job(job_id, key, value) for job_id, (key, value) in _mapping(jobs_node).items()
    )
    return Workflow(path=path, triggers=triggers, jobs=jobs)


# --- Job matching ---


@dataclass(frozen=True)
class StepMatcher:
    """Signature a workflow step must have.

    ``uses`` matches the action name before ``@``; every ``with_`` entry
    must be present with exactly that value; ``run`` is a regex searched in
    the script with line continuations removed.
    """

    uses: str = ""
    with_: dict[str, str] = field(default_factory=dict)
    run: str = ""

    def matches(self, step: Step) -> bool:
        if self.uses and not step.uses.startswith(f"{self.uses}@"):
            return False
        for key, expected in self.with_.items():
            if step.with_.get(key) != expected:
                return False
        if self.run:
            if not step.run:
                return False
            script = _LINE_CONTINUATION.sub("", step.run)
            if not re.search(self.run, script):
                return False
        return True


@dataclass(frozen=True)
class JobMatcher:
    """An ordered list of step signatures that must all appear in one job."""

    log_text: str
    steps: tuple[StepMatcher, ...]

    def matches(self, job: Job) -> bool:
        for step_matcher in self.steps:
            # A reusable workflow call matches on its own.
            if step_matcher.uses and job.uses.startswith(f"{step_matcher.uses}@"):
                return True
            if not any(step_matcher.matches(step) for step in job.steps):
                return False
        return True


@dataclass(frozen=True)
class JobMatch:
    matcher: JobMatcher
    job: Job
    path: str

    @property
    def message(self) -> str:
        return f"{self.matcher.log_text}: {self.path}"


def first_job_match(workflow: Workflow, matchers: list[JobMatcher]) -> JobMatch | None:
    """Return the first (job, matcher) pair that matches, in declaration order."""
    for job in workflow.jobs:
        for matcher in matchers:
            if matcher.matches(job):
                return JobMatch(matcher=matcher, job=job, path=workflow.path)
    return None


def contains_commands(content: str, comment: str = "#") -> bool:
    """Whether ``content`` has any line that is neither blank nor a comment."""
    for line in content.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(comment):
            return True
    return False


async def read_workflows(evidence: EvidenceStore, strict: bool = True) -> list[Workflow]:
    """Parse every workflow file in the repository, in path order.

    Files holding only comments or blank lines are skipped.

    Args:
        evidence: Evidence store to read files from.
        strict: Raise on the first unparseable workflow. When False such
            files are logged and skipped.

    Raises:
        InvalidWorkflowError: If ``strict`` and a workflow cannot be parsed.
    """
    workflows = []
    for path in sorted(await evidence.files(is_workflow_file)):
        content = await evidence.file_text(path)
        if not contains_commands(content):
            continue
        try:
            workflows.append(parse_workflow(path, content))
        except InvalidWorkflowError as e:
            if strict:
                raise
            logger.debug(f"Skipping unparseable workflow: {e}")
    return workflows
