"""Dependency-Update-Tool: automated dependency update bots."""

import logging

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import dependency_update_tool as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import DependencyUpdateToolData, File, FileType, Tool
from repotrust.models.results import RiskLevel
from repotrust.probes import dependency_update_tool as probes

logger = logging.getLogger(__name__)

CHECK_NAME = "Dependency-Update-Tool"

DEPENDABOT = "Dependabot"
RENOVATE = "RenovateBot"
PYUP = "PyUp"

# Lowercased config paths and the tool each one configures.
CONFIG_FILES = {
    ".github/dependabot.yml": DEPENDABOT,
    ".github/dependabot.yaml": DEPENDABOT,
    ".github/renovate.json": RENOVATE,
    ".github/renovate.json5": RENOVATE,
    ".gitlab/renovate.json": RENOVATE,
    ".renovaterc": RENOVATE,
    ".renovaterc.json": RENOVATE,
    "renovate.json": RENOVATE,
    "renovate.json5": RENOVATE,
    ".pyup.yml": PYUP,
}

DEPENDABOT_LOGIN = "dependabot[bot]"


def is_config_file(path: str) -> bool:
    return path.lower() in CONFIG_FILES


async def _dependabot_commits(req: CheckRequest) -> bool:
    commits = await req.evidence.commits()
    return any(c.committer.login == DEPENDABOT_LOGIN for c in commits)


async def collect(req: CheckRequest) -> DependencyUpdateToolData:
    """Find update tool config files; fall back to Dependabot's commit history."""
    files_by_tool: dict[str, list[File]] = {}
    for path in sorted(await req.evidence.files(is_config_file)):
        tool = CONFIG_FILES[path.lower()]
        files_by_tool.setdefault(tool, []).append(File(path=path, type=FileType.SOURCE))

    tools = [Tool(name=name, files=tuple(files)) for name, files in files_by_tool.items()]
    if not tools and req.access_mode is AccessMode.COMMIT_BASED and await _dependabot_commits(req):
        logger.debug("No update tool config found, but Dependabot has committed recently")
        tools.append(Tool(name=DEPENDABOT))
    return DependencyUpdateToolData(tools=tuple(tools))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.FILE_BASED, AccessMode.COMMIT_BASED}),
        risk=RiskLevel.HIGH,
        description="Determines if the project uses a dependency update tool.",
    )
