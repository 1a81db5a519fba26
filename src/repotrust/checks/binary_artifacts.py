"""Binary-Artifacts: binaries committed to the repository."""

from pathlib import PurePosixPath

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.checks.fileparser import read_workflows
from repotrust.evaluation import binary_artifacts as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import BinaryArtifactData, File, FileType
from repotrust.models.results import RiskLevel
from repotrust.probes import binary_artifacts as probes

CHECK_NAME = "Binary-Artifacts"

BINARY_EXTENSIONS = {
    ".a", ".bin", ".bundle", ".class", ".crx", ".deb", ".dex", ".dey", ".dll",
    ".drv", ".dylib", ".efi", ".elf", ".exe", ".iso", ".jar", ".lib", ".macho",
    ".msi", ".o", ".ocx", ".par", ".pyc", ".pyo", ".rpm", ".so", ".swf", ".wasm",
    ".war", ".whl",
}

GRADLE_WRAPPER_VALIDATION_ACTIONS = (
    "gradle/wrapper-validation-action",
    "gradle/actions/wrapper-validation",
)


def is_binary_path(path: str) -> bool:
    return PurePosixPath(path).suffix.lower() in BINARY_EXTENSIONS


async def _gradle_wrapper_validated(req: CheckRequest) -> bool:
    for workflow in await read_workflows(req.evidence, strict=False):
        for job in workflow.jobs:
            for step in job.steps:
                if any(step.uses.startswith(f"{a}@") for a in GRADLE_WRAPPER_VALIDATION_ACTIONS):
                    return True
    return False


async def collect(req: CheckRequest) -> BinaryArtifactData:
    paths = sorted(await req.evidence.files(is_binary_path))
    validated = False
    if any(PurePosixPath(p).name == probes.GRADLE_WRAPPER for p in paths):
        validated = await _gradle_wrapper_validated(req)
    return BinaryArtifactData(
        files=tuple(File(path=p, type=FileType.BINARY, offset=0) for p in paths),
        gradle_wrapper_validated=validated,
    )


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.FILE_BASED, AccessMode.COMMIT_BASED}),
        risk=RiskLevel.HIGH,
        description="Determines if the project has generated executable artifacts in the source repository.",
    )
