"""Probes for binary artifacts checked into the source tree."""

from pathlib import PurePosixPath

from repotrust.models.raw import BinaryArtifactData
from repotrust.models.results import Finding, Location, Outcome

HAS_UNVERIFIED_BINARY_ARTIFACTS = "hasUnverifiedBinaryArtifacts"

GRADLE_WRAPPER = "gradle-wrapper.jar"


def has_unverified_binary_artifacts(raw: BinaryArtifactData) -> list[Finding]:
    """One True finding per binary that nothing vouches for."""
    findings = []
    for file in raw.files:
        if raw.gradle_wrapper_validated and PurePosixPath(file.path).name == GRADLE_WRAPPER:
            continue
        findings.append(
            Finding(
                probe=HAS_UNVERIFIED_BINARY_ARTIFACTS,
                outcome=Outcome.TRUE,
                message="binary detected",
                location=Location.from_file(file),
            )
        )
    if not findings:
        return [
            Finding(
                probe=HAS_UNVERIFIED_BINARY_ARTIFACTS,
                outcome=Outcome.FALSE,
                message="repository does not have binary artifacts",
            )
        ]
    return findings


PROBES = (has_unverified_binary_artifacts,)
