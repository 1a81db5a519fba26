"""Probes for dependency update tool configuration files."""

from repotrust.models.raw import DependencyUpdateToolData
from repotrust.models.results import Finding, Location, Outcome

DEPENDENCY_UPDATE_TOOL_CONFIGURED = "dependencyUpdateToolConfigured"

TOOL_KEY = "toolName"


def dependency_update_tool_configured(raw: DependencyUpdateToolData) -> list[Finding]:
    if not raw.tools:
        return [
            Finding(
                probe=DEPENDENCY_UPDATE_TOOL_CONFIGURED,
                outcome=Outcome.FALSE,
                message="no dependency update tool configurations found",
            )
        ]
    return [
        Finding(
            probe=DEPENDENCY_UPDATE_TOOL_CONFIGURED,
            outcome=Outcome.TRUE,
            message=f"detected update tool: {tool.name}",
            values={TOOL_KEY: tool.name},
            location=Location.from_file(tool.files[0]) if tool.files else None,
        )
        for tool in raw.tools
    ]


PROBES = (dependency_update_tool_configured,)
