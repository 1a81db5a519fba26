"""Probes for static analysis tooling."""

from repotrust.models.raw import SASTData
from repotrust.models.results import Finding, Location, Outcome

SAST_TOOL_RUNS_ON_ALL_COMMITS = "sastToolRunsOnAllCommits"
SAST_TOOL_CODEQL_INSTALLED = "sastToolCodeQLInstalled"
SAST_TOOL_SNYK_INSTALLED = "sastToolSnykInstalled"
SAST_TOOL_PYSA_INSTALLED = "sastToolPysaInstalled"
SAST_TOOL_QODANA_INSTALLED = "sastToolQodanaInstalled"
SAST_TOOL_SONAR_INSTALLED = "sastToolSonarInstalled"

ANALYZED_PRS_KEY = "analyzedPRs"
TOTAL_PRS_KEY = "totalPRs"

CODEQL = "CodeQL"
SNYK = "Snyk"
PYSA = "Pysa"
QODANA = "Qodana"
SONAR = "Sonar"


def sast_tool_runs_on_all_commits(raw: SASTData) -> list[Finding]:
    total = len(raw.commits)
    if total == 0:
        return [
            Finding(
                probe=SAST_TOOL_RUNS_ON_ALL_COMMITS,
                outcome=Outcome.NOT_APPLICABLE,
                message="no pull requests merged into dev branch",
            )
        ]
    analyzed = sum(1 for c in raw.commits if c.sast_tools)
    values = {ANALYZED_PRS_KEY: str(analyzed), TOTAL_PRS_KEY: str(total)}
    if analyzed == total:
        return [
            Finding(
                probe=SAST_TOOL_RUNS_ON_ALL_COMMITS,
                outcome=Outcome.TRUE,
                message="all commits are checked with a SAST tool",
                values=values,
            )
        ]
    return [
        Finding(
            probe=SAST_TOOL_RUNS_ON_ALL_COMMITS,
            outcome=Outcome.FALSE,
            message=f"{analyzed} commits out of {total} are checked with a SAST tool",
            values=values,
        )
    ]


def _tool_installed(probe: str, tool: str, raw: SASTData) -> list[Finding]:
    findings = [
        Finding(
            probe=probe,
            outcome=Outcome.TRUE,
            message=f"SAST tool detected: {tool}",
            location=Location.from_file(t.files[0]) if t.files else None,
        )
        for t in raw.workflows
        if t.name == tool
    ]
    if not findings:
        return [Finding(probe=probe, outcome=Outcome.FALSE, message=f"{tool} tool not detected")]
    return findings


def sast_tool_codeql_installed(raw: SASTData) -> list[Finding]:
    return _tool_installed(SAST_TOOL_CODEQL_INSTALLED, CODEQL, raw)


def sast_tool_snyk_installed(raw: SASTData) -> list[Finding]:
    return _tool_installed(SAST_TOOL_SNYK_INSTALLED, SNYK, raw)


def sast_tool_pysa_installed(raw: SASTData) -> list[Finding]:
    return _tool_installed(SAST_TOOL_PYSA_INSTALLED, PYSA, raw)


def sast_tool_qodana_installed(raw: SASTData) -> list[Finding]:
    return _tool_installed(SAST_TOOL_QODANA_INSTALLED, QODANA, raw)


def sast_tool_sonar_installed(raw: SASTData) -> list[Finding]:
    return _tool_installed(SAST_TOOL_SONAR_INSTALLED, SONAR, raw)


PROBES = (
    sast_tool_runs_on_all_commits,
    sast_tool_codeql_installed,
    sast_tool_snyk_installed,
    sast_tool_pysa_installed,
    sast_tool_qodana_installed,
    sast_tool_sonar_installed,
)
