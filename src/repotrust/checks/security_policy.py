"""Security-Policy: a security policy file with usable disclosure information."""

import re

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import security_policy as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import (
    File,
    FileType,
    SecurityPolicyData,
    SecurityPolicyFile,
    SecurityPolicyInformation,
    SecurityPolicyInformationType,
)
from repotrust.models.results import RiskLevel
from repotrust.probes import security_policy as probes

CHECK_NAME = "Security-Policy"

POLICY_FILES = frozenset(
    {
        "security.md",
        ".github/security.md",
        "docs/security.md",
        "security.markdown",
        ".github/security.markdown",
        "docs/security.markdown",
        "security.adoc",
        ".github/security.adoc",
        "docs/security.adoc",
        "security.rst",
        ".github/security.rst",
        "doc/security.rst",
        "docs/security.rst",
    }
)

_URL = re.compile(r"(http|https)://[a-zA-Z0-9./?=_%:-]*")
_EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,6}\b")
_DISCLOSURE = re.compile(r"(\b[0-9]{1,4}\b|disclos|vuln)", re.IGNORECASE)


def is_policy_file(path: str) -> bool:
    return path.lower() in POLICY_FILES


def policy_hits(content: str) -> list[SecurityPolicyInformation]:
    """Links, email addresses and disclosure wording, line by line."""
    hits = []
    for line_number, line in enumerate(content.splitlines(), start=1):
        for kind, pattern in (
            (SecurityPolicyInformationType.LINK, _URL),
            (SecurityPolicyInformationType.EMAIL, _EMAIL),
            (SecurityPolicyInformationType.TEXT, _DISCLOSURE),
        ):
            hits.extend(
                SecurityPolicyInformation(type=kind, match=m.group(0), line_number=line_number)
                for m in pattern.finditer(line)
            )
    return hits


async def collect(req: CheckRequest) -> SecurityPolicyData:
    policy_files = []
    for path in sorted(await req.evidence.files(is_policy_file)):
        content = await req.evidence.file_content(path)
        text = content.decode("utf-8", errors="replace")
        policy_files.append(
            SecurityPolicyFile(
                file=File(path=path, type=FileType.TEXT, size=len(content)),
                information=tuple(policy_hits(text)),
            )
        )
    return SecurityPolicyData(policy_files=tuple(policy_files))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.FILE_BASED, AccessMode.COMMIT_BASED}),
        risk=RiskLevel.MEDIUM,
        description="Determines if the project has published a security policy.",
    )
