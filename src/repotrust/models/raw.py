"""Raw evidence records assembled by check collectors.

One record type per check. Records are created once per run, never mutated,
and are the only input probes see.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from repotrust.models.evidence import (
    BranchRef,
    CheckRun,
    Issue,
    Release,
    Review,
    User,
)


class FileType(str, Enum):
    """Kind of location a file reference points at."""

    NONE = "none"
    SOURCE = "source"
    BINARY = "binary"
    TEXT = "text"
    URL = "url"


class File(BaseModel):
    """A location inside the repository."""

    model_config = ConfigDict(frozen=True)

    path: str
    type: FileType = FileType.SOURCE
    offset: int = 1
    end_offset: int = 0
    snippet: str = ""
    size: int = 0


class BinaryArtifactData(BaseModel):
    """Binary files in the tree.

    ``gradle_wrapper_validated`` is set when a workflow runs the Gradle
    wrapper validation action, which vouches for gradle-wrapper.jar.
    """

    model_config = ConfigDict(frozen=True)

    files: tuple[File, ...] = ()
    gradle_wrapper_validated: bool = False


class BranchProtectionData(BaseModel):
    """Development and release branches considered for protection."""

    model_config = ConfigDict(frozen=True)

    branches: tuple[BranchRef, ...] = ()
    codeowners_files: tuple[str, ...] = ()


class RevisionCIInfo(BaseModel):
    """CI results recorded against the head of one merged PR."""

    model_config = ConfigDict(frozen=True)

    head_sha: str
    pull_request_number: int
    check_runs: tuple[CheckRun, ...] = ()


class CITestData(BaseModel):
    model_config = ConfigDict(frozen=True)

    ci_info: tuple[RevisionCIInfo, ...] = ()


class BestPracticesData(BaseModel):
    """Badge level exactly as reported by the badge service."""

    model_config = ConfigDict(frozen=True)

    badge: str


class Changeset(BaseModel):
    """A change merged into the default branch."""

    model_config = ConfigDict(frozen=True)

    revision_id: str
    author: User = Field(default_factory=User)
    reviews: tuple[Review, ...] = ()


class CodeReviewData(BaseModel):
    model_config = ConfigDict(frozen=True)

    changesets: tuple[Changeset, ...] = ()


class ContributorsData(BaseModel):
    model_config = ConfigDict(frozen=True)

    users: tuple[User, ...] = ()


class DangerousWorkflowType(str, Enum):
    UNTRUSTED_CHECKOUT = "untrustedCheckout"
    SCRIPT_INJECTION = "scriptInjection"


class DangerousWorkflow(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: DangerousWorkflowType
    file: File
    job: str = ""


class DangerousWorkflowData(BaseModel):
    model_config = ConfigDict(frozen=True)

    workflows: tuple[DangerousWorkflow, ...] = ()
    num_workflows: int = 0


class Tool(BaseModel):
    """A tool detected through a configuration or workflow file."""

    model_config = ConfigDict(frozen=True)

    name: str
    files: tuple[File, ...] = ()


class DependencyUpdateToolData(BaseModel):
    model_config = ConfigDict(frozen=True)

    tools: tuple[Tool, ...] = ()


class LicenseFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: File
    spdx_id: str = ""
    approved: bool = False


class LicenseData(BaseModel):
    model_config = ConfigDict(frozen=True)

    license_files: tuple[LicenseFile, ...] = ()


class MaintainedData(BaseModel):
    model_config = ConfigDict(frozen=True)

    archived: bool = False
    created_at: datetime | None = None
    default_branch_commit_dates: tuple[datetime, ...] = ()
    issues: tuple[Issue, ...] = ()
    now: datetime


class PackagingData(BaseModel):
    """Publishing workflows found, one entry per matched workflow file."""

    model_config = ConfigDict(frozen=True)

    packages: tuple[Tool, ...] = ()
    num_workflows: int = 0


class SASTCommit(BaseModel):
    """A merged PR and whether a SAST tool ran against it."""

    model_config = ConfigDict(frozen=True)

    pull_request_number: int
    head_sha: str
    sast_tools: tuple[str, ...] = ()


class SASTData(BaseModel):
    model_config = ConfigDict(frozen=True)

    commits: tuple[SASTCommit, ...] = ()
    workflows: tuple[Tool, ...] = ()


class SecurityPolicyInformationType(str, Enum):
    EMAIL = "emailAddress"
    LINK = "httpLink"
    TEXT = "vulnDisclosureText"


class SecurityPolicyInformation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: SecurityPolicyInformationType
    match: str
    line_number: int = 1


class SecurityPolicyFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: File
    information: tuple[SecurityPolicyInformation, ...] = ()


class SecurityPolicyData(BaseModel):
    model_config = ConfigDict(frozen=True)

    policy_files: tuple[SecurityPolicyFile, ...] = ()


class SignedReleasesData(BaseModel):
    model_config = ConfigDict(frozen=True)

    releases: tuple[Release, ...] = ()


class VulnerabilitiesData(BaseModel):
    model_config = ConfigDict(frozen=True)

    commit: str = ""
    vulnerability_ids: tuple[str, ...] = ()


class RawResults(BaseModel):
    """Raw evidence records of every check that ran, keyed by check name."""

    records: dict[str, BaseModel] = Field(default_factory=dict)
