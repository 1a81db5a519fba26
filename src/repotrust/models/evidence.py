"""Pydantic models for evidence returned by repository clients.

These are plain snapshots: no scoring logic lives here. Settings that may not
be visible to the caller (e.g. branch protection details that need an admin
token) are modelled with ``TriState`` instead of a bare boolean.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TriState(str, Enum):
    """A boolean setting that may not have been observable."""

    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"

    @classmethod
    def from_optional(cls, value: bool | None) -> "TriState":
        """Convert an optional API boolean into a tri-state value."""
        if value is None:
            return cls.UNKNOWN
        return cls.TRUE if value else cls.FALSE

    @property
    def known(self) -> bool:
        return self is not TriState.UNKNOWN


class Platform(str, Enum):
    """Source code hosting platforms."""

    GITHUB = "github"
    GITLAB = "gitlab"
    LOCAL = "local"
    OTHER = "other"


class AccessMode(str, Enum):
    """How much of a repository a client can see.

    Commit-based access has API-level history (commits, PRs, releases);
    file-based access only sees a snapshot of the file tree.
    """

    COMMIT_BASED = "commit"
    FILE_BASED = "file"


class RepoRef(BaseModel):
    """Reference to a source code repository."""

    platform: Platform
    owner: str = ""
    repo: str = ""
    path: str | None = None  # Local checkouts only

    @property
    def url(self) -> str:
        """Get the full repository URL."""
        base_urls = {
            Platform.GITHUB: "https://github.com",
            Platform.GITLAB: "https://gitlab.com",
        }
        if self.platform == Platform.LOCAL:
            return f"file://{self.path}"
        base = base_urls.get(self.platform, "")
        return f"{base}/{self.owner}/{self.repo}"

    @property
    def display_name(self) -> str:
        if self.platform == Platform.LOCAL:
            return self.path or ""
        return f"{self.owner}/{self.repo}"


# --- Branches ---


class PullRequestReviewRule(BaseModel):
    """Pull request review requirements of a protection rule."""

    model_config = ConfigDict(frozen=True)

    required: TriState = TriState.UNKNOWN
    required_approving_review_count: int | None = None
    dismiss_stale_reviews: TriState = TriState.UNKNOWN
    require_code_owner_reviews: TriState = TriState.UNKNOWN


class StatusChecksRule(BaseModel):
    """Status check requirements of a protection rule."""

    model_config = ConfigDict(frozen=True)

    requires_status_checks: TriState = TriState.UNKNOWN
    up_to_date_before_merge: TriState = TriState.UNKNOWN
    contexts: tuple[str, ...] = ()


class BranchProtectionRule(BaseModel):
    """Branch protection settings as far as the caller could observe them."""

    model_config = ConfigDict(frozen=True)

    allow_deletions: TriState = TriState.UNKNOWN
    allow_force_pushes: TriState = TriState.UNKNOWN
    require_linear_history: TriState = TriState.UNKNOWN
    enforce_admins: TriState = TriState.UNKNOWN
    require_last_push_approval: TriState = TriState.UNKNOWN
    pull_request_reviews: PullRequestReviewRule = Field(default_factory=PullRequestReviewRule)
    status_checks: StatusChecksRule = Field(default_factory=StatusChecksRule)


class BranchRef(BaseModel):
    """A branch and its protection rule."""

    model_config = ConfigDict(frozen=True)

    name: str
    protected: TriState = TriState.UNKNOWN
    rule: BranchProtectionRule = Field(default_factory=BranchProtectionRule)


# --- Releases ---


class ReleaseAsset(BaseModel):
    """A file attached to a release."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str = ""


class Release(BaseModel):
    """A published release."""

    model_config = ConfigDict(frozen=True)

    tag_name: str
    target_commitish: str = ""
    url: str = ""
    assets: tuple[ReleaseAsset, ...] = ()


# --- Commits, PRs and CI ---


class User(BaseModel):
    """A repository user or organization."""

    model_config = ConfigDict(frozen=True)

    login: str = ""
    companies: tuple[str, ...] = ()
    organizations: tuple["User", ...] = ()
    num_contributions: int = 0
    is_bot: bool = False


class Review(BaseModel):
    """A review left on a merge request."""

    model_config = ConfigDict(frozen=True)

    state: str  # APPROVED, CHANGES_REQUESTED, COMMENTED, ...
    author: User = Field(default_factory=User)


class MergeRequest(BaseModel):
    """Merge/pull request metadata associated with a commit."""

    model_config = ConfigDict(frozen=True)

    number: int
    head_sha: str = ""
    merged_at: datetime | None = None
    author: User = Field(default_factory=User)
    reviews: tuple[Review, ...] = ()
    labels: tuple[str, ...] = ()


class Commit(BaseModel):
    """A commit on the default branch."""

    model_config = ConfigDict(frozen=True)

    sha: str
    message: str = ""
    committed_at: datetime | None = None
    committer: User = Field(default_factory=User)
    merge_request: MergeRequest | None = None


class CheckRun(BaseModel):
    """A CI check run reported against a ref."""

    model_config = ConfigDict(frozen=True)

    status: str  # queued, in_progress, completed
    conclusion: str | None = None  # success, failure, neutral, ...
    app_slug: str = ""
    url: str = ""


# --- Repository metadata ---


class IssueComment(BaseModel):
    """A comment on an issue."""

    model_config = ConfigDict(frozen=True)

    created_at: datetime
    author_association: str = "NONE"


class Issue(BaseModel):
    """A repository issue."""

    model_config = ConfigDict(frozen=True)

    number: int
    created_at: datetime
    author_association: str = "NONE"
    comments: tuple[IssueComment, ...] = ()


class RepoInfo(BaseModel):
    """Basic repository metadata."""

    model_config = ConfigDict(frozen=True)

    default_branch: str = "main"
    archived: bool = False
    created_at: datetime | None = None
    head_sha: str = ""
