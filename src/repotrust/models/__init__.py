"""Data models for repotrust."""

from repotrust.models.evidence import (
    AccessMode,
    BranchProtectionRule,
    BranchRef,
    CheckRun,
    Commit,
    Issue,
    IssueComment,
    MergeRequest,
    Platform,
    PullRequestReviewRule,
    Release,
    ReleaseAsset,
    RepoInfo,
    RepoRef,
    Review,
    StatusChecksRule,
    TriState,
    User,
)
from repotrust.models.raw import File, FileType, RawResults
from repotrust.models.results import (
    CheckDetail,
    CheckResult,
    CheckStatus,
    DetailType,
    Finding,
    Location,
    LogMessage,
    Outcome,
    Report,
    RiskLevel,
    ScoredCheck,
)

__all__ = [
    "AccessMode",
    "BranchProtectionRule",
    "BranchRef",
    "CheckDetail",
    "CheckResult",
    "CheckRun",
    "CheckStatus",
    "Commit",
    "DetailType",
    "File",
    "FileType",
    "Finding",
    "Issue",
    "IssueComment",
    "Location",
    "LogMessage",
    "MergeRequest",
    "Outcome",
    "Platform",
    "PullRequestReviewRule",
    "RawResults",
    "Release",
    "ReleaseAsset",
    "RepoInfo",
    "RepoRef",
    "Report",
    "Review",
    "RiskLevel",
    "ScoredCheck",
    "StatusChecksRule",
    "TriState",
    "User",
]
