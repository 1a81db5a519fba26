"""Probes for recent maintenance activity."""

from datetime import datetime, timedelta

from repotrust.models.evidence import Issue
from repotrust.models.raw import MaintainedData
from repotrust.models.results import Finding, Outcome

ARCHIVED = "archived"
CREATED_RECENTLY = "createdRecently"
HAS_RECENT_COMMITS = "hasRecentCommits"
ISSUE_ACTIVITY_BY_PROJECT_MEMBER = "issueActivityByProjectMember"

NUM_COMMITS_KEY = "commitsWithinThreshold"
NUM_ISSUES_KEY = "issuesUpdatedWithinThreshold"

LOOKBACK_DAYS = 90

MEMBER_ASSOCIATIONS = frozenset({"COLLABORATOR", "MEMBER", "OWNER"})


def _threshold(raw: MaintainedData) -> datetime:
    return raw.now - timedelta(days=LOOKBACK_DAYS)


def archived(raw: MaintainedData) -> list[Finding]:
    if raw.archived:
        return [Finding(probe=ARCHIVED, outcome=Outcome.TRUE, message="repository is archived")]
    return [Finding(probe=ARCHIVED, outcome=Outcome.FALSE, message="repository is not archived")]


def created_recently(raw: MaintainedData) -> list[Finding]:
    if raw.created_at is None:
        return [
            Finding(
                probe=CREATED_RECENTLY,
                outcome=Outcome.NOT_AVAILABLE,
                message="repository creation date unknown",
            )
        ]
    if raw.created_at > _threshold(raw):
        return [
            Finding(
                probe=CREATED_RECENTLY,
                outcome=Outcome.TRUE,
                message=f"repository was created in the last {LOOKBACK_DAYS} days",
            )
        ]
    return [
        Finding(
            probe=CREATED_RECENTLY,
            outcome=Outcome.FALSE,
            message=f"repository was not created in the last {LOOKBACK_DAYS} days",
        )
    ]


def has_recent_commits(raw: MaintainedData) -> list[Finding]:
    threshold = _threshold(raw)
    recent = sum(1 for d in raw.default_branch_commit_dates if d > threshold)
    if recent == 0:
        return [
            Finding(
                probe=HAS_RECENT_COMMITS,
                outcome=Outcome.FALSE,
                message=f"no commits found in the last {LOOKBACK_DAYS} days",
            )
        ]
    return [
        Finding(
            probe=HAS_RECENT_COMMITS,
            outcome=Outcome.TRUE,
            message=f"found {recent} commits in the last {LOOKBACK_DAYS} days",
            values={NUM_COMMITS_KEY: str(recent)},
        )
    ]


def _member_activity(issue: Issue, threshold: datetime) -> bool:
    if issue.author_association in MEMBER_ASSOCIATIONS and issue.created_at > threshold:
        return True
    return any(
        c.author_association in MEMBER_ASSOCIATIONS and c.created_at > threshold
        for c in issue.comments
    )


def issue_activity_by_project_member(raw: MaintainedData) -> list[Finding]:
    """Count issues a collaborator, member or owner opened or commented on recently."""
    threshold = _threshold(raw)
    active = sum(1 for issue in raw.issues if _member_activity(issue, threshold))
    if active == 0:
        return [
            Finding(
                probe=ISSUE_ACTIVITY_BY_PROJECT_MEMBER,
                outcome=Outcome.FALSE,
                message=f"no issue activity by project members in the last {LOOKBACK_DAYS} days",
            )
        ]
    return [
        Finding(
            probe=ISSUE_ACTIVITY_BY_PROJECT_MEMBER,
            outcome=Outcome.TRUE,
            message=f"found {active} issues with activity by project members in the last {LOOKBACK_DAYS} days",
            values={NUM_ISSUES_KEY: str(active)},
        )
    ]


PROBES = (archived, created_recently, has_recent_commits, issue_activity_by_project_member)
