"""Abstract Evidence Provider interfaces.

Collectors depend on these capability interfaces only, never on a concrete
backend. Backends raise ``UnsupportedFeatureError`` for capabilities they
cannot provide.
"""

import re
from abc import ABC, abstractmethod

from repotrust.models.evidence import (
    AccessMode,
    BranchRef,
    CheckRun,
    Commit,
    Issue,
    Platform,
    Release,
    RepoInfo,
    RepoRef,
    User,
)


class RepoClient(ABC):
    """Capability set every repository backend implements."""

    @property
    @abstractmethod
    def repo(self) -> RepoRef:
        """Return the repository this client is bound to."""
        ...

    @property
    @abstractmethod
    def access_mode(self) -> AccessMode:
        """Return how much of the repository this client can see."""
        ...

    @abstractmethod
    async def get_repo_info(self) -> RepoInfo:
        """Fetch basic repository metadata (default branch, archived flag...)."""
        ...

    @abstractmethod
    async def get_default_branch(self) -> BranchRef:
        """Fetch the default branch with its protection rule."""
        ...

    @abstractmethod
    async def get_branch(self, name: str) -> BranchRef | None:
        """Fetch a branch by name.

        Args:
            name: Branch name.

        Returns:
            BranchRef, or None if no such branch exists.
        """
        ...

    @abstractmethod
    async def list_releases(self) -> list[Release]:
        """List releases, newest first."""
        ...

    @abstractmethod
    async def list_commits(self) -> list[Commit]:
        """List recent commits on the default branch, newest first.

        Commits that were merged through a pull request carry its metadata
        (reviews, head SHA, merge time) in ``merge_request``.
        """
        ...

    @abstractmethod
    async def list_check_runs_for_ref(self, ref: str) -> list[CheckRun]:
        """List CI check runs reported against a commit SHA."""
        ...

    @abstractmethod
    async def list_files(self) -> list[str]:
        """List every file path in the repository snapshot."""
        ...

    @abstractmethod
    async def get_file_content(self, path: str) -> bytes:
        """Read one file from the repository snapshot.

        Raises:
            FileNotFoundError: If the path does not exist.
        """
        ...

    @abstractmethod
    async def list_contributors(self) -> list[User]:
        """List contributors with their contribution counts and affiliations."""
        ...

    @abstractmethod
    async def list_issues(self) -> list[Issue]:
        """List recently active issues."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None


class VulnerabilityClient(ABC):
    """Client for a vulnerability database."""

    @abstractmethod
    async def query_by_commit(self, sha: str) -> list[str]:
        """Return IDs of known vulnerabilities affecting a commit."""
        ...


class BadgeClient(ABC):
    """Client for a best-practices badge service."""

    @abstractmethod
    async def get_badge_level(self, repo_url: str) -> str:
        """Return the badge level string reported for a repository URL."""
        ...


def parse_repo_url(url: str) -> RepoRef | None:
    """Parse a repository URL into a RepoRef.

    Supports GitHub and GitLab URLs, with or without scheme.

    Args:
        url: Repository URL to parse.

    Returns:
        RepoRef if the URL can be parsed, None otherwise.
    """
    if not url:
        return None

    # https://github.com/owner/repo
    # https://github.com/owner/repo.git
    # git@github.com:owner/repo.git
    # owner/repo is taken as GitHub shorthand
    github_patterns = [
        r"(?:https?://)?(?:www\.)?github\.com/([^/]+)/([^/\s]+?)(?:\.git)?/?$",
        r"git@github\.com:([^/]+)/([^/\s]+?)(?:\.git)?$",
        r"([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+?)(?:\.git)?$",
    ]

    for pattern in github_patterns:
        match = re.match(pattern, url.strip())
        if match:
            return RepoRef(
                platform=Platform.GITHUB,
                owner=match.group(1),
                repo=match.group(2),
            )

    gitlab_patterns = [
        r"(?:https?://)?(?:www\.)?gitlab\.com/([^/]+)/([^/\s]+?)(?:\.git)?/?$",
        r"git@gitlab\.com:([^/]+)/([^/\s]+?)(?:\.git)?$",
    ]

    for pattern in gitlab_patterns:
        match = re.match(pattern, url.strip())
        if match:
            return RepoRef(
                platform=Platform.GITLAB,
                owner=match.group(1),
                repo=match.group(2),
            )

    return None
