"""Evidence Providers: repository backends and external databases."""

from repotrust.clients.base import BadgeClient, RepoClient, VulnerabilityClient, parse_repo_url
from repotrust.clients.cii import BestPracticesClient
from repotrust.clients.github import GitHubRepoClient
from repotrust.clients.localdir import LocalDirClient
from repotrust.clients.osv import OSVClient

__all__ = [
    "BadgeClient",
    "BestPracticesClient",
    "GitHubRepoClient",
    "LocalDirClient",
    "OSVClient",
    "RepoClient",
    "VulnerabilityClient",
    "parse_repo_url",
]
