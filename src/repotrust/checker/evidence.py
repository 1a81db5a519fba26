"""Memoized, run-scoped access to Evidence Providers.

Evidence is cached by kind (plus argument, e.g. a SHA), not by check, so two
checks asking for the same thing trigger one fetch. Concurrent callers of an
in-flight key wait on the same task. Entries are written once; a failed fetch
stays failed for the rest of the run.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from repotrust.checker.context import RunContext
from repotrust.checker.errors import RepoTrustError
from repotrust.clients.base import BadgeClient, RepoClient, VulnerabilityClient
from repotrust.models.evidence import (
    BranchRef,
    CheckRun,
    Commit,
    Issue,
    Release,
    RepoInfo,
    User,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EvidenceCache:
    """Write-once cache of evidence fetches keyed by evidence kind."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Future[Any]] = {}
        self.fetch_counts: Counter[str] = Counter()

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for ``key``, fetching it on first use.

        Args:
            key: Evidence kind, optionally suffixed with its argument.
            fetch: Zero-argument coroutine factory that produces the value.

        Returns:
            The fetched value. If the fetch raised, the same exception is
            raised to every caller.
        """
        task = self._tasks.get(key)
        if task is None:
            logger.debug(f"Fetching evidence: {key}")
            self.fetch_counts[key] += 1
            task = asyncio.ensure_future(fetch())
            self._tasks[key] = task
        # Shielded so that one cancelled waiter does not cancel the shared fetch.
        return await asyncio.shield(task)

    def __contains__(self, key: str) -> bool:
        return key in self._tasks

    async def aclose(self) -> None:
        """Cancel fetches nobody is waiting on any more."""
        pending = [t for t in self._tasks.values() if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        for task in self._tasks.values():
            # Mark failures as retrieved so they are not reported at shutdown.
            if task.done() and not task.cancelled():
                task.exception()


class EvidenceStore:
    """Facade over the Evidence Providers used by collectors.

    Every call goes through the shared cache and the run context, so fetches
    are deduplicated and abort promptly on cancellation.
    """

    def __init__(
        self,
        client: RepoClient,
        ctx: RunContext,
        cache: EvidenceCache | None = None,
        vuln_client: VulnerabilityClient | None = None,
        badge_client: BadgeClient | None = None,
    ) -> None:
        self.client = client
        self.ctx = ctx
        self.cache = cache or EvidenceCache()
        self.vuln_client = vuln_client
        self.badge_client = badge_client

    async def _get(self, key: str, fetch: Callable[[], Awaitable[T]]) -> T:
        return await self.ctx.guard(self.cache.get_or_fetch(key, fetch))

    async def repo_info(self) -> RepoInfo:
        return await self._get("repo_info", self.client.get_repo_info)

    async def default_branch(self) -> BranchRef:
        return await self._get("default_branch", self.client.get_default_branch)

    async def branch(self, name: str) -> BranchRef | None:
        return await self._get(f"branch:{name}", lambda: self.client.get_branch(name))

    async def releases(self) -> list[Release]:
        return await self._get("releases", self.client.list_releases)

    async def commits(self) -> list[Commit]:
        return await self._get("commits", self.client.list_commits)

    async def check_runs(self, ref: str) -> list[CheckRun]:
        return await self._get(f"check_runs:{ref}", lambda: self.client.list_check_runs_for_ref(ref))

    async def contributors(self) -> list[User]:
        return await self._get("contributors", self.client.list_contributors)

    async def issues(self) -> list[Issue]:
        return await self._get("issues", self.client.list_issues)

    async def files(self, predicate: Callable[[str], bool] | None = None) -> list[str]:
        """List repository files, optionally filtered by ``predicate``.

        The full listing is fetched once per run and filtered locally.
        """
        paths = await self._get("files", self.client.list_files)
        if predicate is None:
            return list(paths)
        return [p for p in paths if predicate(p)]

    async def file_content(self, path: str) -> bytes:
        return await self._get(f"file:{path}", lambda: self.client.get_file_content(path))

    async def file_text(self, path: str) -> str:
        content = await self.file_content(path)
        return content.decode("utf-8", errors="replace")

    async def vulnerabilities(self, sha: str) -> list[str]:
        if self.vuln_client is None:
            raise RepoTrustError("no vulnerability database client configured")
        client = self.vuln_client
        return await self._get(f"vulns:{sha}", lambda: client.query_by_commit(sha))

    async def badge_level(self, repo_url: str) -> str:
        if self.badge_client is None:
            raise RepoTrustError("no best-practices badge client configured")
        client = self.badge_client
        return await self._get(f"badge:{repo_url}", lambda: client.get_badge_level(repo_url))
