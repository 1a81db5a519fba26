"""Shared fixtures: an in-memory repository backend and run helpers."""

import asyncio
from collections import Counter
from collections.abc import Iterable

import httpx
import pytest
import respx

from repotrust.checker.errors import UnsupportedFeatureError
from repotrust.checker.report import run_checks
from repotrust.checks import build_registry
from repotrust.clients.base import BadgeClient, RepoClient, VulnerabilityClient
from repotrust.models.evidence import (
    AccessMode,
    BranchProtectionRule,
    BranchRef,
    CheckRun,
    Commit,
    Issue,
    Platform,
    PullRequestReviewRule,
    Release,
    RepoInfo,
    RepoRef,
    StatusChecksRule,
    TriState,
    User,
)
from repotrust.models.results import CheckResult, Report

T = TriState.TRUE
F = TriState.FALSE
U = TriState.UNKNOWN


class FakeRepoClient(RepoClient):
    """In-memory RepoClient that records how often each capability is called.

    ``errors`` maps a method name to an exception raised on every call;
    ``delay`` makes every call sleep first so concurrent callers overlap.
    """

    def __init__(
        self,
        *,
        access_mode: AccessMode = AccessMode.COMMIT_BASED,
        info: RepoInfo | None = None,
        branches: Iterable[BranchRef] = (),
        default_branch: str = "main",
        releases: Iterable[Release] = (),
        commits: Iterable[Commit] = (),
        check_runs: dict[str, list[CheckRun]] | None = None,
        files: dict[str, str | bytes] | None = None,
        contributors: Iterable[User] = (),
        issues: Iterable[Issue] = (),
        errors: dict[str, Exception] | None = None,
        delay: float = 0.0,
    ) -> None:
        self._repo = RepoRef(platform=Platform.GITHUB, owner="acme", repo="widget")
        self._access_mode = access_mode
        self.info = info or RepoInfo(default_branch=default_branch, head_sha="a" * 40)
        self.branches = {b.name: b for b in branches}
        self.default_branch_name = default_branch
        self.releases = list(releases)
        self.commits = list(commits)
        self.check_runs = check_runs or {}
        self.files = {
            path: content.encode() if isinstance(content, str) else content
            for path, content in (files or {}).items()
        }
        self.contributors = list(contributors)
        self.issues = list(issues)
        self.errors = errors or {}
        self.delay = delay
        self.calls: Counter[str] = Counter()
        self.closed = False

    @property
    def repo(self) -> RepoRef:
        return self._repo

    @property
    def access_mode(self) -> AccessMode:
        return self._access_mode

    async def _enter(self, method: str) -> None:
        self.calls[method] += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if method in self.errors:
            raise self.errors[method]
        if self._access_mode is AccessMode.FILE_BASED and method not in (
            "list_files",
            "get_file_content",
        ):
            raise UnsupportedFeatureError("fake file client", method)

    async def get_repo_info(self) -> RepoInfo:
        await self._enter("get_repo_info")
        return self.info

    async def get_default_branch(self) -> BranchRef:
        await self._enter("get_default_branch")
        return self.branches.get(self.default_branch_name) or BranchRef(
            name=self.default_branch_name, protected=F
        )

    async def get_branch(self, name: str) -> BranchRef | None:
        await self._enter("get_branch")
        return self.branches.get(name)

    async def list_releases(self) -> list[Release]:
        await self._enter("list_releases")
        return self.releases

    async def list_commits(self) -> list[Commit]:
        await self._enter("list_commits")
        return self.commits

    async def list_check_runs_for_ref(self, ref: str) -> list[CheckRun]:
        await self._enter("list_check_runs_for_ref")
        return self.check_runs.get(ref, [])

    async def list_files(self) -> list[str]:
        await self._enter("list_files")
        return sorted(self.files)

    async def get_file_content(self, path: str) -> bytes:
        await self._enter("get_file_content")
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    async def list_contributors(self) -> list[User]:
        await self._enter("list_contributors")
        return self.contributors

    async def list_issues(self) -> list[Issue]:
        await self._enter("list_issues")
        return self.issues

    async def close(self) -> None:
        self.closed = True


class FakeVulnerabilityClient(VulnerabilityClient):
    def __init__(self, vulns: dict[str, list[str]] | None = None) -> None:
        self.vulns = vulns or {}
        self.calls = 0

    async def query_by_commit(self, sha: str) -> list[str]:
        self.calls += 1
        return self.vulns.get(sha, [])


class FakeBadgeClient(BadgeClient):
    def __init__(self, level: str = "not_found") -> None:
        self.level = level

    async def get_badge_level(self, repo_url: str) -> str:
        return self.level


def protected_branch(name: str, **overrides) -> BranchRef:
    """A branch with every protection setting switched on."""
    reviews = PullRequestReviewRule(
        required=T,
        required_approving_review_count=2,
        dismiss_stale_reviews=T,
        require_code_owner_reviews=T,
    )
    status = StatusChecksRule(
        requires_status_checks=T, up_to_date_before_merge=T, contexts=("ci/build",)
    )
    rule = BranchProtectionRule(
        allow_deletions=F,
        allow_force_pushes=F,
        require_linear_history=T,
        enforce_admins=T,
        require_last_push_approval=T,
        pull_request_reviews=reviews,
        status_checks=status,
    )
    return BranchRef(name=name, protected=T, rule=rule.model_copy(update=overrides))


async def run_one(
    client: RepoClient,
    name: str,
    *,
    vuln_client: VulnerabilityClient | None = None,
    badge_client: BadgeClient | None = None,
    **kwargs,
) -> CheckResult:
    """Run a single registered check and return its result."""
    report = await run_report(
        client, [name], vuln_client=vuln_client, badge_client=badge_client, **kwargs
    )
    return report.results[0]


async def run_report(client: RepoClient, names: list[str] | None = None, **kwargs) -> Report:
    report, _ = await run_checks(client, build_registry(), names, **kwargs)
    return report


def detail_texts(result: CheckResult, level: str | None = None) -> list[str]:
    return [
        d.msg.text for d in result.details if level is None or d.type.value == level
    ]


@pytest.fixture
def fake_client() -> FakeRepoClient:
    return FakeRepoClient()


# refUpdateRule of a branch needing one approval and a "ci" status check.
REF_UPDATE_RULE = {
    "allowsDeletions": False,
    "allowsForcePushes": False,
    "requiredApprovingReviewCount": 1,
    "requiresCodeOwnerReviews": False,
    "requiresLinearHistory": True,
    "requiredStatusCheckContexts": ["ci"],
}


def mock_non_admin_branch(
    router: respx.MockRouter,
    name: str,
    ref_update_rule: dict | None,
    prefix: str = "/repos/acme/widget",
) -> respx.Route:
    """Route a protected branch as GitHub shows it to a caller without admin rights.

    Returns the GraphQL route; tests may re-mock it with another response.
    """
    router.get(f"{prefix}/branches/{name}").mock(
        return_value=httpx.Response(
            200,
            json={
                "name": name,
                "protected": True,
                "protection": {
                    "enabled": True,
                    "required_status_checks": {"enforcement_level": "everyone", "contexts": ["ci"]},
                },
            },
        )
    )
    router.get(f"{prefix}/branches/{name}/protection").mock(return_value=httpx.Response(403))
    return router.post("/graphql").mock(
        return_value=httpx.Response(
            200, json={"data": {"repository": {"ref": {"refUpdateRule": ref_update_rule}}}}
        )
    )
