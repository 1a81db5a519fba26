"""GitHub REST API backend for the RepoClient interface."""

import asyncio
import base64
import logging
import os
from datetime import datetime, timezone

import httpx

from repotrust.checker.errors import RepoUnreachableError
from repotrust.clients.base import RepoClient
from repotrust.models.evidence import (
    AccessMode,
    BranchProtectionRule,
    BranchRef,
    CheckRun,
    Commit,
    Issue,
    IssueComment,
    MergeRequest,
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

logger = logging.getLogger(__name__)

# Number of recent default-branch commits inspected by commit-based checks.
COMMITS_TO_INSPECT = 30
RELEASES_TO_INSPECT = 30
CONTRIBUTORS_TO_INSPECT = 30
ISSUES_TO_INSPECT = 30

# Protection settings GitHub shows to any caller that can read the repository.
REF_UPDATE_RULE_QUERY = """
query($owner: String!, $name: String!, $ref: String!) {
  repository(owner: $owner, name: $name) {
    ref(qualifiedName: $ref) {
      refUpdateRule {
        allowsDeletions
        allowsForcePushes
        requiredApprovingReviewCount
        requiresCodeOwnerReviews
        requiresLinearHistory
        requiredStatusCheckContexts
      }
    }
  }
}
"""


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _enabled(section: dict | None) -> TriState:
    """Map a ``{"enabled": bool}`` protection section to a tri-state."""
    if section is None:
        return TriState.FALSE
    return TriState.from_optional(section.get("enabled"))


def _user(data: dict | None) -> User:
    if not data:
        return User()
    return User(login=data.get("login", ""), is_bot=data.get("type") == "Bot")


class GitHubRepoClient(RepoClient):
    """Reads repository evidence from the GitHub REST API.

    Requires a GitHub personal access token for higher rate limits.
    Set GITHUB_TOKEN environment variable or pass token to constructor.
    Full branch protection details need admin rights; without them the
    publicly visible settings are read through GraphQL and the admin-only
    ones are reported as ``TriState.UNKNOWN``.
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        repo: RepoRef,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            repo: Repository to read.
            token: GitHub personal access token. If not provided, uses GITHUB_TOKEN env var.
            client: Optional httpx client. If not provided, one is created and owned.
        """
        self._repo = repo
        self._token = token or os.environ.get("GITHUB_TOKEN")
        self._client = client
        self._owns_client = client is None
        self._info: RepoInfo | None = None

        # Rate limit tracking
        self.rate_limit_remaining: int = 5000
        self.rate_limit_total: int = 5000
        self.rate_limit_reset: datetime | None = None

    @property
    def repo(self) -> RepoRef:
        return self._repo

    @property
    def access_mode(self) -> AccessMode:
        return AccessMode.COMMIT_BASED

    @property
    def _prefix(self) -> str:
        return f"/repos/{self._repo.owner}/{self._repo.repo}"

    def _headers(self) -> dict[str, str]:
        """Get headers for GitHub API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=30.0, headers=self._headers())
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _update_rate_limits(self, response: httpx.Response) -> None:
        """Extract and store rate limit info from response headers."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        limit = response.headers.get("X-RateLimit-Limit")
        reset = response.headers.get("X-RateLimit-Reset")

        if remaining is not None:
            self.rate_limit_remaining = int(remaining)
        if limit is not None:
            self.rate_limit_total = int(limit)
        if reset is not None:
            self.rate_limit_reset = datetime.fromtimestamp(int(reset), tz=timezone.utc)

    async def _request(self, path: str, params: dict | None = None) -> httpx.Response:
        """GET a path, mapping transport failures and exhausted rate limits."""
        client = self._get_client()
        url = f"{self.BASE_URL}{path}"
        try:
            response = await client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise RepoUnreachableError(f"GET {path}: {e}") from e

        self._check_rate_limit(response)
        return response

    def _check_rate_limit(self, response: httpx.Response) -> None:
        self._update_rate_limits(response)
        if response.status_code in (403, 429) and self.rate_limit_remaining == 0:
            reset = self.rate_limit_reset.isoformat() if self.rate_limit_reset else "unknown"
            raise RepoUnreachableError(f"GitHub rate limit exhausted (resets at {reset})")

    async def _graphql(self, query: str, variables: dict) -> dict | None:
        """Run a GraphQL query.

        Returns None when the token may not use the GraphQL API (GitHub
        refuses anonymous GraphQL calls), raises RepoUnreachableError on
        other errors.
        """
        client = self._get_client()
        try:
            response = await client.post(
                f"{self.BASE_URL}/graphql",
                json={"query": query, "variables": variables},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise RepoUnreachableError(f"POST /graphql: {e}") from e

        self._check_rate_limit(response)
        if response.status_code in (401, 403):
            logger.debug(f"GraphQL query refused with HTTP {response.status_code}")
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RepoUnreachableError(f"POST /graphql: HTTP {response.status_code}") from e

        body = response.json()
        for error in body.get("errors") or ():
            logger.debug(f"GraphQL error: {error.get('message', error)}")
        return body.get("data")

    async def _fetch(
        self,
        path: str,
        params: dict | None = None,
        allow_forbidden: bool = False,
    ) -> dict | list | None:
        """Fetch from GitHub API.

        Returns None if 404 (or 403 when ``allow_forbidden``), raises
        RepoUnreachableError on other errors.
        """
        response = await self._request(path, params)
        if response.status_code == 404:
            return None
        if response.status_code == 403 and allow_forbidden:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RepoUnreachableError(f"GET {path}: HTTP {response.status_code}") from e
        return response.json()

    async def _fetch_all_pages(
        self,
        path: str,
        params: dict | None = None,
        max_pages: int = 10,
        per_page: int = 100,
    ) -> list:
        """Fetch all pages from a paginated endpoint."""
        params = dict(params or {})
        params["per_page"] = per_page

        results = []
        page = 1
        while page <= max_pages:
            params["page"] = page
            data = await self._fetch(path, params)
            if not data:
                break

            results.extend(data)

            # Check if there are more pages
            if len(data) < per_page:
                break
            page += 1

        return results

    # --- Repository metadata ---

    async def get_repo_info(self) -> RepoInfo:
        if self._info is None:
            self._info = await self._fetch_repo_info()
        return self._info

    async def _fetch_repo_info(self) -> RepoInfo:
        data = await self._fetch(self._prefix)
        if data is None:
            raise RepoUnreachableError(f"repository not found: {self._repo.display_name}")

        default_branch = data.get("default_branch", "main")
        head = await self._fetch(f"{self._prefix}/commits/{default_branch}")
        return RepoInfo(
            default_branch=default_branch,
            archived=data.get("archived", False),
            created_at=_parse_time(data.get("created_at")),
            head_sha=(head or {}).get("sha", ""),
        )

    # --- Branches ---

    async def get_default_branch(self) -> BranchRef:
        info = await self.get_repo_info()
        branch = await self.get_branch(info.default_branch)
        if branch is None:
            raise RepoUnreachableError(f"default branch not found: {info.default_branch}")
        return branch

    async def get_branch(self, name: str) -> BranchRef | None:
        data = await self._fetch(f"{self._prefix}/branches/{name}")
        if data is None:
            return None

        if not data.get("protected", False):
            return BranchRef(name=name, protected=TriState.FALSE)

        detail = await self._fetch(f"{self._prefix}/branches/{name}/protection", allow_forbidden=True)
        if detail is None:
            logger.debug(f"Protection details for {name} not visible; using public settings")
            ref_rule = await self._ref_update_rule(name)
            return BranchRef(
                name=name,
                protected=TriState.TRUE,
                rule=self._public_rule(data.get("protection") or {}, ref_rule),
            )
        return BranchRef(name=name, protected=TriState.TRUE, rule=self._admin_rule(detail))

    async def _ref_update_rule(self, name: str) -> dict | None:
        """The non-admin view of the rule protecting a branch, if GitHub returns one."""
        data = await self._graphql(
            REF_UPDATE_RULE_QUERY,
            {"owner": self._repo.owner, "name": self._repo.repo, "ref": f"refs/heads/{name}"},
        )
        ref = ((data or {}).get("repository") or {}).get("ref") or {}
        return ref.get("refUpdateRule")

    def _public_rule(self, protection: dict, ref_rule: dict | None = None) -> BranchProtectionRule:
        """Settings visible to any caller.

        The REST branch summary only carries the status check enforcement;
        the GraphQL ``refUpdateRule`` adds deletions, force pushes, linear
        history, the approver count and code owner reviews.
        """
        checks = protection.get("required_status_checks") or {}
        level = checks.get("enforcement_level")
        if level is None:
            status = StatusChecksRule()
        else:
            status = StatusChecksRule(
                requires_status_checks=TriState.from_optional(level != "off"),
                contexts=tuple(checks.get("contexts") or ()),
            )
        if ref_rule is None:
            return BranchProtectionRule(status_checks=status)

        contexts = tuple(ref_rule.get("requiredStatusCheckContexts") or ())
        if contexts:
            status = StatusChecksRule(requires_status_checks=TriState.TRUE, contexts=contexts)
        return BranchProtectionRule(
            allow_deletions=TriState.from_optional(ref_rule.get("allowsDeletions")),
            allow_force_pushes=TriState.from_optional(ref_rule.get("allowsForcePushes")),
            require_linear_history=TriState.from_optional(ref_rule.get("requiresLinearHistory")),
            pull_request_reviews=PullRequestReviewRule(
                required_approving_review_count=ref_rule.get("requiredApprovingReviewCount"),
                require_code_owner_reviews=TriState.from_optional(ref_rule.get("requiresCodeOwnerReviews")),
            ),
            status_checks=status,
        )

    def _admin_rule(self, detail: dict) -> BranchProtectionRule:
        """Settings from the admin-only protection endpoint."""
        reviews = detail.get("required_pull_request_reviews")
        if reviews is None:
            review_rule = PullRequestReviewRule(
                required=TriState.FALSE,
                required_approving_review_count=0,
                dismiss_stale_reviews=TriState.FALSE,
                require_code_owner_reviews=TriState.FALSE,
            )
            last_push = TriState.FALSE
        else:
            review_rule = PullRequestReviewRule(
                required=TriState.TRUE,
                required_approving_review_count=reviews.get("required_approving_review_count", 0),
                dismiss_stale_reviews=TriState.from_optional(reviews.get("dismiss_stale_reviews")),
                require_code_owner_reviews=TriState.from_optional(
                    reviews.get("require_code_owner_reviews")
                ),
            )
            last_push = TriState.from_optional(reviews.get("require_last_push_approval"))

        checks = detail.get("required_status_checks")
        if checks is None:
            status = StatusChecksRule(
                requires_status_checks=TriState.FALSE,
                up_to_date_before_merge=TriState.FALSE,
            )
        else:
            status = StatusChecksRule(
                requires_status_checks=TriState.TRUE,
                up_to_date_before_merge=TriState.from_optional(checks.get("strict")),
                contexts=tuple(checks.get("contexts") or ()),
            )

        return BranchProtectionRule(
            allow_deletions=_enabled(detail.get("allow_deletions")),
            allow_force_pushes=_enabled(detail.get("allow_force_pushes")),
            require_linear_history=_enabled(detail.get("required_linear_history")),
            enforce_admins=_enabled(detail.get("enforce_admins")),
            require_last_push_approval=last_push,
            pull_request_reviews=review_rule,
            status_checks=status,
        )

    # --- Releases ---

    async def list_releases(self) -> list[Release]:
        data = await self._fetch_all_pages(
            f"{self._prefix}/releases", max_pages=1, per_page=RELEASES_TO_INSPECT
        )
        return [
            Release(
                tag_name=r.get("tag_name", ""),
                target_commitish=r.get("target_commitish", ""),
                url=r.get("html_url", ""),
                assets=tuple(
                    ReleaseAsset(name=a.get("name", ""), url=a.get("browser_download_url", ""))
                    for a in r.get("assets", [])
                ),
            )
            for r in data
        ]

    # --- Commits and pull requests ---

    async def list_commits(self) -> list[Commit]:
        info = await self.get_repo_info()
        data = await self._fetch_all_pages(
            f"{self._prefix}/commits",
            params={"sha": info.default_branch},
            max_pages=1,
            per_page=COMMITS_TO_INSPECT,
        )
        return list(await asyncio.gather(*(self._to_commit(c) for c in data)))

    async def _to_commit(self, data: dict) -> Commit:
        sha = data.get("sha", "")
        commit = data.get("commit", {})
        committed_at = _parse_time((commit.get("committer") or {}).get("date"))
        return Commit(
            sha=sha,
            message=commit.get("message", ""),
            committed_at=committed_at,
            committer=_user(data.get("committer")),
            merge_request=await self._merge_request_for(sha),
        )

    async def _merge_request_for(self, sha: str) -> MergeRequest | None:
        pulls = await self._fetch(f"{self._prefix}/commits/{sha}/pulls")
        merged = [p for p in pulls or [] if p.get("merged_at")]
        if not merged:
            return None
        pr = merged[0]
        reviews = await self._fetch(f"{self._prefix}/pulls/{pr['number']}/reviews") or []
        return MergeRequest(
            number=pr["number"],
            head_sha=(pr.get("head") or {}).get("sha", ""),
            merged_at=_parse_time(pr.get("merged_at")),
            author=_user(pr.get("user")),
            reviews=tuple(
                Review(state=r.get("state", ""), author=_user(r.get("user"))) for r in reviews
            ),
            labels=tuple(label.get("name", "") for label in pr.get("labels", [])),
        )

    async def list_check_runs_for_ref(self, ref: str) -> list[CheckRun]:
        data = await self._fetch(f"{self._prefix}/commits/{ref}/check-runs", {"per_page": 100})
        return [
            CheckRun(
                status=run.get("status", ""),
                conclusion=run.get("conclusion"),
                app_slug=(run.get("app") or {}).get("slug", ""),
                url=run.get("html_url", ""),
            )
            for run in (data or {}).get("check_runs", [])
        ]

    # --- Files ---

    async def list_files(self) -> list[str]:
        info = await self.get_repo_info()
        data = await self._fetch(
            f"{self._prefix}/git/trees/{info.default_branch}", {"recursive": "1"}
        )
        if data is None:
            return []
        if data.get("truncated"):
            logger.warning(f"File tree of {self._repo.display_name} truncated by the API")
        return [item["path"] for item in data.get("tree", []) if item.get("type") == "blob"]

    async def get_file_content(self, path: str) -> bytes:
        data = await self._fetch(f"{self._prefix}/contents/{path}")
        if not data or not isinstance(data, dict):
            raise FileNotFoundError(path)
        # Content is base64 encoded
        return base64.b64decode(data.get("content", ""))

    # --- Contributors ---

    async def list_contributors(self) -> list[User]:
        data = await self._fetch_all_pages(
            f"{self._prefix}/contributors", max_pages=1, per_page=CONTRIBUTORS_TO_INSPECT
        )
        users = [c for c in data if c.get("type") != "Bot"]
        return list(await asyncio.gather(*(self._to_contributor(c) for c in users)))

    async def _to_contributor(self, data: dict) -> User:
        login = data.get("login", "")
        profile = await self._fetch(f"/users/{login}") or {}
        orgs = await self._fetch(f"/users/{login}/orgs") or []
        company = (profile.get("company") or "").strip()
        return User(
            login=login,
            companies=(company,) if company else (),
            organizations=tuple(User(login=o.get("login", "")) for o in orgs),
            num_contributions=data.get("contributions", 0),
        )

    # --- Issues ---

    async def list_issues(self) -> list[Issue]:
        data = await self._fetch_all_pages(
            f"{self._prefix}/issues",
            params={"state": "all", "sort": "updated", "direction": "desc"},
            max_pages=1,
            per_page=ISSUES_TO_INSPECT,
        )
        issues = [i for i in data if "pull_request" not in i]
        return list(await asyncio.gather(*(self._to_issue(i) for i in issues)))

    async def _to_issue(self, data: dict) -> Issue:
        comments = []
        if data.get("comments", 0):
            raw = await self._fetch(f"{self._prefix}/issues/{data['number']}/comments") or []
            comments = [
                IssueComment(
                    created_at=_parse_time(c["created_at"]),
                    author_association=c.get("author_association", "NONE"),
                )
                for c in raw
                if c.get("created_at")
            ]
        return Issue(
            number=data["number"],
            created_at=_parse_time(data["created_at"]),
            author_association=data.get("author_association", "NONE"),
            comments=tuple(comments),
        )
