"""Tests for the Branch-Protection check."""

import pytest
import respx

from conftest import (
    REF_UPDATE_RULE,
    F,
    FakeRepoClient,
    T,
    U,
    detail_texts,
    mock_non_admin_branch,
    protected_branch,
    run_one,
)
from repotrust.checker.detail_logger import DetailLogger
from repotrust.clients.github import GitHubRepoClient
from repotrust.evaluation.branch_protection import TierTotals, evaluate, score_branch
from repotrust.models.evidence import (
    BranchProtectionRule,
    BranchRef,
    Platform,
    PullRequestReviewRule,
    Release,
    RepoRef,
    StatusChecksRule,
)
from repotrust.models.raw import BranchProtectionData
from repotrust.probes import branch_protection as probes

CHECK = "Branch-Protection"
CODEOWNERS = {".github/CODEOWNERS": "* @acme/maintainers"}
REPO = RepoRef(platform=Platform.GITHUB, owner="acme", repo="widget")


def _findings(*branches: BranchRef, codeowners=(".github/CODEOWNERS",)):
    raw = BranchProtectionData(branches=branches, codeowners_files=codeowners)
    findings = []
    for probe in probes.PROBES:
        findings.extend(probe(raw))
    return findings


def _unprotected(name: str) -> BranchRef:
    return BranchRef(name=name, protected=F)


def _all_disabled(name: str) -> BranchRef:
    rule = BranchProtectionRule(
        allow_deletions=T,
        allow_force_pushes=T,
        enforce_admins=F,
        require_last_push_approval=F,
        pull_request_reviews=PullRequestReviewRule(
            required=F,
            required_approving_review_count=0,
            dismiss_stale_reviews=F,
            require_code_owner_reviews=F,
        ),
        status_checks=StatusChecksRule(requires_status_checks=F, up_to_date_before_merge=F),
    )
    return BranchRef(name=name, protected=T, rule=rule)


def _public_only(name: str) -> BranchRef:
    """Non-admin view of a protected branch: admin-only settings unknown."""
    rule = BranchProtectionRule(
        allow_deletions=F,
        allow_force_pushes=F,
        pull_request_reviews=PullRequestReviewRule(
            required_approving_review_count=1,
            require_code_owner_reviews=F,
        ),
        status_checks=StatusChecksRule(requires_status_checks=T, contexts=("ci",)),
    )
    return BranchRef(name=name, protected=T, rule=rule)


class TestBranchProtectionCheck:
    """End-to-end tests through the dispatcher."""

    @pytest.mark.asyncio
    async def test_fully_protected(self):
        client = FakeRepoClient(branches=[protected_branch("main")], files=CODEOWNERS)
        result = await run_one(client, CHECK)

        assert result.score == 10
        assert result.reason == "branch protection is fully enabled on development and all release branches"
        assert detail_texts(result, "Warn") == []

    @pytest.mark.asyncio
    async def test_unprotected_release_branch_wins(self):
        client = FakeRepoClient(
            branches=[protected_branch("main"), _unprotected("release-1.x")],
            releases=[Release(tag_name="v1.0.0", target_commitish="release-1.x")],
            files=CODEOWNERS,
        )
        result = await run_one(client, CHECK)

        assert result.score == 0
        assert result.reason == "branch protection not enabled on development/release branches"
        assert "branch protection not enabled for branch 'release-1.x'" in detail_texts(result, "Warn")

    @pytest.mark.asyncio
    async def test_all_unknown_is_inconclusive(self):
        client = FakeRepoClient(branches=[BranchRef(name="main", protected=U)])
        result = await run_one(client, CHECK)

        assert result.score == -1
        assert result.error is None
        assert detail_texts(result, "Warn") == []
        assert detail_texts(result, "Debug") == ["unable to retrieve branch protection for branch 'main'"]

    @pytest.mark.asyncio
    async def test_unknown_settings_differ_from_disabled_settings(self):
        unknown = await run_one(
            FakeRepoClient(branches=[BranchRef(name="main", protected=T)]), CHECK
        )
        disabled = await run_one(FakeRepoClient(branches=[_all_disabled("main")]), CHECK)

        assert unknown.score == -1
        assert detail_texts(unknown, "Warn") == []
        assert len(detail_texts(unknown, "Debug")) > 0

        assert disabled.score == 0
        assert len(detail_texts(disabled, "Warn")) == 10

    @pytest.mark.asyncio
    async def test_public_view_scores_public_criteria(self):
        client = FakeRepoClient(branches=[_public_only("main")], files=CODEOWNERS)
        result = await run_one(client, CHECK)

        # basic 3 + review 3 + context 2 out of 9 observable tier points
        assert result.score == 8
        assert result.reason == "branch protection is not maximal on development and all release branches"
        assert any("need admin access" in text for text in detail_texts(result, "Debug"))

    @pytest.mark.asyncio
    async def test_master_release_falls_back_to_main(self):
        client = FakeRepoClient(
            default_branch="develop",
            branches=[protected_branch("develop"), protected_branch("main")],
            releases=[Release(tag_name="v2", target_commitish="master")],
            files=CODEOWNERS,
        )
        result = await run_one(client, CHECK)

        branches = {f.values[probes.BRANCH_NAME_KEY] for f in result.findings}
        assert branches == {"develop", "main"}
        assert result.score == 10

    @pytest.mark.asyncio
    async def test_release_pinned_to_commit_is_skipped(self):
        client = FakeRepoClient(
            branches=[protected_branch("main")],
            releases=[Release(tag_name="v1", target_commitish="0123456789abcdef0123456789abcdef01234567")],
            files=CODEOWNERS,
        )
        result = await run_one(client, CHECK)

        assert result.score == 10
        assert client.calls["get_branch"] == 0

    @pytest.mark.asyncio
    async def test_release_without_target_is_error(self):
        client = FakeRepoClient(
            branches=[protected_branch("main")],
            releases=[Release(tag_name="v1", target_commitish="")],
        )
        result = await run_one(client, CHECK)

        assert result.score == -1
        assert "has no target commitish" in result.error

    @pytest.mark.asyncio
    async def test_missing_release_branch_ignored(self):
        client = FakeRepoClient(
            branches=[protected_branch("main")],
            releases=[Release(tag_name="v1", target_commitish="gone")],
            files=CODEOWNERS,
        )
        result = await run_one(client, CHECK)

        assert result.score == 10


class TestBranchScoring:
    """Tests for per-branch tier scoring."""

    def test_codeowners_review_without_file_fails(self):
        findings = _findings(protected_branch("main"), codeowners=())
        dl = DetailLogger()

        # thorough review tier half earned
        assert score_branch("main", findings, dl) == 8

    def test_single_reviewer_misses_thorough_tier(self):
        branch = protected_branch(
            "main",
            pull_request_reviews=PullRequestReviewRule(
                required=T,
                required_approving_review_count=1,
                dismiss_stale_reviews=T,
                require_code_owner_reviews=T,
            ),
        )
        dl = DetailLogger()

        # thorough review tier half earned; the admin tier behind it is gated off
        assert score_branch("main", _findings(branch), dl) == 8
        assert "required approving review count is 1 on branch 'main'" in [
            d.msg.text for d in dl.flush() if d.type.value == "Warn"
        ]

    def test_tier_gating(self):
        # basic tier incomplete: later tiers earn nothing
        branch = protected_branch("main", allow_force_pushes=T)
        assert score_branch("main", _findings(branch), DetailLogger()) == 1

    def test_worst_branch_wins(self):
        findings = _findings(protected_branch("main"), _all_disabled("release"))
        result = evaluate("Branch-Protection", findings, DetailLogger())

        assert result.score == 0

    def test_no_branches_inconclusive(self):
        result = evaluate("Branch-Protection", _findings(), DetailLogger())

        assert result.score == -1
        assert result.reason == "unable to detect any development/release branches"

    def test_deterministic(self):
        findings = _findings(_public_only("main"), protected_branch("release"))
        first = evaluate("Branch-Protection", findings, DetailLogger())
        second = evaluate("Branch-Protection", findings, DetailLogger())

        assert first == second

    def test_empty_totals_inconclusive(self):
        assert TierTotals().score() == -1


class TestNonAdminView:
    """Tests for branches read by the GitHub client without admin rights."""

    @pytest.fixture
    def github_api(self):
        with respx.mock(base_url=GitHubRepoClient.BASE_URL) as mock:
            yield mock

    async def _branch(self, name: str) -> BranchRef:
        client = GitHubRepoClient(REPO, token="t0ken")
        try:
            return await client.get_branch(name)
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_public_settings_score_partially(self, github_api):
        mock_non_admin_branch(github_api, "main", REF_UPDATE_RULE)
        branch = await self._branch("main")

        result = await run_one(FakeRepoClient(branches=[branch], files=CODEOWNERS), CHECK)

        # basic 3 + review 3 + context 2 out of 9 observable tier points
        assert result.score == 8
        assert result.reason == "branch protection is not maximal on development and all release branches"
        assert any("need admin access" in text for text in detail_texts(result, "Debug"))
        assert "codeowner review is not required on branch 'main'" in detail_texts(result, "Warn")

    @pytest.mark.asyncio
    async def test_deletions_allowed_publicly_visible(self, github_api):
        mock_non_admin_branch(github_api, "main", {**REF_UPDATE_RULE, "allowsDeletions": True})
        branch = await self._branch("main")

        result = await run_one(FakeRepoClient(branches=[branch], files=CODEOWNERS), CHECK)

        # basic tier half earned; the rest is gated off
        assert result.score == 1
        assert "branch 'main' allows deletion" in detail_texts(result, "Warn")

    @pytest.mark.asyncio
    async def test_status_checks_alone_are_inconclusive(self, github_api):
        mock_non_admin_branch(github_api, "main", None)
        branch = await self._branch("main")

        result = await run_one(FakeRepoClient(branches=[branch], files=CODEOWNERS), CHECK)

        assert result.score == -1
        assert result.error is None
        assert result.reason == "unable to observe branch protection settings on development/release branches"
        assert "basic protection settings not visible for branch 'main'" in detail_texts(result, "Debug")
        assert detail_texts(result, "Warn") == []
