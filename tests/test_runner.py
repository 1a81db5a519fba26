"""Tests for the dispatcher and run-level behaviour."""

import asyncio

import pytest

from conftest import FakeRepoClient
from repotrust.checker import scoring
from repotrust.checker.context import RunContext
from repotrust.checker.errors import CheckCancelledError, RepoUnreachableError, UnhandledCaseError
from repotrust.checker.evidence import EvidenceCache, EvidenceStore
from repotrust.checker.registry import CheckRegistry, Pipeline
from repotrust.checker.report import build_report, run_checks
from repotrust.checker.request import CheckRequest
from repotrust.checker.runner import Dispatcher
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import ContributorsData
from repotrust.models.results import CheckResult, CheckStatus, Finding, Outcome, RiskLevel

BOTH = (AccessMode.COMMIT_BASED, AccessMode.FILE_BASED)


def _count_probe(raw: ContributorsData) -> list[Finding]:
    return [Finding(probe="count", outcome=Outcome.TRUE, values={"n": str(len(raw.users))})]


def _evaluate(name, findings, dl):
    return scoring.create_max_score_result(name, f"saw {findings[0].values['n']}")


def _registry(*checks, modes=BOTH) -> CheckRegistry:
    registry = CheckRegistry()
    for name, collector, *deps in checks:
        registry.register(
            name,
            Pipeline(collector, (_count_probe,), _evaluate),
            modes,
            depends_on=deps[0] if deps else (),
        )
    return registry


async def _contributors(req):
    return ContributorsData(users=tuple(await req.evidence.contributors()))


class TestDispatcher:
    """Tests for Dispatcher runs."""

    @pytest.mark.asyncio
    async def test_shared_evidence_fetched_once(self):
        client = FakeRepoClient(delay=0.01)
        registry = _registry(("A", _contributors), ("B", _contributors), ("C", _contributors))

        report, raw = await run_checks(client, registry)

        assert client.calls["list_contributors"] == 1
        assert [r.score for r in report.results] == [10, 10, 10]
        assert set(raw.records) == {"A", "B", "C"}

    @pytest.mark.asyncio
    async def test_results_sorted_by_name(self):
        async def slow(req):
            await asyncio.sleep(0.05)
            return ContributorsData()

        async def fast(req):
            return ContributorsData()

        registry = _registry(("b-slow", slow), ("a-slow", slow), ("c-fast", fast))
        report, _ = await run_checks(FakeRepoClient(), registry, ["c-fast", "b-slow", "a-slow"])

        assert [r.name for r in report.results] == ["a-slow", "b-slow", "c-fast"]

    @pytest.mark.asyncio
    async def test_failing_check_is_isolated(self):
        async def broken(req):
            raise ValueError("boom")

        registry = _registry(("broken", broken), ("fine", _contributors))
        report, _ = await run_checks(FakeRepoClient(), registry)
        broken_result, fine_result = report.results

        assert broken_result.score == -1
        assert broken_result.error == "boom"
        assert broken_result.status == CheckStatus.FAILED
        assert fine_result.score == 10
        assert fine_result.status == CheckStatus.SUCCEEDED

    @pytest.mark.asyncio
    async def test_evaluator_error_becomes_result(self):
        def evaluate(name, findings, dl):
            raise UnhandledCaseError("thing", 3)

        registry = CheckRegistry()
        registry.register("A", Pipeline(_contributors, (_count_probe,), evaluate), BOTH)
        report, _ = await run_checks(FakeRepoClient(), registry)

        assert report.results[0].score == -1
        assert report.results[0].error == "unhandled thing: 3"

    @pytest.mark.asyncio
    async def test_evidence_error_becomes_result(self):
        client = FakeRepoClient(errors={"list_contributors": RepoUnreachableError("rate limited")})
        report, _ = await run_checks(client, _registry(("A", _contributors), ("B", _contributors)))

        assert [r.score for r in report.results] == [-1, -1]
        assert all(r.error == "rate limited" for r in report.results)
        assert client.calls["list_contributors"] == 1

    @pytest.mark.asyncio
    async def test_unknown_check_name(self):
        report, _ = await run_checks(FakeRepoClient(), _registry(("A", _contributors)), ["A", "Nope"])
        results = {r.name: r for r in report.results}

        assert results["A"].score == 10
        assert results["Nope"].score == -1
        assert results["Nope"].error == "unknown check: Nope"
        assert report.checks[1].risk == RiskLevel.LOW

    @pytest.mark.asyncio
    async def test_unsupported_mode_skipped(self):
        client = FakeRepoClient(access_mode=AccessMode.FILE_BASED)
        registry = _registry(("A", _contributors), modes=(AccessMode.COMMIT_BASED,))

        report, raw = await run_checks(client, registry)
        result = report.results[0]

        assert result.score == -1
        assert result.status == CheckStatus.SKIPPED
        assert "does not support file-based" in result.error
        assert client.calls["list_contributors"] == 0
        assert raw.records == {}

    @pytest.mark.asyncio
    async def test_check_timeout(self):
        async def hang(req):
            await asyncio.sleep(5)
            return ContributorsData()

        registry = _registry(("hang", hang), ("ok", _contributors))
        report, _ = await run_checks(FakeRepoClient(), registry, check_timeout=0.05)
        hang_result, ok_result = report.results

        assert hang_result.score == -1
        assert hang_result.status == CheckStatus.FAILED
        assert "timed out" in hang_result.error
        assert ok_result.score == 10

    @pytest.mark.asyncio
    async def test_run_timeout_cancels_in_flight_fetches(self):
        client = FakeRepoClient(delay=5)
        registry = _registry(("A", _contributors), ("B", _contributors))

        report, _ = await asyncio.wait_for(
            run_checks(client, registry, run_timeout=0.05, check_timeout=None), timeout=2
        )

        for result in report.results:
            assert result.score == -1
            assert result.status == CheckStatus.SKIPPED
            assert "run timed out" in result.error

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self):
        dispatcher = Dispatcher(_registry(("A", _contributors)))
        client = FakeRepoClient()

        ctx = RunContext()
        ctx.cancel("user abort")
        req = CheckRequest(
            repo=client.repo,
            access_mode=client.access_mode,
            ctx=ctx,
            evidence=EvidenceStore(client, ctx),
        )
        results = await dispatcher.run(req, ["A"])

        assert results["A"].status == CheckStatus.SKIPPED
        assert results["A"].error == "user abort"
        assert client.calls["list_contributors"] == 0

    @pytest.mark.asyncio
    async def test_concurrency_bound(self):
        active = 0
        peak = 0

        async def tracked(req):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return ContributorsData()

        registry = _registry(*[(f"c{i}", tracked) for i in range(6)])
        await run_checks(FakeRepoClient(), registry, concurrency=2)

        assert peak == 2

    @pytest.mark.asyncio
    async def test_dependencies_run_first(self):
        order = []

        async def first(req):
            await asyncio.sleep(0.02)
            order.append("first")
            return ContributorsData()

        async def second(req):
            order.append("second")
            return ContributorsData()

        registry = _registry(("a-second", second, ("z-first",)), ("z-first", first))
        await run_checks(FakeRepoClient(), registry, concurrency=4)

        assert order == ["first", "second"]

    @pytest.mark.asyncio
    async def test_status_transitions(self):
        seen = []
        registry = _registry(("A", _contributors))
        await run_checks(
            FakeRepoClient(), registry, on_status=lambda name, status: seen.append(status)
        )

        assert seen == [CheckStatus.PENDING, CheckStatus.RUNNING, CheckStatus.SUCCEEDED]

    @pytest.mark.asyncio
    async def test_duplicate_names_run_once(self):
        client = FakeRepoClient()
        report, _ = await run_checks(client, _registry(("A", _contributors)), ["A", "A"])

        assert len(report.results) == 1

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            Dispatcher(CheckRegistry(), concurrency=0)


class TestEvidenceCache:
    """Tests for EvidenceCache."""

    @pytest.mark.asyncio
    async def test_failure_is_shared(self):
        cache = EvidenceCache()
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            raise RuntimeError("down")

        for _ in range(2):
            with pytest.raises(RuntimeError):
                await cache.get_or_fetch("k", fetch)

        assert calls == 1
        assert cache.fetch_counts["k"] == 1
        assert "k" in cache


class TestRunContext:
    """Tests for RunContext."""

    @pytest.mark.asyncio
    async def test_guard_raises_when_cancelled(self):
        ctx = RunContext()

        async def later():
            await asyncio.sleep(1)

        async def cancel_soon():
            await asyncio.sleep(0.01)
            ctx.cancel("stop")

        asyncio.ensure_future(cancel_soon())
        with pytest.raises(CheckCancelledError):
            await ctx.guard(later())
        assert ctx.cancelled
        assert ctx.reason == "stop"


class TestReport:
    """Tests for report aggregation."""

    @pytest.mark.asyncio
    async def test_overall_score_weights_by_risk(self):
        registry = CheckRegistry()

        async def noop(req):
            return ContributorsData()

        registry.register("high", Pipeline(noop, (), _evaluate), BOTH, risk=RiskLevel.HIGH)
        registry.register("low", Pipeline(noop, (), _evaluate), BOTH, risk=RiskLevel.LOW)
        registry.register("none", Pipeline(noop, (), _evaluate), BOTH, risk=RiskLevel.CRITICAL)
        results = {
            "low": CheckResult(name="low", score=0),
            "high": CheckResult(name="high", score=10),
            "none": CheckResult(name="none", score=-1),
        }
        report = build_report(FakeRepoClient().repo, results, registry)

        assert [c.result.name for c in report.checks] == ["high", "low", "none"]
        # (10 * 7.5 + 0 * 2.5) / 10
        assert report.overall_score == 7.5
        dumped = report.model_dump(mode="json")
        assert dumped["overall_score"] == 7.5
