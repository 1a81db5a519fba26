"""Tests for the Vulnerabilities check."""

import pytest

from conftest import FakeRepoClient, FakeVulnerabilityClient, detail_texts, run_one
from repotrust.models.evidence import RepoInfo

HEAD = "a" * 40


class TestVulnerabilities:
    """Tests for the Vulnerabilities check."""

    @pytest.mark.asyncio
    async def test_clean(self):
        osv = FakeVulnerabilityClient()
        result = await run_one(FakeRepoClient(), "Vulnerabilities", vuln_client=osv)

        assert result.score == 10
        assert result.reason == "0 existing vulnerabilities detected"
        assert osv.calls == 1

    @pytest.mark.asyncio
    async def test_point_per_vulnerability(self):
        osv = FakeVulnerabilityClient({HEAD: ["GHSA-aaaa-bbbb-cccc", "PYSEC-2024-1", "OSV-2024-9"]})
        result = await run_one(FakeRepoClient(), "Vulnerabilities", vuln_client=osv)

        assert result.score == 7
        assert result.reason == "3 existing vulnerabilities detected"
        assert detail_texts(result, "Warn") == [
            "Project is vulnerable to: GHSA-aaaa-bbbb-cccc",
            "Project is vulnerable to: PYSEC-2024-1",
            "Project is vulnerable to: OSV-2024-9",
        ]

    @pytest.mark.asyncio
    async def test_floored_at_zero(self):
        osv = FakeVulnerabilityClient({HEAD: [f"OSV-{i}" for i in range(14)]})
        result = await run_one(FakeRepoClient(), "Vulnerabilities", vuln_client=osv)

        assert result.score == 0

    @pytest.mark.asyncio
    async def test_unknown_head_is_inconclusive(self):
        osv = FakeVulnerabilityClient()
        client = FakeRepoClient(info=RepoInfo(head_sha=""))
        result = await run_one(client, "Vulnerabilities", vuln_client=osv)

        assert result.score == -1
        assert result.reason == "unable to determine the commit to query"
        assert osv.calls == 0

    @pytest.mark.asyncio
    async def test_missing_vulnerability_client_is_error(self):
        result = await run_one(FakeRepoClient(), "Vulnerabilities")

        assert result.score == -1
        assert result.error
