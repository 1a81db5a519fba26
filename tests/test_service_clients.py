"""Tests for the OSV and best-practices badge clients."""

import json

import httpx
import pytest
import respx

from repotrust.checker.errors import RepoUnreachableError
from repotrust.clients.cii import BestPracticesClient
from repotrust.clients.osv import OSVClient


class TestOSVClient:
    """Tests for OSVClient."""

    @pytest.mark.asyncio
    async def test_query_by_commit(self):
        with respx.mock(base_url=OSVClient.BASE_URL) as osv:
            route = osv.post("/query").mock(
                return_value=httpx.Response(
                    200,
                    json={"vulns": [{"id": "PYSEC-2"}, {"id": "GHSA-1"}, {"id": "PYSEC-2"}, {}]},
                )
            )

            ids = await OSVClient().query_by_commit("abc123")

        assert ids == ["GHSA-1", "PYSEC-2"]
        assert json.loads(route.calls.last.request.content) == {"commit": "abc123"}

    @pytest.mark.asyncio
    async def test_no_vulns_key(self):
        with respx.mock(base_url=OSVClient.BASE_URL) as osv:
            osv.post("/query").mock(return_value=httpx.Response(200, json={}))

            assert await OSVClient().query_by_commit("abc123") == []

    @pytest.mark.asyncio
    async def test_http_error(self):
        with respx.mock(base_url=OSVClient.BASE_URL) as osv:
            osv.post("/query").mock(return_value=httpx.Response(500))

            with pytest.raises(RepoUnreachableError, match="OSV query failed"):
                await OSVClient().query_by_commit("abc123")

    @pytest.mark.asyncio
    async def test_shared_client_left_open(self):
        with respx.mock(base_url=OSVClient.BASE_URL) as osv:
            osv.post("/query").mock(return_value=httpx.Response(200, json={}))
            async with httpx.AsyncClient() as shared:
                await OSVClient(shared).query_by_commit("abc123")

                assert not shared.is_closed


class TestBestPracticesClient:
    """Tests for BestPracticesClient."""

    @pytest.mark.asyncio
    async def test_badge_level(self):
        with respx.mock(base_url=BestPracticesClient.BASE_URL) as cii:
            route = cii.get("/projects.json").mock(
                return_value=httpx.Response(200, json=[{"id": 1, "badge_level": "silver"}])
            )

            level = await BestPracticesClient().get_badge_level("https://github.com/acme/widget")

        assert level == "silver"
        assert route.calls.last.request.url.params["url"] == "https://github.com/acme/widget"

    @pytest.mark.asyncio
    async def test_not_found(self):
        with respx.mock(base_url=BestPracticesClient.BASE_URL) as cii:
            cii.get("/projects.json").mock(return_value=httpx.Response(200, json=[]))

            assert await BestPracticesClient().get_badge_level("https://github.com/a/b") == "not_found"

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        with respx.mock(base_url=BestPracticesClient.BASE_URL) as cii:
            cii.get("/projects.json").mock(return_value=httpx.Response(200, json={"error": "x"}))

            with pytest.raises(RepoUnreachableError, match="unexpected payload"):
                await BestPracticesClient().get_badge_level("https://github.com/a/b")

    @pytest.mark.asyncio
    async def test_service_down(self):
        with respx.mock(base_url=BestPracticesClient.BASE_URL) as cii:
            cii.get("/projects.json").mock(side_effect=httpx.ConnectError("refused"))

            with pytest.raises(RepoUnreachableError, match="best practices lookup failed"):
                await BestPracticesClient().get_badge_level("https://github.com/a/b")
