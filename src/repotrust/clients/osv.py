"""OSV (Open Source Vulnerabilities) client."""

import logging

import httpx

from repotrust.checker.errors import RepoUnreachableError
from repotrust.clients.base import VulnerabilityClient

logger = logging.getLogger(__name__)


class OSVClient(VulnerabilityClient):
    """Queries the OSV database for vulnerabilities affecting a commit.

    OSV is a distributed vulnerability database for open source:
    https://osv.dev/

    No authentication required.
    """

    BASE_URL = "https://api.osv.dev/v1"

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the client.

        Args:
            client: Optional httpx client. If not provided, creates one per request.
        """
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=30.0)

    async def _query(self, body: dict) -> list[dict]:
        """Query OSV API.

        Args:
            body: Request body for OSV query.

        Returns:
            List of vulnerability records.

        Raises:
            RepoUnreachableError: If the query fails.
        """
        client = await self._get_client()
        url = f"{self.BASE_URL}/query"

        try:
            response = await client.post(url, json=body)
            response.raise_for_status()
            data = response.json()
            return data.get("vulns", [])
        except httpx.HTTPError as e:
            raise RepoUnreachableError(f"OSV query failed: {e}") from e
        finally:
            if self._client is None:
                await client.aclose()

    async def query_by_commit(self, sha: str) -> list[str]:
        """Return OSV IDs of vulnerabilities affecting a commit.

        Args:
            sha: Full commit hash.

        Returns:
            Sorted, de-duplicated vulnerability IDs.
        """
        vulns = await self._query({"commit": sha})
        ids = {v["id"] for v in vulns if v.get("id")}
        logger.debug(f"OSV reports {len(ids)} vulnerabilities for {sha}")
        return sorted(ids)
