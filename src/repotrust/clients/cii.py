"""OpenSSF Best Practices badge client."""

import httpx

from repotrust.checker.errors import RepoUnreachableError
from repotrust.clients.base import BadgeClient

NOT_FOUND = "not_found"


class BestPracticesClient(BadgeClient):
    """Looks up a project's OpenSSF Best Practices badge level by repo URL."""

    BASE_URL = "https://www.bestpractices.dev"

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=30.0)

    async def get_badge_level(self, repo_url: str) -> str:
        """Return the badge level, or ``"not_found"`` if no project matches.

        Raises:
            RepoUnreachableError: If the service cannot be queried or returns
                something that is not a project list.
        """
        client = await self._get_client()
        url = f"{self.BASE_URL}/projects.json"
        try:
            response = await client.get(url, params={"url": repo_url})
            response.raise_for_status()
            projects = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RepoUnreachableError(f"best practices lookup failed: {e}") from e
        finally:
            if self._client is None:
                await client.aclose()

        if not isinstance(projects, list):
            raise RepoUnreachableError("best practices lookup returned an unexpected payload")
        if not projects:
            return NOT_FOUND
        return str(projects[0].get("badge_level", ""))
