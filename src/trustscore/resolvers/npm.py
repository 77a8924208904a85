"""Resolve npm package pages to their source repositories."""

import logging
from urllib.parse import quote, urlparse

import httpx

from trustscore.resolvers.base import ResolutionError, UnsupportedSourceError

logger = logging.getLogger(__name__)


def package_name_from_url(url: str) -> str:
    """Extract the package name from an npmjs.com URL.

    Supports ``https://www.npmjs.com/package/<name>`` and scoped
    ``https://www.npmjs.com/package/@scope/<name>``; a trailing version
    path (``/v/1.2.3``) is ignored.

    Raises:
        UnsupportedSourceError: If the URL has no package path.
    """
    parts = [part for part in urlparse(url.strip()).path.split("/") if part]
    if len(parts) < 2 or parts[0] != "package":
        raise UnsupportedSourceError(url, "not an npm package URL")
    if parts[1].startswith("@") and len(parts) >= 3:
        return f"{parts[1]}/{parts[2]}"
    return parts[1]


class NpmResolver:
    """Looks up the repository URL of an npm package.

    Data source: https://registry.npmjs.org/{package}
    """

    REGISTRY_URL = "https://registry.npmjs.org"

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the resolver.

        Args:
            client: Optional httpx client for making requests.
        """
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=30.0)

    async def _fetch_json(self, url: str) -> dict | None:
        """Fetch JSON from a URL. Returns None if 404."""
        client = await self._get_client()
        try:
            response = await client.get(url)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        finally:
            if self._client is None:
                await client.aclose()

    async def repository_url(self, url: str) -> str:
        """Find the source repository URL of an npm package.

        Args:
            url: npmjs.com package page URL.

        Returns:
            Repository URL as declared in the package metadata.

        Raises:
            UnsupportedSourceError: If the package declares no repository.
            ResolutionError: If the package does not exist or the registry fails.
        """
        name = package_name_from_url(url)
        try:
            data = await self._fetch_json(f"{self.REGISTRY_URL}/{quote(name, safe='@')}")
        except httpx.HTTPError as e:
            raise ResolutionError(url, f"npm registry request failed: {e}") from e

        if data is None:
            raise ResolutionError(url, f"npm package '{name}' not found")

        repository = data.get("repository")
        if isinstance(repository, dict):
            repository = repository.get("url")
        if not repository:
            raise UnsupportedSourceError(url, f"npm package '{name}' declares no repository")

        logger.debug(f"npm package {name} -> {repository}")
        return repository
