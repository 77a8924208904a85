"""Turn a package or repository URL into a repository snapshot."""

import logging

import httpx

from trustscore.models.schemas import RepositorySnapshot, RepoRef
from trustscore.resolvers.base import UnsupportedSourceError, is_npm_url, parse_repo_url
from trustscore.resolvers.github import GitHubResolver
from trustscore.resolvers.npm import NpmResolver

logger = logging.getLogger(__name__)


class Resolver:
    """Resolves GitHub and npmjs.com URLs to GitHub repository snapshots."""

    def __init__(
        self,
        github_token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            github_token: GitHub personal access token.
            client: Optional httpx client shared by the npm and GitHub lookups.
        """
        self.npm = NpmResolver(client=client)
        self.github = GitHubResolver(token=github_token, client=client)

    async def resolve(self, url: str) -> RepositorySnapshot:
        """Fetch the snapshot of the repository behind a URL.

        Args:
            url: GitHub repository URL or npmjs.com package URL.

        Returns:
            RepositorySnapshot without a clone path.

        Raises:
            UnsupportedSourceError: If the URL does not lead to GitHub.
            ResolutionError: If the metadata cannot be fetched.
        """
        repo_ref = await self._repo_ref(url)
        logger.info(f"Resolved {url.strip()} -> {repo_ref.url}")
        return await self.github.fetch_snapshot(repo_ref)

    async def _repo_ref(self, url: str) -> RepoRef:
        source = url.strip()
        if is_npm_url(source):
            source = await self.npm.repository_url(source)

        repo_ref = parse_repo_url(source)
        if repo_ref is None:
            raise UnsupportedSourceError(url, "not a GitHub repository")
        return repo_ref
