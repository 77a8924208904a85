"""GitHub data fetcher producing repository snapshots."""

import logging
import os
from datetime import datetime, timezone

import httpx

from trustscore.models.schemas import (
    Commit,
    Contributor,
    Issue,
    PullRequest,
    RepositorySnapshot,
    RepoRef,
)
from trustscore.resolvers.base import ResolutionError

logger = logging.getLogger(__name__)


class GitHubResolver:
    """Fetches repository data from GitHub API.

    Requires a GitHub personal access token for higher rate limits.
    Set GITHUB_TOKEN environment variable or pass token to constructor.
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        max_pages: int = 3,
        max_pr_details: int = 30,
    ) -> None:
        """Initialize the resolver.

        Args:
            token: GitHub personal access token. If not provided, uses GITHUB_TOKEN env var.
            client: Optional httpx client. If not provided, a new client is created.
            max_pages: Pages of 100 items fetched per collection.
            max_pr_details: Merged pull requests whose size and reviews are fetched.
        """
        self._token = token or os.environ.get("GITHUB_TOKEN")
        self._client = client
        self.max_pages = max_pages
        self.max_pr_details = max_pr_details

        # Rate limit tracking
        self.rate_limit_remaining: int = 5000
        self.rate_limit_reset: datetime | None = None

    def _headers(self) -> dict[str, str]:
        """Get headers for GitHub API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=30.0, headers=self._headers())

    def _update_rate_limits(self, response: httpx.Response) -> None:
        """Extract and store rate limit info from response headers."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset = response.headers.get("X-RateLimit-Reset")

        if remaining is not None:
            self.rate_limit_remaining = int(remaining)
        if reset is not None:
            self.rate_limit_reset = datetime.fromtimestamp(int(reset), tz=timezone.utc)

    async def _fetch(self, path: str, params: dict | None = None) -> dict | list | None:
        """Fetch from GitHub API.

        Returns None if 404, raises on other errors.
        """
        client = await self._get_client()
        url = f"{self.BASE_URL}{path}"

        try:
            response = await client.get(url, params=params, headers=self._headers())
            self._update_rate_limits(response)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        finally:
            if self._client is None:
                await client.aclose()

    async def _fetch_all_pages(self, path: str, params: dict | None = None) -> list:
        """Fetch all pages from a paginated endpoint, up to ``max_pages``."""
        client = await self._get_client()
        url = f"{self.BASE_URL}{path}"
        params = dict(params or {})
        params.setdefault("per_page", 100)

        results = []
        page = 1

        try:
            while page <= self.max_pages:
                params["page"] = page
                response = await client.get(url, params=params, headers=self._headers())
                self._update_rate_limits(response)
                if response.status_code == 404:
                    break
                response.raise_for_status()

                data = response.json()
                if not data:
                    break

                results.extend(data)

                # Check if there are more pages
                if len(data) < params["per_page"]:
                    break
                page += 1

            return results
        finally:
            if self._client is None:
                await client.aclose()

    async def fetch_snapshot(self, repo_ref: RepoRef) -> RepositorySnapshot:
        """Fetch everything the calculators need for one repository.

        Args:
            repo_ref: Reference to the repository.

        Returns:
            RepositorySnapshot without a clone path.

        Raises:
            ResolutionError: If the repository does not exist or the API fails.
        """
        owner = repo_ref.owner
        repo = repo_ref.repo

        try:
            info = await self._fetch(f"/repos/{owner}/{repo}")
            if info is None:
                raise ResolutionError(repo_ref.url, "repository not found (may be private, deleted, or renamed)")

            commits = await self._fetch_commits(owner, repo)
            issues = await self._fetch_issues(owner, repo)
            pull_requests = await self._fetch_pull_requests(owner, repo)
        except httpx.HTTPError as e:
            raise ResolutionError(repo_ref.url, f"GitHub API request failed: {e}") from e

        license_info = info.get("license") or {}
        logger.info(
            f"Fetched {owner}/{repo}: {len(commits)} commits, {len(issues)} issues, "
            f"{len(pull_requests)} pull requests (rate limit remaining {self.rate_limit_remaining})"
        )

        return RepositorySnapshot(
            canonical_url=repo_ref.url,
            contributors=[
                Contributor(author_name=commit.author_name)
                for commit in commits
                if commit.author_name
            ],
            issues=issues,
            pull_requests=pull_requests,
            commits=commits,
            license_name=license_info.get("spdx_id") or license_info.get("name"),
        )

    async def _fetch_commits(self, owner: str, repo: str) -> list[Commit]:
        """Fetch recent commits on the default branch."""
        data = await self._fetch_all_pages(f"/repos/{owner}/{repo}/commits")
        commits = []
        for item in data:
            details = item.get("commit") or {}
            author = details.get("author") or {}
            commits.append(
                Commit(
                    sha=item.get("sha", ""),
                    author_name=author.get("name"),
                    message=details.get("message", ""),
                )
            )
        return commits

    async def _fetch_issues(self, owner: str, repo: str) -> list[Issue]:
        """Fetch issues in every state, excluding pull requests."""
        data = await self._fetch_all_pages(
            f"/repos/{owner}/{repo}/issues",
            params={"state": "all"},
        )
        return [
            Issue(
                created_at=item.get("created_at"),
                closed_at=item.get("closed_at"),
                state=item.get("state", "open"),
            )
            for item in data
            # The issues endpoint also returns pull requests
            if "pull_request" not in item
        ]

    async def _fetch_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        """Fetch pull requests, with size and reviews for recent merged ones."""
        data = await self._fetch_all_pages(
            f"/repos/{owner}/{repo}/pulls",
            params={"state": "all"},
        )

        pull_requests = []
        detailed = 0
        for item in data:
            additions = 0
            review_count = 0
            if item.get("merged_at") and detailed < self.max_pr_details:
                additions, review_count = await self._fetch_pr_details(owner, repo, item["number"])
                detailed += 1

            pull_requests.append(
                PullRequest(
                    created_at=item.get("created_at"),
                    closed_at=item.get("closed_at"),
                    merged_at=item.get("merged_at"),
                    additions=additions,
                    review_count=review_count,
                )
            )
        return pull_requests

    async def _fetch_pr_details(self, owner: str, repo: str, number: int) -> tuple[int, int]:
        """Fetch lines added and number of reviews for one pull request."""
        details = await self._fetch(f"/repos/{owner}/{repo}/pulls/{number}") or {}
        reviews = await self._fetch(f"/repos/{owner}/{repo}/pulls/{number}/reviews") or []
        return details.get("additions", 0), len(reviews)
