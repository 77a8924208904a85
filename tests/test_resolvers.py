"""Tests for URL resolution against mocked npm and GitHub APIs."""

from __future__ import annotations

import httpx
import pytest

from trustscore.models.schemas import Platform, RepoRef
from trustscore.resolvers import (
    GitHubResolver,
    NpmResolver,
    ResolutionError,
    Resolver,
    UnsupportedSourceError,
    parse_repo_url,
)
from trustscore.resolvers.npm import package_name_from_url

# --- Helpers ---------------------------------------------------------------

GITHUB_ROUTES = {
    "/repos/owner/repo": {"license": {"spdx_id": "MIT", "name": "MIT License"}},
    "/repos/owner/repo/commits": [
        {"sha": "a1", "commit": {"author": {"name": "Ann"}, "message": "init"}},
        {"sha": "b2", "commit": {"author": {"name": "Bob"}, "message": "fix"}},
        {"sha": "c3", "commit": {"author": None, "message": "bot"}},
    ],
    "/repos/owner/repo/issues": [
        {
            "created_at": "2024-01-01T00:00:00Z",
            "closed_at": "2024-01-02T00:00:00Z",
            "state": "closed",
        },
        {"created_at": "2024-01-03T00:00:00Z", "closed_at": None, "state": "open"},
        {
            "created_at": "2024-01-04T00:00:00Z",
            "closed_at": "2024-01-05T00:00:00Z",
            "state": "closed",
            "pull_request": {"url": "https://api.github.com/repos/owner/repo/pulls/1"},
        },
    ],
    "/repos/owner/repo/pulls": [
        {
            "number": 1,
            "created_at": "2024-01-04T00:00:00Z",
            "closed_at": "2024-01-05T00:00:00Z",
            "merged_at": "2024-01-05T00:00:00Z",
        },
        {
            "number": 2,
            "created_at": "2024-01-06T00:00:00Z",
            "closed_at": None,
            "merged_at": None,
        },
    ],
    "/repos/owner/repo/pulls/1": {"number": 1, "additions": 42},
    "/repos/owner/repo/pulls/1/reviews": [{"id": 10, "state": "APPROVED"}],
}

NPM_ROUTES = {
    "/express": {"repository": {"type": "git", "url": "git+https://github.com/owner/repo.git"}},
    "/string-repo": {"repository": "github:owner/repo"},
    "/no-repo": {"name": "no-repo"},
    "/gitlab-pkg": {"repository": {"url": "https://gitlab.com/group/project.git"}},
}


def _handler(request: httpx.Request) -> httpx.Response:
    routes = NPM_ROUTES if request.url.host == "registry.npmjs.org" else GITHUB_ROUTES
    if request.url.path not in routes:
        return httpx.Response(404, json={"message": "Not Found"})
    return httpx.Response(
        200,
        json=routes[request.url.path],
        headers={"X-RateLimit-Remaining": "4999", "X-RateLimit-Reset": "1700000000"},
    )


def _client(handler=_handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# === URL parsing ============================================================


class TestParseRepoUrl:
    """Tests for parse_repo_url."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/owner/repo",
            "https://github.com/owner/repo.git",
            "https://github.com/owner/repo/tree/main/src",
            "  https://www.github.com/owner/repo\n",
            "git+https://github.com/owner/repo.git",
            "git://github.com/owner/repo.git",
            "git@github.com:owner/repo.git",
            "github:owner/repo",
        ],
    )
    def test_github_forms(self, url):
        ref = parse_repo_url(url)
        assert ref == RepoRef(platform=Platform.GITHUB, owner="owner", repo="repo")
        assert ref.url == "https://github.com/owner/repo"

    @pytest.mark.parametrize("url", ["", "https://gitlab.com/owner/repo", "not a url"])
    def test_non_github(self, url):
        assert parse_repo_url(url) is None


class TestPackageNameFromUrl:
    """Tests for npm package URL parsing."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://www.npmjs.com/package/express", "express"),
            ("https://www.npmjs.com/package/express/v/4.18.2", "express"),
            ("https://www.npmjs.com/package/@types/node", "@types/node"),
        ],
    )
    def test_package_names(self, url, expected):
        assert package_name_from_url(url) == expected

    def test_not_a_package_page(self):
        with pytest.raises(UnsupportedSourceError):
            package_name_from_url("https://www.npmjs.com/search?q=express")


# === NpmResolver ============================================================


class TestNpmResolver:
    """Tests for NpmResolver.repository_url."""

    async def test_repository_object(self):
        async with _client() as client:
            url = await NpmResolver(client).repository_url("https://www.npmjs.com/package/express")
        assert url == "git+https://github.com/owner/repo.git"

    async def test_repository_string(self):
        async with _client() as client:
            url = await NpmResolver(client).repository_url("https://www.npmjs.com/package/string-repo")
        assert url == "github:owner/repo"

    async def test_missing_package(self):
        async with _client() as client:
            with pytest.raises(ResolutionError, match="not found") as exc_info:
                await NpmResolver(client).repository_url("https://www.npmjs.com/package/nope")
        assert not isinstance(exc_info.value, UnsupportedSourceError)

    async def test_no_repository_is_unsupported(self):
        async with _client() as client:
            with pytest.raises(UnsupportedSourceError):
                await NpmResolver(client).repository_url("https://www.npmjs.com/package/no-repo")

    async def test_registry_error(self):
        async with _client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(ResolutionError, match="registry request failed"):
                await NpmResolver(client).repository_url("https://www.npmjs.com/package/express")


# === GitHubResolver =========================================================


class TestGitHubResolver:
    """Tests for GitHubResolver.fetch_snapshot."""

    REF = RepoRef(platform=Platform.GITHUB, owner="owner", repo="repo")

    async def test_snapshot_contents(self):
        async with _client() as client:
            resolver = GitHubResolver(token="test-token", client=client)
            snap = await resolver.fetch_snapshot(self.REF)

        assert snap.canonical_url == "https://github.com/owner/repo"
        assert [c.author_name for c in snap.contributors] == ["Ann", "Bob"]
        assert len(snap.commits) == 3
        assert len(snap.issues) == 2
        assert len(snap.closed_issues) == 1
        assert snap.license_name == "MIT"
        assert snap.clone_path is None
        assert resolver.rate_limit_remaining == 4999

    async def test_pull_request_details(self):
        async with _client() as client:
            snap = await GitHubResolver(token="test-token", client=client).fetch_snapshot(self.REF)

        merged, open_pr = snap.pull_requests
        assert merged.is_merged
        assert merged.additions == 42
        assert merged.review_count == 1
        assert not open_pr.is_merged
        assert open_pr.additions == 0

    async def test_token_sent(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("Authorization"))
            return _handler(request)

        async with _client(handler) as client:
            await GitHubResolver(token="test-token", client=client).fetch_snapshot(self.REF)
        assert seen and all(value == "Bearer test-token" for value in seen)

    async def test_missing_repository(self):
        ref = RepoRef(platform=Platform.GITHUB, owner="owner", repo="gone")
        async with _client() as client:
            with pytest.raises(ResolutionError, match="not found"):
                await GitHubResolver(token="test-token", client=client).fetch_snapshot(ref)

    async def test_api_error(self):
        async with _client(lambda request: httpx.Response(500)) as client:
            with pytest.raises(ResolutionError, match="GitHub API request failed"):
                await GitHubResolver(token="test-token", client=client).fetch_snapshot(self.REF)

    async def test_pagination_stops_at_max_pages(self):
        pages = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/repos/owner/repo/commits":
                pages.append(request.url.params["page"])
                full_page = [
                    {"sha": str(i), "commit": {"author": {"name": f"a{i}"}, "message": ""}}
                    for i in range(100)
                ]
                return httpx.Response(200, json=full_page)
            return _handler(request)

        async with _client(handler) as client:
            snap = await GitHubResolver(token="t", client=client, max_pages=2).fetch_snapshot(self.REF)
        assert pages == ["1", "2"]
        assert len(snap.commits) == 200


# === Resolver ===============================================================


class TestResolver:
    """Tests for Resolver.resolve."""

    async def test_github_url(self):
        async with _client() as client:
            snap = await Resolver(github_token="t", client=client).resolve("https://github.com/owner/repo")
        assert snap.canonical_url == "https://github.com/owner/repo"

    async def test_npm_url(self):
        async with _client() as client:
            snap = await Resolver(github_token="t", client=client).resolve(
                "https://www.npmjs.com/package/express"
            )
        assert snap.canonical_url == "https://github.com/owner/repo"
        assert snap.license_name == "MIT"

    async def test_npm_package_outside_github(self):
        async with _client() as client:
            with pytest.raises(UnsupportedSourceError):
                await Resolver(github_token="t", client=client).resolve(
                    "https://www.npmjs.com/package/gitlab-pkg"
                )

    async def test_other_host_unsupported(self):
        async with _client() as client:
            with pytest.raises(UnsupportedSourceError, match="not a GitHub repository"):
                await Resolver(github_token="t", client=client).resolve("https://gitlab.com/group/project")
