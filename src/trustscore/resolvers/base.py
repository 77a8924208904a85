"""Repository URL parsing and resolution errors."""

import re

from trustscore.models.schemas import Platform, RepoRef

# https://github.com/owner/repo
# https://github.com/owner/repo.git
# https://github.com/owner/repo/tree/main/subpath
# git+https://github.com/owner/repo.git
# git://github.com/owner/repo.git
# git@github.com:owner/repo.git
# github:owner/repo
GITHUB_PATTERNS = [
    r"(?:git\+)?(?:https?|ssh)://(?:git@)?(?:www\.)?github\.com/([^/]+)/([^/#?\s]+?)(?:\.git)?(?:[/#?].*)?$",
    r"(?:www\.)?github\.com/([^/]+)/([^/#?\s]+?)(?:\.git)?(?:[/#?].*)?$",
    r"git@github\.com:([^/]+)/([^/#?\s]+?)(?:\.git)?/?$",
    r"git://github\.com/([^/]+)/([^/#?\s]+?)(?:\.git)?/?$",
    r"github:([^/]+)/([^/#?\s]+?)(?:\.git)?/?$",
]


def parse_repo_url(url: str) -> RepoRef | None:
    """Parse a GitHub repository URL into a RepoRef.

    Args:
        url: Repository URL to parse.

    Returns:
        RepoRef if the URL points at a GitHub repository, None otherwise.
    """
    if not url:
        return None

    url = url.strip()
    for pattern in GITHUB_PATTERNS:
        match = re.match(pattern, url)
        if match:
            return RepoRef(
                platform=Platform.GITHUB,
                owner=match.group(1),
                repo=match.group(2),
            )
    return None


def is_npm_url(url: str) -> bool:
    """Check whether a URL points at an npmjs.com package page."""
    return "npmjs.com" in url


class ResolutionError(Exception):
    """Raised when a repository snapshot or clone cannot be obtained."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Cannot resolve {url}: {reason}")


class UnsupportedSourceError(ResolutionError):
    """Raised for URLs that do not lead to an analyzable GitHub repository."""
