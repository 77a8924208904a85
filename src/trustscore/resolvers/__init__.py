"""Resolvers turning package URLs into repository snapshots."""

from trustscore.resolvers.base import (
    ResolutionError,
    UnsupportedSourceError,
    parse_repo_url,
)
from trustscore.resolvers.github import GitHubResolver
from trustscore.resolvers.npm import NpmResolver
from trustscore.resolvers.resolver import Resolver

__all__ = [
    "GitHubResolver",
    "NpmResolver",
    "ResolutionError",
    "Resolver",
    "UnsupportedSourceError",
    "parse_repo_url",
]
