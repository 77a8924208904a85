"""Data models and schemas."""

from trustscore.models.schemas import (
    NOT_RATABLE,
    Commit,
    Contributor,
    Issue,
    MetricName,
    MetricResult,
    PullRequest,
    RepositorySnapshot,
    RepoRef,
    ScoreCard,
)

__all__ = [
    "NOT_RATABLE",
    "Commit",
    "Contributor",
    "Issue",
    "MetricName",
    "MetricResult",
    "PullRequest",
    "RepositorySnapshot",
    "RepoRef",
    "ScoreCard",
]
