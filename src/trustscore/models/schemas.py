"""Pydantic models for repository snapshots and score cards."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Platform(str, Enum):
    """Source code hosting platforms."""

    GITHUB = "github"


class MetricName(str, Enum):
    """Quality dimensions reported on every score card."""

    BUS_FACTOR = "BusFactor"
    CORRECTNESS = "Correctness"
    RAMP_UP = "RampUp"
    RESPONSIVE_MAINTAINER = "ResponsiveMaintainer"
    LICENSE = "License"
    PULL_REQUESTS = "PullRequestsCodeMetric"
    DEPENDENCY_PINNING = "DependencyPinning"


# Sentinel for sources that cannot be analyzed at all
NOT_RATABLE = -1.0


class RepoRef(BaseModel):
    """Reference to a source code repository."""

    platform: Platform
    owner: str
    repo: str

    @property
    def url(self) -> str:
        """Get the canonical https URL of the repository."""
        return f"https://github.com/{self.owner}/{self.repo}"


# --- Snapshot Models ---


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Contributor(BaseModel):
    """Author of a commit on the default branch."""

    model_config = ConfigDict(frozen=True)

    author_name: str


class Issue(BaseModel):
    """Issue with its lifecycle timestamps."""

    model_config = ConfigDict(frozen=True)

    created_at: datetime | None = None
    closed_at: datetime | None = None
    state: str = "open"  # "open", "closed", anything else is ignored

    @field_validator("created_at", "closed_at")
    @classmethod
    def _utc_timestamps(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class PullRequest(BaseModel):
    """Pull request with merge and review information."""

    model_config = ConfigDict(frozen=True)

    created_at: datetime | None = None
    closed_at: datetime | None = None
    merged_at: datetime | None = None
    additions: int = 0
    review_count: int = 0

    @field_validator("created_at", "closed_at", "merged_at")
    @classmethod
    def _utc_timestamps(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None


class Commit(BaseModel):
    """A commit as returned by the Resolver."""

    model_config = ConfigDict(frozen=True)

    sha: str
    author_name: str | None = None
    message: str = ""


class RepositorySnapshot(BaseModel):
    """Immutable bundle of fetched metadata for one repository.

    ``closed_issues`` may be supplied by the Resolver. When it is omitted it is
    derived from ``issues``; a supplied value must be a subset of ``issues``.
    """

    model_config = ConfigDict(frozen=True)

    canonical_url: str
    contributors: list[Contributor] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)
    closed_issues: list[Issue] | None = None
    pull_requests: list[PullRequest] = Field(default_factory=list)
    commits: list[Commit] = Field(default_factory=list)
    clone_path: Path | None = None
    license_name: str | None = None

    @model_validator(mode="after")
    def _check_closed_issues(self) -> "RepositorySnapshot":
        if self.closed_issues is None:
            derived = [issue for issue in self.issues if issue.state == "closed"]
            object.__setattr__(self, "closed_issues", derived)
            return self

        for issue in self.closed_issues:
            if issue not in self.issues:
                raise ValueError("closed_issues must be a subset of issues")
        return self

    def with_clone_path(self, clone_path: Path | None) -> "RepositorySnapshot":
        """Return a copy of this snapshot bound to a local clone."""
        return self.model_copy(update={"clone_path": clone_path})


# --- Score Models ---


class MetricResult(BaseModel):
    """Score of one calculator and how long it took."""

    model_config = ConfigDict(frozen=True)

    value: float = Field(ge=NOT_RATABLE, le=1.0)
    latency_seconds: float = Field(default=0.0, ge=NOT_RATABLE)
    error: str | None = None  # Set when the calculator failed and was defaulted

    @property
    def failed(self) -> bool:
        return self.error is not None


class ScoreCard(BaseModel):
    """Complete set of metric results plus net score for one rating."""

    model_config = ConfigDict(frozen=True)

    metrics: dict[MetricName, MetricResult]
    net_score: float = Field(ge=NOT_RATABLE, le=1.0)
    net_score_latency_seconds: float = Field(default=0.0, ge=NOT_RATABLE)

    def value(self, name: MetricName) -> float:
        """Get the value of a metric, or the sentinel if it is missing."""
        result = self.metrics.get(name)
        return result.value if result else NOT_RATABLE

    def latency(self, name: MetricName) -> float:
        """Get the latency of a metric, or the sentinel if it is missing."""
        result = self.metrics.get(name)
        return result.latency_seconds if result else NOT_RATABLE

    @classmethod
    def unratable(cls) -> "ScoreCard":
        """Build the degraded card used for sources that cannot be analyzed."""
        sentinel = MetricResult(value=NOT_RATABLE, latency_seconds=NOT_RATABLE)
        return cls(
            metrics={name: sentinel for name in MetricName},
            net_score=NOT_RATABLE,
            net_score_latency_seconds=NOT_RATABLE,
        )
