"""Responsive maintainer: how quickly issues and pull requests get handled."""

import logging
import math
from collections.abc import Iterable
from datetime import datetime

from trustscore.calculators.base import MetricCalculator, bucket
from trustscore.calculators.bus_factor import BusFactorCalculator
from trustscore.models.schemas import Issue, MetricName, PullRequest, RepositorySnapshot

logger = logging.getLogger(__name__)

# (upper bound in hours, score)
RESPONSE_TIME_BUCKETS = [
    (96, 1.0),    # 4 days
    (168, 0.7),   # 1 week
    (336, 0.4),   # 2 weeks
    (744, 0.1),   # 31 days
]

CLOSURE_TIME_BUCKETS = [
    (336, 1.0),   # 2 weeks
    (504, 0.7),   # 3 weeks
    (672, 0.4),   # 4 weeks
    (840, 0.1),   # 5 weeks
]


def _hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def average_close_hours(items: Iterable[Issue | PullRequest]) -> float:
    """Average hours from creation to close.

    Only items carrying both timestamps are sampled.

    Args:
        items: Issues and/or pull requests, pooled into one average.

    Returns:
        Mean hours, or 0 when nothing was sampled.
    """
    durations = [
        _hours_between(item.created_at, item.closed_at)
        for item in items
        if item.created_at and item.closed_at
    ]
    if not durations:
        return 0.0
    return sum(durations) / len(durations)


class ResponsiveMaintainerCalculator(MetricCalculator):
    """Composite of four bucketed sub-scores.

    Scoring weights (total 100%):
    - Response time (issues and PRs): 40%
    - Issue closure time: 30%
    - Open/closed issue ratio: 20%
    - Active maintainers: 10%
    """

    WEIGHTS = {
        "response_time": 0.4,
        "closure_time": 0.3,
        "open_closed_ratio": 0.2,
        "active_maintainers": 0.1,
    }

    def __init__(self) -> None:
        # Separate instance from the one the orchestrator runs
        self._maintainers = BusFactorCalculator()

    @property
    def name(self) -> MetricName:
        return MetricName.RESPONSIVE_MAINTAINER

    def compute(self, snapshot: RepositorySnapshot) -> float:
        components = {
            "response_time": self.response_time_score(snapshot),
            "closure_time": self.closure_time_score(snapshot),
            "open_closed_ratio": self.open_closed_ratio_score(snapshot),
            "active_maintainers": self._maintainers.compute(snapshot),
        }
        logger.debug(f"Responsive maintainer components: {components}")
        return math.fsum(components[key] * weight for key, weight in self.WEIGHTS.items())

    def response_time_score(self, snapshot: RepositorySnapshot) -> float:
        """Score mean close time over issues and pull requests together."""
        avg = average_close_hours([*snapshot.issues, *snapshot.pull_requests])
        logger.debug(f"Average response time: {avg:.1f}h")
        return bucket(avg, RESPONSE_TIME_BUCKETS)

    def closure_time_score(self, snapshot: RepositorySnapshot) -> float:
        """Score mean close time over issues only."""
        avg = average_close_hours(snapshot.issues)
        logger.debug(f"Average issue closure time: {avg:.1f}h")
        return bucket(avg, CLOSURE_TIME_BUCKETS)

    def open_closed_ratio_score(self, snapshot: RepositorySnapshot) -> float:
        """Score 1 while fewer issues are open than closed, else 0.

        Issues in any state other than open or closed are ignored.
        """
        open_count = sum(1 for issue in snapshot.issues if issue.state == "open")
        closed_count = sum(1 for issue in snapshot.issues if issue.state == "closed")
        total = open_count + closed_count

        if total == 0 or closed_count == total:
            return 1.0
        if open_count == total:
            return 0.0
        return 1.0 if open_count / closed_count < 1 else 0.0
