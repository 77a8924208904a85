"""Correctness: share of reported issues that were closed."""

import logging

from trustscore.calculators.base import MetricCalculator, bucket
from trustscore.models.schemas import MetricName, RepositorySnapshot

logger = logging.getLogger(__name__)

# (upper bound on closed/total ratio, score)
CLOSED_RATIO_BUCKETS = [
    (0.1, 0.0),
    (0.4, 0.4),
    (0.7, 0.7),
]


class CorrectnessCalculator(MetricCalculator):
    """Scores the ratio of closed issues to all issues.

    A repository without issues scores 1: there are no known defects.
    """

    @property
    def name(self) -> MetricName:
        return MetricName.CORRECTNESS

    def compute(self, snapshot: RepositorySnapshot) -> float:
        total = len(snapshot.issues)
        if total == 0:
            logger.debug("No issues, correctness is 1")
            return 1.0

        closed = len(snapshot.closed_issues or [])
        ratio = closed / total
        logger.debug(f"Closed issue ratio {closed}/{total} = {ratio:.3f}")
        return bucket(ratio, CLOSED_RATIO_BUCKETS, default=1.0)
