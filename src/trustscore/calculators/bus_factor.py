"""Bus factor: are there enough distinct maintainers."""

import logging

from trustscore.calculators.base import MetricCalculator
from trustscore.models.schemas import MetricName, RepositorySnapshot

logger = logging.getLogger(__name__)


class BusFactorCalculator(MetricCalculator):
    """Counts distinct commit authors across the full contributor list.

    Despite the name this is not a time-windowed bus factor: every
    contributor the Resolver returned is counted, regardless of recency.
    """

    # More than this many distinct authors scores 1
    MIN_MAINTAINERS = 3

    @property
    def name(self) -> MetricName:
        return MetricName.BUS_FACTOR

    def compute(self, snapshot: RepositorySnapshot) -> float:
        authors = {contributor.author_name for contributor in snapshot.contributors}
        logger.debug(f"{len(authors)} distinct authors for {snapshot.canonical_url}")
        return 1.0 if len(authors) > self.MIN_MAINTAINERS else 0.0
