"""Pull request code metric: share of merged code that went through review."""

import logging

from trustscore.calculators.base import MetricCalculator
from trustscore.models.schemas import MetricName, RepositorySnapshot

logger = logging.getLogger(__name__)


class PullRequestsCodeCalculator(MetricCalculator):
    """Scores the fraction of merged code introduced through reviewed PRs.

    Lines added by merged pull requests with at least one review are divided
    by all lines added by merged pull requests. When the Resolver supplied no
    addition counts the fraction of reviewed merged PRs is used instead.
    """

    @property
    def name(self) -> MetricName:
        return MetricName.PULL_REQUESTS

    def compute(self, snapshot: RepositorySnapshot) -> float:
        merged = [pr for pr in snapshot.pull_requests if pr.is_merged]
        if not merged:
            logger.debug(f"No merged pull requests for {snapshot.canonical_url}")
            return 0.0

        reviewed = [pr for pr in merged if pr.review_count > 0]
        total_additions = sum(pr.additions for pr in merged)
        if total_additions > 0:
            reviewed_additions = sum(pr.additions for pr in reviewed)
            logger.debug(f"Reviewed additions {reviewed_additions}/{total_additions}")
            return reviewed_additions / total_additions

        logger.debug(f"Reviewed merged PRs {len(reviewed)}/{len(merged)}")
        return len(reviewed) / len(merged)
