"""Concurrent metric execution and net score aggregation."""

import asyncio
import logging
import time
from pathlib import Path

from trustscore.calculators import MetricCalculator, default_calculators
from trustscore.config import DEFAULT_METRIC_TIMEOUT, INGEST_THRESHOLD
from trustscore.models.schemas import MetricName, MetricResult, RepositorySnapshot, ScoreCard
from trustscore.output import format_record, format_unratable

logger = logging.getLogger(__name__)


def passes_ingest_gate(net_score: float, threshold: float = INGEST_THRESHOLD) -> bool:
    """Check whether a net score is high enough for ingestion."""
    return net_score >= threshold


class ScoreOrchestrator:
    """Runs every metric calculator concurrently and aggregates a net score.

    Construct one orchestrator per rating request. All calculators read the
    same immutable snapshot; none waits on another. A calculator that raises
    or times out is logged and scored 0, so one failure never prevents the
    score card from being produced.

    Net score weights: equal weight for every registered calculator.
    """

    def __init__(
        self,
        calculators: list[MetricCalculator] | None = None,
        metric_timeout: float | None = DEFAULT_METRIC_TIMEOUT,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            calculators: Calculators to run. Defaults to the full metric set.
            metric_timeout: Seconds before a calculator is abandoned and
                scored 0. None disables the timeout.
        """
        self.calculators = calculators if calculators is not None else default_calculators()
        self.metric_timeout = metric_timeout

        names = [calculator.name for calculator in self.calculators]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate calculators registered: {names}")

    async def score(
        self,
        snapshot: RepositorySnapshot,
        clone_path: Path | None = None,
    ) -> ScoreCard:
        """Calculate every metric and the net score.

        Args:
            snapshot: Repository snapshot from the Resolver.
            clone_path: Local read-only clone; overrides the snapshot's own.

        Returns:
            ScoreCard with one result per calculator.
        """
        if clone_path is not None:
            snapshot = snapshot.with_clone_path(clone_path)

        tasks = [
            asyncio.create_task(self._run_timed(calculator, snapshot), name=calculator.name.value)
            for calculator in self.calculators
        ]
        results = await asyncio.gather(*tasks)
        metrics = {calculator.name: result for calculator, result in zip(self.calculators, results)}

        start = time.perf_counter()
        net_score = self._net_score(metrics)
        net_score_latency = time.perf_counter() - start

        return ScoreCard(
            metrics=metrics,
            net_score=net_score,
            net_score_latency_seconds=net_score_latency,
        )

    async def rate(
        self,
        snapshot: RepositorySnapshot,
        clone_path: Path | None = None,
        source_url: str | None = None,
    ) -> tuple[str, float]:
        """Score a snapshot and render its record.

        Never raises: an unexpected failure yields the unratable record with
        a net score of 0.

        Args:
            snapshot: Repository snapshot from the Resolver.
            clone_path: Local read-only clone; overrides the snapshot's own.
            source_url: URL to key the record by. Defaults to the canonical URL.

        Returns:
            Tuple of (formatted_record, net_score).
        """
        source_url = source_url or snapshot.canonical_url
        try:
            card = await self.score(snapshot, clone_path)
            record = format_record(source_url, card)
        except Exception:
            logger.exception(f"Scoring failed for {snapshot.canonical_url}")
            return format_unratable(source_url), 0.0

        logger.info(
            f"Net score {card.net_score:.3f} for {snapshot.canonical_url} "
            f"({card.net_score_latency_seconds:.3f}s)"
        )
        return record, card.net_score

    async def _run_timed(
        self,
        calculator: MetricCalculator,
        snapshot: RepositorySnapshot,
    ) -> MetricResult:
        """Run one calculator, timing it until it settles."""
        start = time.perf_counter()
        try:
            value = await asyncio.wait_for(calculator.calculate(snapshot), timeout=self.metric_timeout)
            value = float(value)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"score {value} outside [0, 1]")
        except TimeoutError:
            latency = time.perf_counter() - start
            logger.warning(f"{calculator.name.value} timed out after {latency:.3f}s, defaulting to 0")
            return MetricResult(value=0.0, latency_seconds=latency, error="timeout")
        except Exception as e:
            latency = time.perf_counter() - start
            logger.warning(f"{calculator.name.value} failed, defaulting to 0: {e}")
            return MetricResult(value=0.0, latency_seconds=latency, error=f"{type(e).__name__}: {e}")

        latency = time.perf_counter() - start
        logger.debug(f"{calculator.name.value} = {value:.3f} ({latency:.3f}s)")
        return MetricResult(value=value, latency_seconds=latency)

    def _net_score(self, metrics: dict[MetricName, MetricResult]) -> float:
        """Equal-weight mean of every metric value."""
        if not metrics:
            return 0.0
        total = sum(result.value for result in metrics.values())
        return min(1.0, total / len(metrics))
