"""Abstract base class for metric calculators."""

import asyncio
from abc import ABC, abstractmethod

from trustscore.models.schemas import MetricName, RepositorySnapshot


class MetricCalculator(ABC):
    """Base class for metric calculators.

    Each calculator scores one quality dimension of a repository from a slice
    of an immutable snapshot (or its local clone). Calculators hold no state
    between calls and must never mutate the snapshot they are given.
    """

    @property
    @abstractmethod
    def name(self) -> MetricName:
        """Return the metric this calculator produces."""
        ...

    @abstractmethod
    def compute(self, snapshot: RepositorySnapshot) -> float:
        """Score the snapshot.

        Args:
            snapshot: Repository snapshot, bound to its clone path if any.

        Returns:
            Score in [0, 1].
        """
        ...

    async def calculate(self, snapshot: RepositorySnapshot) -> float:
        """Run ``compute`` without blocking the event loop.

        Args:
            snapshot: Repository snapshot, bound to its clone path if any.

        Returns:
            Score in [0, 1].
        """
        return await asyncio.to_thread(self.compute, snapshot)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name.value})"


def bucket(value: float, thresholds: list[tuple[float, float]], default: float = 0.0) -> float:
    """Map a value to the score of the first threshold it falls below.

    Args:
        value: Measured value.
        thresholds: ``(upper_bound, score)`` pairs in ascending order; the
            comparison is strict (``value < upper_bound``).
        default: Score when the value reaches every bound.

    Returns:
        The bucketed score.
    """
    for upper_bound, score in thresholds:
        if value < upper_bound:
            return score
    return default
