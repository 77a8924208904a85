"""Metric calculators, one per quality dimension."""

from trustscore.calculators.base import MetricCalculator
from trustscore.calculators.bus_factor import BusFactorCalculator
from trustscore.calculators.correctness import CorrectnessCalculator
from trustscore.calculators.dependency_pinning import DependencyPinningCalculator
from trustscore.calculators.license import LicenseCalculator
from trustscore.calculators.maintainer import ResponsiveMaintainerCalculator
from trustscore.calculators.pull_requests import PullRequestsCodeCalculator
from trustscore.calculators.ramp_up import RampUpCalculator


def default_calculators() -> list[MetricCalculator]:
    """Build a fresh instance of every registered calculator."""
    return [
        BusFactorCalculator(),
        CorrectnessCalculator(),
        RampUpCalculator(),
        ResponsiveMaintainerCalculator(),
        LicenseCalculator(),
        PullRequestsCodeCalculator(),
        DependencyPinningCalculator(),
    ]


__all__ = [
    "MetricCalculator",
    "BusFactorCalculator",
    "CorrectnessCalculator",
    "DependencyPinningCalculator",
    "LicenseCalculator",
    "PullRequestsCodeCalculator",
    "RampUpCalculator",
    "ResponsiveMaintainerCalculator",
    "default_calculators",
]
