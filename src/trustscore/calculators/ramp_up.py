"""Ramp-up: how readable the repository README is."""

import logging
from pathlib import Path

from trustscore.calculators.base import MetricCalculator
from trustscore.calculators.readability import flesch_reading_ease, normalize_ease, render_markdown
from trustscore.models.schemas import MetricName, RepositorySnapshot

logger = logging.getLogger(__name__)

README_NAME = "README.md"


def find_readme(root: Path) -> Path | None:
    """Find ``README.md`` at the root of a clone.

    The match is exact-case even on case-insensitive filesystems; no
    alternate spellings are recognised.
    """
    if not root.is_dir():
        return None
    for entry in root.iterdir():
        if entry.name == README_NAME and entry.is_file():
            return entry
    return None


def readme_score(readme: Path) -> tuple[float, float]:
    """Score a README file.

    Args:
        readme: Path to a markdown file.

    Returns:
        Tuple of (flesch_reading_ease, normalized_score).
    """
    content = readme.read_text(encoding="utf-8", errors="replace")
    ease = flesch_reading_ease(render_markdown(content))
    return ease, normalize_ease(ease)


class RampUpCalculator(MetricCalculator):
    """Scores onboarding difficulty from README readability.

    A missing clone, missing README or any processing error scores 0.
    """

    @property
    def name(self) -> MetricName:
        return MetricName.RAMP_UP

    def compute(self, snapshot: RepositorySnapshot) -> float:
        if snapshot.clone_path is None:
            logger.warning(f"No local clone for {snapshot.canonical_url}, ramp-up is 0")
            return 0.0

        readme = find_readme(snapshot.clone_path)
        if readme is None:
            logger.warning(f"{README_NAME} not found in {snapshot.clone_path}")
            return 0.0

        try:
            ease, score = readme_score(readme)
        except (OSError, ValueError) as e:
            logger.error(f"Error checking documentation quality of {readme}: {e}")
            return 0.0

        logger.debug(f"Reading ease {ease} -> ramp-up {score:.3f}")
        return score
