"""Dependency pinning: share of dependencies pinned to a major.minor version."""

import json
import logging
import re
from pathlib import Path

from trustscore.calculators.base import MetricCalculator
from trustscore.models.schemas import MetricName, RepositorySnapshot

logger = logging.getLogger(__name__)

NPM_DEPENDENCY_FIELDS = ["dependencies", "devDependencies"]

# npm ranges that fix at least major.minor: 1.2.3, =1.2.3, ~1.2.3, 1.2.x, 1.2, ^0.2.3
_NPM_PINNED = re.compile(
    r"^(?:=|~|v)?\d+\.\d+(?:\.(?:\d+|[xX*]))?(?:[-+][\w.+-]*)?$"
    r"|^\^0\.\d+(?:\.\d+)?(?:[-+][\w.+-]*)?$"
)

# Python specifiers that fix at least major.minor: ==1.2, ==1.2.3, ~=1.2.3, ===1.2
_PY_PINNED = re.compile(r"^(?:===?\s*\d+\.\d+|~=\s*\d+\.\d+\.\d+)(?:[\w.*+-]*)$")

_REQUIREMENT = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)(?:\[[^\]]*\])?\s*(.*)$")


def is_npm_pinned(spec: str) -> bool:
    """Check an npm version range for a fixed major.minor."""
    return bool(_NPM_PINNED.match(spec.strip()))


def is_python_pinned(spec: str) -> bool:
    """Check a requirement specifier for a fixed major.minor.

    Only a single specifier can pin; ranges such as ``>=1.2,<2`` cannot.
    """
    spec = spec.split(";", 1)[0].strip()
    if not spec or "," in spec:
        return False
    return bool(_PY_PINNED.match(spec))


def npm_dependencies(package_json: Path) -> dict[str, str]:
    """Read runtime and development dependencies from ``package.json``.

    Raises:
        ValueError: If the file is not a JSON object.
    """
    data = json.loads(package_json.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{package_json} is not a JSON object")

    dependencies: dict[str, str] = {}
    for field in NPM_DEPENDENCY_FIELDS:
        dependencies.update(data.get(field) or {})
    return dependencies


def python_requirements(requirements_txt: Path) -> dict[str, str]:
    """Read requirement names and specifiers from ``requirements.txt``.

    Comments, options (``-r``, ``-e``, ``--hash``) and URLs are skipped.
    """
    requirements: dict[str, str] = {}
    for line in requirements_txt.read_text(encoding="utf-8").splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-") or "://" in line:
            continue
        match = _REQUIREMENT.match(line)
        if match:
            requirements[match.group(1)] = match.group(2)
    return requirements


class DependencyPinningCalculator(MetricCalculator):
    """Scores the fraction of dependencies pinned to at least major.minor.

    A repository with no declared dependencies scores 1.
    """

    @property
    def name(self) -> MetricName:
        return MetricName.DEPENDENCY_PINNING

    def compute(self, snapshot: RepositorySnapshot) -> float:
        if snapshot.clone_path is None:
            logger.warning(f"No local clone for {snapshot.canonical_url}, assuming no dependencies")
            return 1.0

        pinned: list[bool] = []

        package_json = snapshot.clone_path / "package.json"
        if package_json.is_file():
            pinned.extend(is_npm_pinned(spec) for spec in npm_dependencies(package_json).values())

        requirements_txt = snapshot.clone_path / "requirements.txt"
        if requirements_txt.is_file():
            pinned.extend(
                is_python_pinned(spec) for spec in python_requirements(requirements_txt).values()
            )

        if not pinned:
            return 1.0

        logger.debug(f"{sum(pinned)}/{len(pinned)} dependencies pinned")
        return sum(pinned) / len(pinned)
