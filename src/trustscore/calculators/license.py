"""License: is the repository license compatible with LGPL-2.1."""

import logging
import re
from pathlib import Path

from trustscore.calculators.base import MetricCalculator
from trustscore.models.schemas import MetricName, RepositorySnapshot

logger = logging.getLogger(__name__)

LICENSE_FILES = ["LICENSE", "LICENSE.md", "LICENSE.txt", "COPYING", "COPYING.md"]

# Checked in order, so more specific names come before their prefixes
LICENSE_PATTERNS: list[tuple[str, str]] = [
    ("AGPL-3.0", r"\bAGPL|GNU AFFERO GENERAL PUBLIC LICENSE\s+Version 3"),
    ("LGPL-2.1", r"\bLGPL[- ]?(v)?2\.1|GNU LESSER GENERAL PUBLIC LICENSE\s+Version 2\.1"),
    ("LGPL-3.0", r"\bLGPL[- ]?(v)?3|GNU LESSER GENERAL PUBLIC LICENSE\s+Version 3"),
    ("GPL-2.0", r"\bGPL[- ]?(v)?2|GNU GENERAL PUBLIC LICENSE\s+Version 2"),
    ("GPL-3.0", r"\bGPL[- ]?(v)?3|GNU GENERAL PUBLIC LICENSE\s+Version 3"),
    ("Apache-2.0", r"\bApache(?:\s+License)?,?(?:\s+Version)?\s*2(\.0)?|\bApache-2\.0"),
    ("MPL-2.0", r"\bMPL[- ]?2(\.0)?|Mozilla Public License,? (Version|v\.?) ?2\.0"),
    ("BSD-3-Clause", r"\bBSD[- ]3|Neither the name of"),
    ("BSD-2-Clause", r"\bBSD[- ]2|\bBSD License|Redistribution and use in source and binary forms"),
    ("MIT", r"\bMIT\b|Permission is hereby granted, free of charge"),
    ("ISC", r"\bISC\b"),
    ("Zlib", r"\bzlib\b"),
    ("Unlicense", r"\bUnlicense\b|This is free and unencumbered software"),
]

COMPATIBLE_LICENSES = {
    "MIT",
    "BSD-2-Clause",
    "BSD-3-Clause",
    "ISC",
    "Zlib",
    "Unlicense",
    "MPL-2.0",
    "LGPL-2.1",
}

_README_LICENSE_SECTION = re.compile(
    r"^#{1,6}\s*licen[cs]e\s*$(?P<body>.*?)(?=^#{1,6}\s|\Z)",
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)


def identify_license(text: str) -> str | None:
    """Identify a license from its text or name.

    Args:
        text: License file contents, a README section or an SPDX id.

    Returns:
        SPDX identifier of the first known license found, or None.
    """
    for spdx_id, pattern in LICENSE_PATTERNS:
        if re.search(pattern, text, re.IGNORECASE):
            return spdx_id
    return None


def is_compatible(spdx_id: str | None) -> bool:
    """Check whether a license can be combined with LGPL-2.1 code."""
    return spdx_id in COMPATIBLE_LICENSES


def read_license_text(root: Path) -> str | None:
    """Read license text from a clone root.

    Dedicated license files win over the ``License`` section of the README.
    """
    for filename in LICENSE_FILES:
        path = root / filename
        if path.is_file():
            return path.read_text(encoding="utf-8", errors="replace")

    readme = root / "README.md"
    if readme.is_file():
        match = _README_LICENSE_SECTION.search(readme.read_text(encoding="utf-8", errors="replace"))
        if match:
            return match.group("body")
    return None


class LicenseCalculator(MetricCalculator):
    """Scores 1 if the license is LGPL-2.1 compatible, else 0."""

    @property
    def name(self) -> MetricName:
        return MetricName.LICENSE

    def compute(self, snapshot: RepositorySnapshot) -> float:
        spdx_id = None
        if snapshot.clone_path is not None:
            text = read_license_text(snapshot.clone_path)
            if text:
                spdx_id = identify_license(text)

        if spdx_id is None and snapshot.license_name:
            spdx_id = identify_license(snapshot.license_name)

        logger.debug(f"License of {snapshot.canonical_url}: {spdx_id or 'unknown'}")
        return 1.0 if is_compatible(spdx_id) else 0.0
