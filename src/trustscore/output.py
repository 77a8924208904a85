"""Serialize score cards into the registry's NDJSON record."""

import json

from trustscore.models.schemas import MetricName, ScoreCard

# Metric order of the record; each is followed by its latency field
RECORD_METRICS = [
    MetricName.RAMP_UP,
    MetricName.CORRECTNESS,
    MetricName.BUS_FACTOR,
    MetricName.RESPONSIVE_MAINTAINER,
    MetricName.LICENSE,
    MetricName.PULL_REQUESTS,
    MetricName.DEPENDENCY_PINNING,
]

OUTPUT_FIELDS = ["URL", "NetScore", "NetScore_Latency"] + [
    field for name in RECORD_METRICS for field in (name.value, f"{name.value}_Latency")
]


def _number(value: float) -> str:
    return f"{value:.3f}"


def format_record(source_url: str, card: ScoreCard) -> str:
    """Render a score card as one newline-terminated JSON object.

    Keys follow ``OUTPUT_FIELDS`` and every number carries exactly three
    decimals.

    Args:
        source_url: URL the rating was requested for; surrounding whitespace
            is trimmed.
        card: Score card to render.

    Returns:
        The JSON record, ending in a newline.
    """
    fields = [
        ("URL", json.dumps(source_url.strip())),
        ("NetScore", _number(card.net_score)),
        ("NetScore_Latency", _number(card.net_score_latency_seconds)),
    ]
    for name in RECORD_METRICS:
        fields.append((name.value, _number(card.value(name))))
        fields.append((f"{name.value}_Latency", _number(card.latency(name))))

    body = ", ".join(f"{json.dumps(key)}: {value}" for key, value in fields)
    return "{" + body + "}\n"


def format_unratable(source_url: str) -> str:
    """Render the degraded record for a source that cannot be analyzed."""
    return format_record(source_url, ScoreCard.unratable())
