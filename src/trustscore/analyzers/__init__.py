"""Scoring orchestration and the end-to-end rating pipeline."""

from trustscore.analyzers.orchestrator import ScoreOrchestrator, passes_ingest_gate
from trustscore.analyzers.pipeline import RatingPipeline

__all__ = ["RatingPipeline", "ScoreOrchestrator", "passes_ingest_gate"]
