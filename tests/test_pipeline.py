"""Tests for the end-to-end rating pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from trustscore.analyzers.pipeline import RatingPipeline
from trustscore.config import Settings
from trustscore.models.schemas import Contributor, RepositorySnapshot
from trustscore.output import OUTPUT_FIELDS
from trustscore.resolvers import ResolutionError, UnsupportedSourceError
from trustscore.workdir import CloneError

NPM_URL = "https://www.npmjs.com/package/left-pad"

MIT_TEXT = "MIT License\n\nPermission is hereby granted, free of charge, to any person.\n"


# --- Helpers ---------------------------------------------------------------


def _snapshot() -> RepositorySnapshot:
    return RepositorySnapshot(
        canonical_url="https://github.com/owner/repo",
        contributors=[Contributor(author_name=name) for name in ("ann", "bob", "cid", "dee")],
    )


def _resolver(snapshot: RepositorySnapshot | None = None, error: Exception | None = None) -> AsyncMock:
    resolver = AsyncMock()
    if error is not None:
        resolver.resolve.side_effect = error
    else:
        resolver.resolve.return_value = snapshot or _snapshot()
    return resolver


async def _fake_clone(url: str, destination: Path, timeout: float) -> None:
    (destination / "LICENSE").write_text(MIT_TEXT)
    (destination / "README.md").write_text("# Repo\n\nThe cat sat on the mat.\n")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(work_dir=tmp_path, metric_timeout=5.0, clone_timeout=5.0)


def _assert_unratable(record: str, url: str) -> None:
    data = json.loads(record)
    assert data["URL"] == url
    assert all(data[field] == -1 for field in OUTPUT_FIELDS[1:])


# === RatingPipeline.rate ====================================================


class TestRatingPipeline:
    """Tests for RatingPipeline.rate."""

    async def test_rates_resolved_repository(self, settings: Settings, tmp_path: Path):
        pipeline = RatingPipeline(settings, resolver=_resolver())
        with patch("trustscore.workdir.git_clone", new=_fake_clone):
            record, net_score = await pipeline.rate(NPM_URL)

        data = json.loads(record)
        assert data["URL"] == NPM_URL
        assert data["License"] == 1.0
        assert data["BusFactor"] == 1.0
        assert data["RampUp"] > 0
        assert 0 < net_score <= 1
        assert data["NetScore"] == round(net_score, 3)

    async def test_working_directory_removed(self, settings: Settings, tmp_path: Path):
        pipeline = RatingPipeline(settings, resolver=_resolver())
        with patch("trustscore.workdir.git_clone", new=_fake_clone):
            await pipeline.rate(NPM_URL)
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.parametrize(
        "error",
        [
            UnsupportedSourceError(NPM_URL, "declares no repository"),
            ResolutionError(NPM_URL, "npm package not found"),
            RuntimeError("unexpected"),
        ],
    )
    async def test_resolution_failures_unratable(self, settings: Settings, error):
        pipeline = RatingPipeline(settings, resolver=_resolver(error=error))
        record, net_score = await pipeline.rate(NPM_URL)
        assert net_score == 0.0
        _assert_unratable(record, NPM_URL)

    async def test_clone_failure_unratable(self, settings: Settings, tmp_path: Path):
        pipeline = RatingPipeline(settings, resolver=_resolver())
        failure = AsyncMock(side_effect=CloneError("https://github.com/owner/repo", "exit 128"))
        with patch("trustscore.workdir.git_clone", failure):
            record, net_score = await pipeline.rate(NPM_URL)

        assert net_score == 0.0
        _assert_unratable(record, NPM_URL)
        assert list(tmp_path.iterdir()) == []

    async def test_surrounding_whitespace_trimmed(self, settings: Settings):
        pipeline = RatingPipeline(settings, resolver=_resolver(error=ResolutionError(NPM_URL, "x")))
        record, _ = await pipeline.rate(f"  {NPM_URL}\n")
        assert json.loads(record)["URL"] == NPM_URL

    async def test_client_lifecycle(self, settings: Settings):
        async with RatingPipeline(settings) as pipeline:
            assert pipeline._http_client is not None
            assert pipeline.resolver.github._client is pipeline._http_client
        assert pipeline._http_client is None


class TestAccepts:
    """Tests for the ingestion gate applied to a rating."""

    async def test_accepts_good_repository(self, settings: Settings):
        pipeline = RatingPipeline(settings, resolver=_resolver())
        with patch("trustscore.workdir.git_clone", new=_fake_clone):
            assert await pipeline.accepts(NPM_URL)

    async def test_rejects_unratable(self, settings: Settings):
        pipeline = RatingPipeline(settings, resolver=_resolver(error=ResolutionError(NPM_URL, "x")))
        assert not await pipeline.accepts(NPM_URL)

    async def test_threshold_from_settings(self, tmp_path: Path):
        strict = Settings(work_dir=tmp_path, ingest_threshold=1.0)
        pipeline = RatingPipeline(strict, resolver=_resolver())
        with patch("trustscore.workdir.git_clone", new=_fake_clone):
            assert not await pipeline.accepts(NPM_URL)
