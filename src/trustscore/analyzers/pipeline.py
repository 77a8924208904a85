"""End-to-end rating pipeline for package URLs."""

import logging

import httpx

from trustscore.analyzers.orchestrator import ScoreOrchestrator, passes_ingest_gate
from trustscore.config import Settings
from trustscore.output import format_unratable
from trustscore.resolvers import ResolutionError, Resolver, UnsupportedSourceError
from trustscore.workdir import WorkingDirectory

logger = logging.getLogger(__name__)


class RatingPipeline:
    """Orchestrates the full rating of one package URL.

    Pipeline stages:
    1. Resolve the URL to a GitHub repository snapshot
    2. Clone the repository into a fresh working directory
    3. Run every metric calculator concurrently
    4. Format the record and remove the working directory

    Usage:
        async with RatingPipeline(settings) as pipeline:
            record, net_score = await pipeline.rate(url)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        resolver: Resolver | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Runtime settings. Defaults to the environment.
            resolver: Resolver to use. Defaults to one sharing the pipeline's
                HTTP client.
        """
        self.settings = settings or Settings.from_env()
        self._resolver = resolver
        self._http_client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "RatingPipeline":
        """Set up shared HTTP client."""
        self._http_client = httpx.AsyncClient(timeout=60.0)
        return self

    async def __aexit__(self, *args) -> None:
        """Clean up HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def resolver(self) -> Resolver:
        if self._resolver is None:
            self._resolver = Resolver(
                github_token=self.settings.github_token,
                client=self._http_client,
            )
        return self._resolver

    async def rate(self, url: str) -> tuple[str, float]:
        """Rate the repository behind a package URL.

        Never raises. Sources that cannot be analyzed produce the unratable
        record (every field -1) with a net score of 0.

        Args:
            url: GitHub repository URL or npmjs.com package URL.

        Returns:
            Tuple of (formatted_record, net_score).
        """
        logger.info(f"Processing URL: {url.strip()}")
        try:
            snapshot = await self.resolver.resolve(url)
            async with WorkingDirectory(
                snapshot.canonical_url,
                root=self.settings.work_dir,
                timeout=self.settings.clone_timeout,
            ) as clone_path:
                orchestrator = ScoreOrchestrator(metric_timeout=self.settings.metric_timeout)
                record, net_score = await orchestrator.rate(snapshot, clone_path, source_url=url)
        except UnsupportedSourceError as e:
            logger.warning(f"Not ratable: {e}")
            return format_unratable(url), 0.0
        except ResolutionError as e:
            logger.error(f"Error processing URL {url.strip()}: {e}")
            return format_unratable(url), 0.0
        except Exception:
            logger.exception(f"Error processing URL {url.strip()}")
            return format_unratable(url), 0.0

        return record, net_score

    async def accepts(self, url: str) -> bool:
        """Rate a URL and apply the ingestion threshold."""
        _, net_score = await self.rate(url)
        return passes_ingest_gate(net_score, self.settings.ingest_threshold)
