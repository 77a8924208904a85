"""Runtime settings read from the environment.

Prefer environment variables (or a ``.env`` file loaded by the CLI) for
secrets and tokens.
"""

import os
import tempfile
from pathlib import Path

from pydantic import BaseModel, Field

# Ingestion accepts packages scoring at least this much (inclusive)
INGEST_THRESHOLD = 0.5

DEFAULT_METRIC_TIMEOUT = 30.0
DEFAULT_CLONE_TIMEOUT = 120.0

# Environment variable -> Settings field
ENV_VARS = {
    "GITHUB_TOKEN": "github_token",
    "LOG_LEVEL": "log_level",
    "LOG_FILE": "log_file",
    "TRUSTSCORE_WORK_DIR": "work_dir",
    "TRUSTSCORE_METRIC_TIMEOUT": "metric_timeout",
    "TRUSTSCORE_CLONE_TIMEOUT": "clone_timeout",
    "TRUSTSCORE_INGEST_THRESHOLD": "ingest_threshold",
}


class Settings(BaseModel):
    """Settings shared by the CLI and the rating pipeline."""

    github_token: str | None = None
    log_level: int = Field(default=0, ge=0, le=2)  # 0 silent, 1 info, 2 debug
    log_file: Path | None = None
    work_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    metric_timeout: float = Field(default=DEFAULT_METRIC_TIMEOUT, gt=0)
    clone_timeout: float = Field(default=DEFAULT_CLONE_TIMEOUT, gt=0)
    ingest_threshold: float = Field(default=INGEST_THRESHOLD, ge=0, le=1)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Empty variables are treated as unset.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[var]
            for var, field in ENV_VARS.items()
            if environ.get(var, "").strip()
        }
        return cls(**values)
