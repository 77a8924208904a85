"""Per-request working directories holding a shallow clone."""

from __future__ import annotations

import asyncio
import logging
import os
import secrets
import shutil
import signal
import stat
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from trustscore.config import DEFAULT_CLONE_TIMEOUT
from trustscore.resolvers.base import ResolutionError

logger = logging.getLogger(__name__)

_OUTPUT_LIMIT = 2000


class CloneError(ResolutionError):
    """Raised when the repository cannot be cloned."""


def _directory_prefix() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    return f"repo-{stamp}-{secrets.token_hex(4)}-"


def _force_remove(func, path, _exc) -> None:
    """Clear the read-only bit git sets on pack files and retry."""
    os.chmod(path, stat.S_IWRITE)
    func(path)


def remove_tree(path: Path) -> None:
    """Delete a directory recursively, including read-only files."""
    if path.exists():
        shutil.rmtree(path, onexc=_force_remove)


async def _kill_process_group(proc: asyncio.subprocess.Process) -> None:
    try:
        os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
    except (ProcessLookupError, OSError):
        proc.kill()
    await proc.wait()


async def git_clone(url: str, destination: Path, timeout: float = DEFAULT_CLONE_TIMEOUT) -> None:
    """Shallow, single-branch clone of ``url`` into ``destination``.

    Runs git through asyncio.create_subprocess_exec without a shell. The
    process group is killed on timeout or cancellation so no git helpers
    are left behind.

    Raises:
        CloneError: If git exits non-zero, is missing or times out.
    """
    cmd = ["git", "clone", "--depth", "1", "--single-branch", "--quiet", url, str(destination)]
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
            start_new_session=True,
        )
    except OSError as e:
        raise CloneError(url, f"cannot run git: {e}") from e

    try:
        _stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        await _kill_process_group(proc)
        raise CloneError(url, f"git clone timed out after {timeout}s") from None
    except asyncio.CancelledError:
        # The caller deletes the destination next; git must be gone first
        await _kill_process_group(proc)
        raise

    if proc.returncode:
        message = stderr.decode(errors="replace")[:_OUTPUT_LIMIT].strip()
        raise CloneError(url, f"git clone exited with {proc.returncode}: {message}")


class WorkingDirectory:
    """Scoped temporary directory with a clone of one repository.

    The directory name carries a timestamp and a random nonce, so concurrent
    requests never share a directory. It is deleted on every exit path.

    Usage:
        async with WorkingDirectory("https://github.com/owner/repo") as path:
            await orchestrator.rate(snapshot, path)
    """

    def __init__(
        self,
        url: str,
        root: Path | None = None,
        clone: bool = True,
        timeout: float = DEFAULT_CLONE_TIMEOUT,
    ) -> None:
        """Initialize the working directory.

        Args:
            url: Repository to clone.
            root: Parent directory. Defaults to the system temp directory.
            clone: Set False to allocate an empty directory without cloning.
            timeout: Seconds allowed for the clone.
        """
        self.url = url
        self.root = root
        self.clone = clone
        self.timeout = timeout
        self.path: Path | None = None

    async def __aenter__(self) -> Path:
        """Allocate the directory and clone into it."""
        if self.root is not None:
            self.root.mkdir(parents=True, exist_ok=True)
        self.path = Path(tempfile.mkdtemp(prefix=_directory_prefix(), dir=self.root))
        logger.debug(f"Allocated working directory {self.path}")

        if self.clone:
            try:
                await git_clone(self.url, self.path, timeout=self.timeout)
            except BaseException:
                self.release()
                raise
            logger.info(f"Cloned {self.url} into {self.path}")

        return self.path

    async def __aexit__(self, *args) -> None:
        """Delete the directory."""
        self.release()

    def release(self) -> None:
        """Delete the directory if it was allocated."""
        if self.path is not None:
            remove_tree(self.path)
            logger.debug(f"Removed working directory {self.path}")
            self.path = None
