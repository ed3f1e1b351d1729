"""Async subprocess runner for local documentation tools."""

import asyncio
import logging
from typing import Optional, Sequence

from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import FailureKind

logger = logging.getLogger("pkgdocs-mcp.sources")

# Trim stderr in failure messages to keep envelopes readable
STDERR_MAX_CHARS = 500


async def run_command(args: Sequence[str], cwd: Optional[str] = None) -> str:
    """Run a local command and return its stdout.

    Arguments are passed as a list and never through a shell. If the caller
    is cancelled (for example by the chain's per-source timeout) the child
    process is killed before the cancellation propagates.

    Raises:
        FetchError: ``command_failed`` when the executable is missing or the
            command exits non-zero
    """
    logger.debug("Running %s (cwd=%s)", " ".join(args), cwd or ".")
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, PermissionError) as exc:
        raise FetchError(FailureKind.COMMAND_FAILED, f"{args[0]} unavailable: {exc}") from exc

    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    if process.returncode != 0:
        error_text = stderr.decode("utf-8", errors="replace").strip()[:STDERR_MAX_CHARS]
        raise FetchError(
            FailureKind.COMMAND_FAILED,
            f"{' '.join(args)} exited with {process.returncode}: {error_text or 'no output'}",
        )

    return stdout.decode("utf-8", errors="replace")
