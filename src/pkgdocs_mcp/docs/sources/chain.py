"""Ordered source chain executor.

Runs an ecosystem's fetch strategies in priority order, bounds each call by
its own timeout, and stops at the first strategy that yields content. Every
failure along the way is recorded as a ``SourceFailure`` so callers can see
exactly what was tried.
"""

import asyncio
from dataclasses import dataclass, field
import logging
import time
from typing import List, Optional, Sequence

from pkgdocs_mcp.docs.errors import FetchError
from pkgdocs_mcp.docs.models import FailureKind, RawFetchResult, ResolutionKey, SourceFailure
from pkgdocs_mcp.docs.sources.base import BaseFetcher

logger = logging.getLogger("pkgdocs-mcp.sources")


@dataclass
class ChainOutcome:
    """Result of running a source chain.

    Exactly one of the following holds:
    - ``result`` is set and ``failures`` lists strategies that failed first
    - ``result`` is None and ``failures`` lists every strategy, in order
    """

    result: Optional[RawFetchResult] = None
    failures: List[SourceFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class SourceChain:
    """Try fetchers in order until one returns non-empty content.

    No retries: a strategy that fails is not called again in the same chain
    run. Exceptions raised by fetchers never escape ``resolve``; only
    cancellation of the calling task propagates.

    Usage:
        >>> chain = SourceChain(default_timeout_s=10.0)
        >>> outcome = await chain.resolve(key, [godoc, pkgsite])
        >>> outcome.result.source_name if outcome.succeeded else outcome.failures
    """

    def __init__(self, default_timeout_s: float = 10.0):
        self.default_timeout_s = default_timeout_s

    async def resolve(
        self,
        key: ResolutionKey,
        fetchers: Sequence[BaseFetcher],
        project_path: Optional[str] = None,
    ) -> ChainOutcome:
        outcome = ChainOutcome()

        for fetcher in fetchers:
            timeout_s = fetcher.timeout_s or self.default_timeout_s
            started = time.monotonic()
            try:
                result = await asyncio.wait_for(
                    fetcher.fetch(key, project_path=project_path),
                    timeout=timeout_s,
                )
            except asyncio.TimeoutError:
                failure = SourceFailure(
                    source=fetcher.name,
                    kind=FailureKind.TIMEOUT,
                    message=f"timed out after {timeout_s:.1f}s",
                    elapsed_s=time.monotonic() - started,
                )
            except FetchError as exc:
                failure = SourceFailure(
                    source=fetcher.name,
                    kind=exc.kind,
                    message=exc.message,
                    elapsed_s=time.monotonic() - started,
                )
            except Exception as exc:
                logger.warning("Fetcher %s raised unexpectedly for %s: %r", fetcher.name, key.describe(), exc)
                failure = SourceFailure(
                    source=fetcher.name,
                    kind=FailureKind.UNEXPECTED,
                    message=f"{type(exc).__name__}: {exc}",
                    elapsed_s=time.monotonic() - started,
                )
            else:
                if result.content and result.content.strip():
                    logger.debug(
                        "Source %s succeeded for %s in %.2fs",
                        fetcher.name,
                        key.describe(),
                        time.monotonic() - started,
                    )
                    outcome.result = result
                    return outcome
                failure = SourceFailure(
                    source=fetcher.name,
                    kind=FailureKind.EMPTY,
                    message="source returned empty content",
                    elapsed_s=time.monotonic() - started,
                )

            logger.debug(
                "Source %s failed for %s: %s (%s)",
                failure.source,
                key.describe(),
                failure.kind.value,
                failure.message,
            )
            outcome.failures.append(failure)

        return outcome
