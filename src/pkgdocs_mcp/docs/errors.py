"""Failure taxonomy for documentation resolution.

Per-source failures are plain records accumulated by the source chain.
Only the caller-facing outcomes (exhaustion, deadline, bad input) are
exceptions, all deriving from ``DocsResolutionError`` with a stable code.
"""

from __future__ import annotations

from typing import Any

from pkgdocs_mcp.docs.models.document import ResolutionKey
from pkgdocs_mcp.docs.models.failure import FailureKind, SourceFailure


class FetchError(Exception):
    """Raised by fetchers; converted to a SourceFailure by the chain."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class DocsResolutionError(Exception):
    """Base class for caller-facing resolution failures."""

    code = "resolution_error"

    def details(self) -> dict[str, Any]:
        return {}


class InvalidRequest(DocsResolutionError):
    code = "invalid_request"


class UnsupportedEcosystem(DocsResolutionError):
    code = "unsupported_ecosystem"

    def __init__(self, ecosystem: str, supported: list[str]) -> None:
        super().__init__(f"Unsupported ecosystem: {ecosystem}")
        self.ecosystem = ecosystem
        self.supported = supported

    def details(self) -> dict[str, Any]:
        return {"ecosystem": self.ecosystem, "supported": self.supported}


class AllSourcesExhausted(DocsResolutionError):
    """Every configured strategy for the key failed."""

    code = "all_sources_exhausted"

    def __init__(self, key: ResolutionKey, failures: list[SourceFailure]) -> None:
        tried = ", ".join(f.source for f in failures) or "none"
        super().__init__(f"No documentation found for {key.describe()} (tried: {tried})")
        self.key = key
        self.failures = list(failures)

    def details(self) -> dict[str, Any]:
        return {
            "key": self.key.to_dict(),
            "sources": [f.to_dict() for f in self.failures],
        }


class DeadlineExceeded(DocsResolutionError):
    """The orchestrated call ran past its overall deadline."""

    code = "deadline_exceeded"

    def __init__(self, key: ResolutionKey, deadline_s: float) -> None:
        super().__init__(f"Resolving {key.describe()} exceeded the {deadline_s:.1f}s deadline")
        self.key = key
        self.deadline_s = deadline_s

    def details(self) -> dict[str, Any]:
        return {"key": self.key.to_dict(), "deadline_s": self.deadline_s}
