"""Response envelope and payload schemas shared by every docs tool.

A tool returns ``{"ok": true, "data": ...}`` or
``{"ok": false, "error": {"code", "message", "details"}}``. Documentation
payloads (describe and search) share the ``DocsData`` shape so a client
can read the package key, the source and the entries the same way for
both tools.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

ErrorCode = Literal[
    "invalid_request",
    "unsupported_ecosystem",
    "all_sources_exhausted",
    "deadline_exceeded",
    "symbol_not_found",
    "resolution_error",
]


class ToolError(BaseModel):
    """Machine-readable failure returned instead of a payload."""

    code: ErrorCode = Field(description="Stable error code")
    message: str = Field(description="One-line explanation")
    details: dict[str, Any] | None = Field(
        default=None, description="Key, per-source failures and a suggested action"
    )


class ToolEnvelope(BaseModel):
    ok: bool = Field(description="True when data holds a result")
    data: Any | None = Field(default=None, description="Tool payload")
    error: ToolError | None = Field(default=None, description="Set when ok is false")

    @model_validator(mode="after")
    def _check_ok_matches_error(self) -> "ToolEnvelope":
        if self.ok == (self.error is not None):
            raise ValueError("exactly one of ok=true or error must be set")
        return self


class FailureInfo(BaseModel):
    """One fetch strategy that was tried and did not yield content."""

    source: str
    kind: str
    message: str
    elapsed_s: float = 0.0


class SourceInfo(BaseModel):
    """Where a document came from and what failed before it."""

    name: str
    kind: str
    cached_at: str
    degraded: bool = False
    diagnostics: list[FailureInfo] = Field(default_factory=list)


class SectionEntry(BaseModel):
    """A document section as listed by describe_package."""

    label: str
    heading: str
    body: str
    order: int
    truncated: bool = False


class SearchEntry(BaseModel):
    """A ranked match as listed by search_package_docs."""

    section: str
    heading: str
    snippet: str
    score: float
    match_type: Literal["exact", "fuzzy"]
    matched_symbol: str | None = None


class DocsData(BaseModel):
    ecosystem: str
    package: str
    symbol: str | None = None
    version: str | None = None
    action: Literal["describe", "search"]
    source: SourceInfo
    entries: list[SectionEntry] | list[SearchEntry]
    summary: dict[str, Any] = Field(default_factory=dict)


def build_ok(data: Any) -> dict[str, Any]:
    """Wrap a payload in a success envelope."""
    return ToolEnvelope(ok=True, data=data).model_dump(exclude_none=True)


def build_error(code: ErrorCode, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Wrap a failure in an error envelope."""
    envelope = ToolEnvelope(ok=False, error=ToolError(code=code, message=message, details=details))
    return envelope.model_dump(exclude_none=True)


def build_docs_data(
    *,
    key: dict[str, Any],
    action: Literal["describe", "search"],
    source: dict[str, Any],
    entries: list[dict[str, Any]],
    summary: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Validate a describe or search payload for ``key`` (a ResolutionKey dict)."""
    return DocsData(
        ecosystem=key["ecosystem"],
        package=key["package"],
        symbol=key.get("symbol"),
        version=key.get("version"),
        action=action,
        source=SourceInfo(**source),
        entries=entries,
        summary=summary or {},
    ).model_dump(exclude_none=True)
