"""Document model for package documentation resolution.

This module defines the immutable value types that flow through the
resolution engine: the cache key, the raw fetch result produced by the
source chain, and the structured document produced by the normalizer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pkgdocs_mcp.docs.models.failure import SourceFailure


class Ecosystem(Enum):
    """Supported package ecosystems."""

    GO = "go"
    PYTHON = "python"
    NPM = "npm"
    RUST = "rust"
    SWIFT = "swift"

    @classmethod
    def parse(cls, value: "str | Ecosystem") -> "Ecosystem":
        """Parse an ecosystem name case-insensitively.

        Raises:
            ValueError: If the name is not a supported ecosystem

        Example:
            >>> Ecosystem.parse(" Go ")
            <Ecosystem.GO: 'go'>
        """
        if isinstance(value, Ecosystem):
            return value
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unsupported ecosystem: {value!r}")


class SourceKind(Enum):
    """Where raw documentation content came from."""

    LOCAL_TOOL = "local_tool"
    LOCAL_INSTALL = "local_install"
    REGISTRY_API = "registry_api"
    WEB_SCRAPE = "web_scrape"


class ContentFormat(Enum):
    """Markup format of raw content, used to pick a section splitter."""

    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"


class SectionLabel(Enum):
    """Section classification.

    Declaration order is NOT ranking order; use ``priority`` for ranking.
    """

    DESCRIPTION = "description"
    USAGE = "usage"
    API = "api"
    EXAMPLE = "example"
    OTHER = "other"

    @property
    def priority(self) -> int:
        """Ranking priority (higher wins): API > Usage > Example > Description > Other."""
        return _LABEL_PRIORITY[self]


_LABEL_PRIORITY = {
    SectionLabel.API: 5,
    SectionLabel.USAGE: 4,
    SectionLabel.EXAMPLE: 3,
    SectionLabel.DESCRIPTION: 2,
    SectionLabel.OTHER: 1,
}


@dataclass(frozen=True)
class ResolutionKey:
    """Identifies one cacheable documentation lookup.

    Two keys are equal iff every field matches exactly. Package and symbol
    names are case-sensitive; the ecosystem is always normalized.

    Attributes:
        ecosystem: Package ecosystem
        package_name: Package identifier as the ecosystem spells it
            Examples: "encoding/json", "requests", "@types/node", "serde"
        symbol: Optional symbol inside the package (e.g., "Marshal")
        version: Optional version string (e.g., "1.2.3")

    Usage:
        >>> key = ResolutionKey.build("GO", "encoding/json", symbol="Marshal")
        >>> key.ecosystem
        <Ecosystem.GO: 'go'>
        >>> key.identifier
        'encoding/json.Marshal'
    """

    ecosystem: Ecosystem
    package_name: str
    symbol: Optional[str] = None
    version: Optional[str] = None

    @classmethod
    def build(
        cls,
        ecosystem: "str | Ecosystem",
        package_name: str,
        symbol: Optional[str] = None,
        version: Optional[str] = None,
    ) -> "ResolutionKey":
        """Build a key, normalizing the ecosystem and blank optionals."""
        return cls(
            ecosystem=Ecosystem.parse(ecosystem),
            package_name=package_name.strip(),
            symbol=(symbol or "").strip() or None,
            version=(version or "").strip() or None,
        )

    @property
    def identifier(self) -> str:
        """Package identifier with symbol appended, as local doc tools expect."""
        if self.symbol:
            return f"{self.package_name}.{self.symbol}"
        return self.package_name

    def describe(self) -> str:
        text = f"{self.ecosystem.value}:{self.identifier}"
        if self.version:
            text += f"@{self.version}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ecosystem": self.ecosystem.value,
            "package": self.package_name,
            "symbol": self.symbol,
            "version": self.version,
        }


@dataclass(frozen=True)
class RawFetchResult:
    """Raw content returned by one fetch strategy. Never cached directly."""

    content: str
    source_kind: SourceKind
    source_name: str
    content_format: ContentFormat = ContentFormat.MARKDOWN
    fetched_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class DocumentSection:
    """One labeled section of a structured document."""

    label: SectionLabel
    heading: str
    body: str
    order: int

    @property
    def text(self) -> str:
        """Heading and body joined, as searched by the ranker."""
        if self.heading:
            return f"{self.heading}\n{self.body}"
        return self.body

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label.value,
            "heading": self.heading,
            "body": self.body,
            "order": self.order,
        }


@dataclass(frozen=True)
class SymbolRef:
    """A signature-like line extracted from an API section."""

    name: str
    signature: str
    section_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "signature": self.signature,
            "section_index": self.section_index,
        }


@dataclass(frozen=True)
class StructuredDocument:
    """Normalized documentation for one resolution key.

    Attributes:
        key: The resolution key this document answers
        sections: Ordered sections (stable for identical raw input)
        symbols: Extracted symbol references, in discovery order
        source_kind: Kind of the source that produced the raw content
        source_name: Name of the fetch strategy that succeeded
        cached_at: When the document was built
        degraded: True when the raw content produced no usable sections
            and the document holds only a fallback message
        diagnostics: Failures of the strategies tried before the one that
            succeeded, in chain order
    """

    key: ResolutionKey
    sections: Tuple[DocumentSection, ...]
    symbols: Tuple[SymbolRef, ...]
    source_kind: SourceKind
    source_name: str
    cached_at: datetime = field(default_factory=datetime.now)
    degraded: bool = False
    diagnostics: Tuple[SourceFailure, ...] = ()

    def sections_with_label(self, label: SectionLabel) -> Tuple[DocumentSection, ...]:
        return tuple(s for s in self.sections if s.label == label)

    def size_estimate(self) -> int:
        """Approximate in-memory size in bytes, for byte-bounded caches."""
        size = 0
        for section in self.sections:
            size += len(section.heading) + len(section.body)
        for symbol in self.symbols:
            size += len(symbol.name) + len(symbol.signature)
        return size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.to_dict(),
            "sections": [s.to_dict() for s in self.sections],
            "symbols": [s.to_dict() for s in self.symbols],
            "source_kind": self.source_kind.value,
            "source_name": self.source_name,
            "cached_at": self.cached_at.isoformat(sep=" ", timespec="seconds"),
            "degraded": self.degraded,
            "diagnostics": [f.to_dict() for f in self.diagnostics],
        }
