"""Search result model for in-document search.

Results are ephemeral: produced per query by the ranker and never stored.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pkgdocs_mcp.docs.models.document import SectionLabel


@dataclass(frozen=True)
class SearchResult:
    """A single ranked match inside a structured document.

    Attributes:
        section_label: Label of the matched section
        heading: Heading of the matched section ("" for the preamble)
        snippet: Bounded excerpt centered on the match, or the symbol
            signature line when a symbol matched
        score: Relevance score (higher = more relevant)
        section_order: Position of the section in the document, used as
            the final tie-break
        matched_symbol: Name of the matched SymbolRef, if any
        match_type: "exact" or "fuzzy"

    Usage:
        >>> result.section_label
        <SectionLabel.API: 'api'>
        >>> result.matched_symbol
        'connect'
    """

    section_label: SectionLabel
    heading: str
    snippet: str
    score: float
    section_order: int
    matched_symbol: Optional[str] = None
    match_type: str = "exact"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "section": self.section_label.value,
            "heading": self.heading,
            "snippet": self.snippet,
            "score": round(self.score, 4),
            "matched_symbol": self.matched_symbol,
            "match_type": self.match_type,
        }
