"""Raw content splitting, section classification and symbol extraction."""

from pkgdocs_mcp.docs.parsing.markup import HeadingBlock, to_plain_sections
from pkgdocs_mcp.docs.parsing.normalizer import SectionNormalizer, SectionPolicy
from pkgdocs_mcp.docs.parsing.symbols import extract_symbols, match_signature

__all__ = [
    "HeadingBlock",
    "SectionNormalizer",
    "SectionPolicy",
    "extract_symbols",
    "match_signature",
    "to_plain_sections",
]
