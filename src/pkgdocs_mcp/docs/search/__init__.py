"""In-document search: tokenization and ranking."""

from pkgdocs_mcp.docs.search.ranker import SearchRanker, make_snippet, search, similarity
from pkgdocs_mcp.docs.search.tokenizer import TextTokenizer

__all__ = ["SearchRanker", "TextTokenizer", "make_snippet", "search", "similarity"]
