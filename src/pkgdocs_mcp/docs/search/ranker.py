"""Search ranker: score sections of one StructuredDocument against a query.

Three match tiers, tried in order per section:

- phrase: the whole query is a case-insensitive substring (base 2.0)
- all terms: every query word appears somewhere in the section (base 1.5)
- fuzzy: best per-word SequenceMatcher ratio, averaged (at most 1.0)

Exact tiers add a coverage boost (matched length over section length), a
label priority boost and a small occurrence-count boost. A query that
names one of the section's symbols adds a further boost and replaces the
snippet with the symbol's signature.

Ranking is a pure function of (document, query, options).
"""

from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Dict, List, Optional, Sequence, Tuple

from pkgdocs_mcp.docs.models import DocumentSection, SearchResult, StructuredDocument, SymbolRef
from pkgdocs_mcp.docs.search.tokenizer import TextTokenizer

DEFAULT_FUZZY_THRESHOLD = 0.75
DEFAULT_RESULT_LIMIT = 10
DEFAULT_SNIPPET_CHARS = 200

PHRASE_BASE = 2.0
ALL_TERMS_BASE = 1.5
PRIORITY_WEIGHT = 0.1
OCCURRENCE_WEIGHT = 0.01
MAX_COUNTED_OCCURRENCES = 10
SYMBOL_EXACT_BOOST = 1.0
SYMBOL_FUZZY_WEIGHT = 0.5

ELLIPSIS = "..."


@dataclass(frozen=True)
class _SectionMatch:
    score: float
    position: int
    length: int
    match_type: str


def make_snippet(text: str, position: int, length: int, max_chars: int = DEFAULT_SNIPPET_CHARS) -> str:
    """Excerpt ``text`` around ``[position, position + length)``.

    Whitespace is collapsed and ``...`` marks each truncated end. The
    result never exceeds ``max_chars`` characters.

    Example:
        >>> make_snippet("a" * 300 + "needle" + "b" * 300, 300, 6, max_chars=40)
        '...aaaaaaaaaaaaaaneedlebbbbbbbbbbbbbb...'
    """
    flat = " ".join(text.split())
    if len(flat) <= max_chars:
        return flat

    # Map the match position into the collapsed text
    prefix = " ".join(text[:position].split())
    if position > 0 and text[position - 1].isspace() and prefix:
        prefix += " "
    center = len(prefix) + length // 2

    window = max(1, max_chars - 2 * len(ELLIPSIS))
    start = max(0, center - window // 2)
    end = min(len(flat), start + window)
    start = max(0, end - window)

    snippet = flat[start:end].strip()
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(flat):
        snippet = snippet + ELLIPSIS
    return snippet


def similarity(left: str, right: str) -> float:
    """Normalized similarity in [0, 1] (difflib ratio)."""
    if not left or not right:
        return 0.0
    return SequenceMatcher(None, left, right).ratio()


class SearchRanker:
    """Ranks document sections for a free-text query.

    Usage:
        >>> ranker = SearchRanker(fuzzy_threshold=0.75)
        >>> results = ranker.search(doc, "connect", fuzzy=True, limit=5)
        >>> results[0].section_label
        <SectionLabel.API: 'api'>
    """

    def __init__(
        self,
        fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
        snippet_chars: int = DEFAULT_SNIPPET_CHARS,
        tokenizer: Optional[TextTokenizer] = None,
    ):
        self.fuzzy_threshold = fuzzy_threshold
        self.snippet_chars = snippet_chars
        self.tokenizer = tokenizer or TextTokenizer()

    def search(
        self,
        doc: StructuredDocument,
        query: str,
        fuzzy: bool = True,
        limit: int = DEFAULT_RESULT_LIMIT,
        threshold: Optional[float] = None,
    ) -> List[SearchResult]:
        normalized = TextTokenizer.normalize_query(query)
        if not normalized:
            return []
        threshold = self.fuzzy_threshold if threshold is None else threshold

        symbols_by_section: Dict[int, List[SymbolRef]] = {}
        for symbol in doc.symbols:
            symbols_by_section.setdefault(symbol.section_index, []).append(symbol)

        scored: List[Tuple[float, int, int, SearchResult]] = []
        for index, section in enumerate(doc.sections):
            section_symbols = symbols_by_section.get(index, [])
            match = self._exact_match(section, normalized)
            if match is None and fuzzy:
                match = self._fuzzy_match(section, normalized, section_symbols, threshold)
            if match is None:
                continue

            score = match.score
            snippet = make_snippet(section.text, match.position, match.length, self.snippet_chars)
            matched_symbol = None

            symbol, boost = self._symbol_match(section_symbols, normalized, threshold)
            if symbol is not None:
                score += boost
                matched_symbol = symbol.name
                snippet = make_snippet(symbol.signature, 0, len(symbol.signature), self.snippet_chars)

            result = SearchResult(
                section_label=section.label,
                heading=section.heading,
                snippet=snippet,
                score=score,
                section_order=section.order,
                matched_symbol=matched_symbol,
                match_type=match.match_type,
            )
            scored.append((-score, -section.label.priority, section.order, result))

        scored.sort(key=lambda item: item[:3])
        return [item[3] for item in scored[:limit]]

    def _exact_match(self, section: DocumentSection, query: str) -> Optional[_SectionMatch]:
        text = section.text
        lowered = text.lower()
        priority_boost = section.label.priority * PRIORITY_WEIGHT

        count = lowered.count(query)
        if count:
            coverage = min(1.0, len(query) / max(1, len(text)))
            return _SectionMatch(
                score=PHRASE_BASE + coverage + priority_boost
                + min(count, MAX_COUNTED_OCCURRENCES) * OCCURRENCE_WEIGHT,
                position=lowered.index(query),
                length=len(query),
                match_type="exact",
            )

        terms = query.split()
        if len(terms) > 1 and all(term in lowered for term in terms):
            matched_chars = sum(len(term) for term in terms)
            occurrences = sum(lowered.count(term) for term in terms)
            coverage = min(1.0, matched_chars / max(1, len(text)))
            return _SectionMatch(
                score=ALL_TERMS_BASE + coverage + priority_boost
                + min(occurrences, MAX_COUNTED_OCCURRENCES) * OCCURRENCE_WEIGHT,
                position=lowered.index(terms[0]),
                length=len(terms[0]),
                match_type="exact",
            )
        return None

    def _fuzzy_match(
        self,
        section: DocumentSection,
        query: str,
        symbols: Sequence[SymbolRef],
        threshold: float,
    ) -> Optional[_SectionMatch]:
        text = section.text
        candidates = self.tokenizer.tokenize_with_offsets(text)
        # Whole symbol names compete alongside their split tokens
        for symbol in symbols:
            position = text.find(symbol.name)
            candidates.append((symbol.name.lower(), max(0, position)))
        if not candidates:
            return None

        words = query.split()
        total = 0.0
        best_position, best_length, best_ratio = 0, 0, -1.0
        for word in words:
            word_best, word_position = 0.0, 0
            for token, offset in candidates:
                ratio = similarity(word, token)
                if ratio > word_best:
                    word_best, word_position = ratio, offset
            total += word_best
            if word_best > best_ratio:
                best_ratio, best_position, best_length = word_best, word_position, len(word)

        average = total / len(words)
        if average < threshold:
            return None
        return _SectionMatch(score=average, position=best_position, length=best_length, match_type="fuzzy")

    @staticmethod
    def _symbol_match(
        symbols: Sequence[SymbolRef],
        query: str,
        threshold: float,
    ) -> Tuple[Optional[SymbolRef], float]:
        wanted = query.rsplit(".", 1)[-1] if " " not in query else query
        best: Optional[SymbolRef] = None
        best_boost = 0.0
        for symbol in symbols:
            name = symbol.name.lower()
            if name == query or name == wanted:
                return symbol, SYMBOL_EXACT_BOOST
            ratio = similarity(wanted, name)
            if ratio >= threshold and ratio * SYMBOL_FUZZY_WEIGHT > best_boost:
                best, best_boost = symbol, ratio * SYMBOL_FUZZY_WEIGHT
        return best, best_boost


def search(
    doc: StructuredDocument,
    query: str,
    fuzzy: bool = True,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> List[SearchResult]:
    """Rank ``doc``'s sections for ``query`` (score descending)."""
    return SearchRanker(fuzzy_threshold=threshold).search(doc, query, fuzzy=fuzzy, limit=limit)
