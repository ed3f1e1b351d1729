"""Section normalizer: raw fetch result -> StructuredDocument.

Classification of each heading block, in priority order:

1. boilerplate (sponsors, license, changelog...) is dropped with its body
2. usage / getting started / quick start -> Usage
3. api / reference / methods / functions / classes -> API
4. example / demo, only when the body has fenced code -> Example
5. the preamble, or else the first unlabeled section -> Description
6. anything else -> Other

Subheadings inherit drop/Usage/API/Example from their nearest ancestor
heading; the stronger of the inherited and own classification wins.
"""

from dataclasses import dataclass
import logging
import re
from typing import List, Optional, Sequence, Tuple

from pkgdocs_mcp.docs.models import (
    DocumentSection,
    RawFetchResult,
    ResolutionKey,
    SectionLabel,
    StructuredDocument,
)
from pkgdocs_mcp.docs.parsing.markup import HeadingBlock, to_plain_sections
from pkgdocs_mcp.docs.parsing.symbols import extract_symbols

logger = logging.getLogger("pkgdocs-mcp.resolver")

# Marker for blocks that are removed together with their subsections
_DROP = "drop"

# Inheritable outcomes, strongest first
_INHERIT_ORDER = (_DROP, SectionLabel.USAGE, SectionLabel.API, SectionLabel.EXAMPLE)

_FENCE = re.compile(r"^ {0,3}(```|~~~)", re.MULTILINE)

DEGRADED_MESSAGE = "No usable documentation sections were found in {source} for {key}."


def _whole(words: str) -> str:
    """Pattern matching a heading that consists of ``words`` alone."""
    return rf"^\W*(?:{words})\W*$"


@dataclass(frozen=True)
class SectionPolicy:
    """Heading patterns used to classify sections.

    Patterns are regular expressions searched case-insensitively in the
    heading text. Generic words such as "support" or "tests" only count as
    boilerplate when they are the whole heading, so "API Support" or
    "Testing utilities" keep their content.
    """

    boilerplate: Tuple[str, ...] = (
        r"\bsponsors?(hip)?\b",
        r"\bauthors?\b",
        r"\bcontributors?\b",
        r"\blicen[cs]es?\b",
        r"\bchange ?log\b",
        r"\brelease notes\b",
        r"\bcode of conduct\b",
        r"\btable of contents\b",
        r"\bcontributing\b",
        r"\bbadges?\b",
        r"\bbuild status\b",
        r"\bdonat(e|ions?)\b",
        r"\backnowledge?ments?\b",
        r"\bcredits?\b",
        r"\bbackers\b",
        r"\bfunding\b",
        _whole(r"contents|toc"),
        _whole(r"people|community"),
        _whole(r"security( policy)?"),
        _whole(r"(running )?tests?|testing"),
        _whole(r"(test )?coverage"),
        _whole(r"(getting )?support"),
    )
    usage: Tuple[str, ...] = (
        r"\busage\b",
        r"\bgetting started\b",
        r"\bquick ?start\b",
    )
    api: Tuple[str, ...] = (
        r"\bapi\b",
        r"\breference\b",
        r"\bmethods?\b",
        r"\bfunctions?\b",
        r"\bclass(es)?\b",
        r"\binterfaces?\b",
    )
    example: Tuple[str, ...] = (
        r"\bexamples?\b",
        r"\bdemos?\b",
    )

    @staticmethod
    def _matches(patterns: Sequence[str], heading: str) -> bool:
        return any(re.search(pattern, heading, re.IGNORECASE) for pattern in patterns)

    def is_boilerplate(self, heading: str) -> bool:
        return self._matches(self.boilerplate, heading)

    def own_outcome(self, heading: str, body: str):
        """Classify a heading on its own: _DROP, a label, or None."""
        if not heading:
            return None
        if self.is_boilerplate(heading):
            return _DROP
        if self._matches(self.usage, heading):
            return SectionLabel.USAGE
        if self._matches(self.api, heading):
            return SectionLabel.API
        if self._matches(self.example, heading) and _FENCE.search(body):
            return SectionLabel.EXAMPLE
        return None


def _strongest(*outcomes):
    for candidate in _INHERIT_ORDER:
        if candidate in outcomes:
            return candidate
    return None


class SectionNormalizer:
    """Turns raw documentation into an ordered, labeled document.

    The output depends only on the raw result and the key, so normalizing
    the same input twice yields equal documents.

    Usage:
        >>> normalizer = SectionNormalizer()
        >>> doc = normalizer.normalize(raw, key)
        >>> [s.label.value for s in doc.sections]
        ['description', 'usage', 'api']
    """

    def __init__(self, policy: Optional[SectionPolicy] = None):
        self.policy = policy or SectionPolicy()

    def normalize(self, raw: RawFetchResult, key: ResolutionKey) -> StructuredDocument:
        try:
            blocks = to_plain_sections(raw.content, raw.content_format)
        except Exception as exc:
            logger.warning("Could not split %s content from %s: %r", raw.content_format.value, raw.source_name, exc)
            blocks = []

        sections = self._classify(blocks)
        if not sections:
            logger.debug("Degraded document for %s from %s", key.describe(), raw.source_name)
            fallback = DocumentSection(
                label=SectionLabel.OTHER,
                heading="",
                body=DEGRADED_MESSAGE.format(source=raw.source_name, key=key.describe()),
                order=0,
            )
            return StructuredDocument(
                key=key,
                sections=(fallback,),
                symbols=(),
                source_kind=raw.source_kind,
                source_name=raw.source_name,
                cached_at=raw.fetched_at,
                degraded=True,
            )

        # A symbol lookup documents one symbol, so every section is scanned
        if key.symbol:
            indexes = list(range(len(sections)))
        else:
            indexes = [i for i, s in enumerate(sections) if s.label == SectionLabel.API]

        return StructuredDocument(
            key=key,
            sections=tuple(sections),
            symbols=extract_symbols(sections, indexes),
            source_kind=raw.source_kind,
            source_name=raw.source_name,
            cached_at=raw.fetched_at,
            degraded=False,
        )

    def _classify(self, blocks: Sequence[HeadingBlock]) -> List[DocumentSection]:
        sections: List[DocumentSection] = []
        stack: List[Tuple[int, object]] = []
        description_taken = False

        for index, block in enumerate(blocks):
            if block.level == 0:
                if block.body:
                    sections.append(self._section(SectionLabel.DESCRIPTION, block, len(sections)))
                    description_taken = True
                continue

            while stack and stack[-1][0] >= block.level:
                stack.pop()

            # Leading level-1 heading with no preamble text is the document title
            is_title = (
                index == 1
                and block.level == 1
                and not description_taken
                and not (blocks[0].level == 0 and blocks[0].body)
            )
            if is_title:
                stack.append((block.level, None))
                if block.body:
                    sections.append(self._section(SectionLabel.DESCRIPTION, block, len(sections)))
                    description_taken = True
                continue

            inherited = stack[-1][1] if stack else None
            outcome = _strongest(self.policy.own_outcome(block.heading, block.body), inherited)
            stack.append((block.level, outcome))

            if outcome == _DROP or not block.body:
                continue
            if isinstance(outcome, SectionLabel):
                label = outcome
            elif not description_taken:
                label = SectionLabel.DESCRIPTION
                description_taken = True
            else:
                label = SectionLabel.OTHER
            sections.append(self._section(label, block, len(sections)))

        return sections

    @staticmethod
    def _section(label: SectionLabel, block: HeadingBlock, order: int) -> DocumentSection:
        return DocumentSection(label=label, heading=block.heading, body=block.body, order=order)
