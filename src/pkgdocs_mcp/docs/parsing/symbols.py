"""Symbol extraction from API sections.

Recognizes signature-like lines in the common shapes package docs use:

- ``func Name(...)`` and Go methods ``func (r *T) Name(...)``
- ``def name(...)``, ``async def name(...)``
- ``fn name(...)``, ``pub fn name(...)``
- ``class|struct|enum|trait|interface|protocol|type Name``
- generic ``name(params)`` with an optional ``-> ret``, ``: ret`` or ``=> ret``

Inline code spans (backticks) are scanned with the same patterns.
"""

import re
from typing import Iterator, List, Optional, Sequence, Tuple

from pkgdocs_mcp.docs.models import DocumentSection, SymbolRef

SIGNATURE_MAX_CHARS = 200

_GO_FUNC = re.compile(r"^func\s+(?:\([^)]*\)\s*)?([A-Za-z_]\w*)\s*(?:\[[^\]]*\])?\s*\(")
_PY_DEF = re.compile(r"^(?:async\s+)?def\s+([A-Za-z_]\w*)\s*\(")
_RUST_FN = re.compile(
    r"^(?:pub(?:\([^)]*\))?\s+)?(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?(?:extern\s+\"[^\"]*\"\s+)?fn\s+([A-Za-z_]\w*)"
)
_DECLARATION = re.compile(
    r"^(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:pub(?:\([^)]*\))?\s+)?"
    r"(?:(?:public|open|final|abstract|sealed|data|static)\s+)*"
    r"(?:class|struct|enum|trait|interface|protocol|type)\s+([A-Za-z_]\w*)"
)
_GENERIC_CALL = re.compile(
    r"^(?:[\w.]+\s*=\s*)?"
    r"(?:(?:export|default|declare|public|private|protected|static|async|function|const|let|var|new)\s+)*"
    r"((?:[A-Za-z_$][\w$]*\.)*[A-Za-z_$][\w$]*)"
    r"\s*(?:<[^>]*>)?\s*\((.*)\)"
    r"\s*(?:(?:->|=>|:)\s*\S.*)?$"
)
_INLINE_CODE = re.compile(r"`([^`\n]+)`")

_CONTROL_WORDS = frozenset(
    {
        "if", "elif", "else", "for", "while", "switch", "case", "catch", "except",
        "return", "with", "match", "await", "yield", "assert", "print", "super",
        "typeof", "sizeof", "require", "import",
    }
)


def match_signature(line: str) -> Optional[Tuple[str, str]]:
    """Return ``(name, signature)`` when ``line`` looks like a signature.

    Example:
        >>> match_signature("func (d *Decoder) Decode(v any) error")
        ('Decode', 'func (d *Decoder) Decode(v any) error')
        >>> match_signature("connect(url: str) -> Client")
        ('connect', 'connect(url: str) -> Client')
        >>> match_signature("if (ready) {") is None
        True
    """
    text = line.strip()
    if not text or text.startswith(("#", "//", "/*", "*", "- ", ">")):
        return None

    for pattern in (_GO_FUNC, _PY_DEF, _RUST_FN, _DECLARATION):
        match = pattern.match(text)
        if match:
            return match.group(1), _cap(text)

    match = _GENERIC_CALL.match(text.rstrip(";{").rstrip())
    if match:
        name = match.group(1).rsplit(".", 1)[-1]
        if name.lower() not in _CONTROL_WORDS:
            return name, _cap(text)
    return None


def _cap(signature: str) -> str:
    if len(signature) <= SIGNATURE_MAX_CHARS:
        return signature
    return signature[: SIGNATURE_MAX_CHARS - 3] + "..."


def _candidate_lines(body: str) -> Iterator[str]:
    for line in body.split("\n"):
        yield line
        for span in _INLINE_CODE.findall(line):
            yield span


def extract_symbols(sections: Sequence[DocumentSection], indexes: Sequence[int]) -> Tuple[SymbolRef, ...]:
    """Extract symbols from ``sections[i]`` for each ``i`` in ``indexes``.

    Headings are scanned before bodies so that ``### connect(url)`` style
    headings win over later mentions. The first occurrence of a name wins.
    """
    seen = set()
    symbols: List[SymbolRef] = []
    for index in indexes:
        section = sections[index]
        candidates = list(_candidate_lines(section.heading)) if section.heading else []
        candidates.extend(_candidate_lines(section.body))
        for candidate in candidates:
            found = match_signature(candidate)
            if found is None:
                continue
            name, signature = found
            if name in seen:
                continue
            seen.add(name)
            symbols.append(SymbolRef(name=name, signature=signature, section_index=index))
    return tuple(symbols)
