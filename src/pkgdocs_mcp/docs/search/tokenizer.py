"""Text tokenization for in-document search.

Documentation mixes prose with identifiers, so tokens are split the way
code names are built: CamelCase boundaries, dotted paths, underscores and
hyphens. Decimal numbers such as ``1.5`` stay intact.
"""

import re
from typing import List, Set, Tuple

from pkgdocs_mcp.docs.search.stopwords import is_stopword


class TextTokenizer:
    """Tokenizer for technical documentation text.

    Usage:
        >>> tokenizer = TextTokenizer()
        >>> tokenizer.tokenize("Use http.NewRequest for a custom request")
        ['use', 'http', 'new', 'request', 'custom', 'request']

        >>> tokenizer.tokenize("read_timeout and max-retries")
        ['read', 'timeout', 'max', 'retries']

        >>> tokenizer.tokenize("Requires Python 3.8")
        ['requires', 'python', '3.8']
    """

    WORD_PATTERN = re.compile(r"[\w$][\w.$-]*")

    NUMERIC_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

    # Lowercase-to-uppercase and acronym-to-word boundaries: "parseHTTPResponse"
    CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

    def __init__(self, remove_stopwords: bool = True, min_length: int = 2):
        self.remove_stopwords = remove_stopwords
        self.min_length = min_length

    def tokenize(self, text: str) -> List[str]:
        """Tokenize text into lowercase words, in order of appearance."""
        return [token for token, _ in self.tokenize_with_offsets(text)]

    def tokenize_with_offsets(self, text: str) -> List[Tuple[str, int]]:
        """Tokenize text, keeping the offset of the word each token came from.

        Offsets let callers center a snippet on a fuzzy match.
        """
        if not text:
            return []

        tokens: List[Tuple[str, int]] = []
        for match in self.WORD_PATTERN.finditer(text):
            word = match.group(0).strip(".-")
            if not word:
                continue
            if self.NUMERIC_PATTERN.match(word):
                tokens.append((word, match.start()))
                continue
            for part in re.split(r"[._$-]+", word):
                for piece in self.CAMEL_BOUNDARY.split(part):
                    piece = piece.lower()
                    if self._is_valid_token(piece):
                        tokens.append((piece, match.start()))
        return tokens

    def tokenize_to_set(self, text: str) -> Set[str]:
        return set(self.tokenize(text))

    def _is_valid_token(self, word: str) -> bool:
        if not word:
            return False
        if word.isdigit():
            return True
        if len(word) < self.min_length:
            return False
        if self.remove_stopwords and is_stopword(word):
            return False
        return True

    @staticmethod
    def normalize_query(query: str) -> str:
        """Lowercase and collapse whitespace.

        Example:
            >>> TextTokenizer.normalize_query("  Read   Timeout ")
            'read timeout'
        """
        return " ".join(query.split()).lower()
