"""Stopwords for package documentation text.

Kept small: words such as ``get``, ``set``, ``new`` or ``open`` are common
API names and must stay searchable.
"""

STOPWORDS = {
    # Articles
    'a', 'an', 'the',

    # Pronouns
    'this', 'that', 'these', 'those',
    'it', 'its', 'itself',
    'they', 'them', 'their', 'we', 'our', 'you', 'your',
    'what', 'which', 'who', 'whom', 'whose',

    # Prepositions
    'with', 'from', 'to', 'for', 'of', 'in', 'on', 'at', 'by', 'as',
    'into', 'through', 'during', 'about', 'over',

    # Conjunctions
    'and', 'or', 'but', 'nor', 'so', 'yet',

    # Common verbs (be/have forms)
    'is', 'are', 'was', 'were', 'be', 'been', 'being',
    'have', 'has', 'had', 'having',
    'do', 'does', 'did',

    # Modal verbs
    'will', 'would', 'can', 'could', 'may', 'might', 'should', 'must',

    # Other common words
    'if', 'than', 'because', 'while', 'when', 'how', 'all', 'each',
    'more', 'most', 'some', 'such', 'no', 'not', 'only', 'very',
    'here', 'there', 'just', 'also',
}

# Words that look like stopwords but are frequent identifiers
IDENTIFIER_PRESERVE = {
    'get', 'set', 'new', 'open', 'close', 'run', 'use', 'map', 'filter',
    'import', 'export', 'type', 'class', 'default', 'any', 'none', 'null',
}


def is_stopword(word: str) -> bool:
    """Check if a word is a stopword (case-insensitive).

    Example:
        >>> is_stopword('The')
        True
        >>> is_stopword('get')
        False
    """
    word_lower = word.lower()
    if word_lower in IDENTIFIER_PRESERVE:
        return False
    return word_lower in STOPWORDS
