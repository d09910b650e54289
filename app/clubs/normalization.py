"""
Text normalization for club search.

Czech club names mix diacritics and abbreviated club-type prefixes
("FK", "TJ", "SK"), so queries are compared after stripping combining
marks and, for local search, after expanding the leading abbreviation.
"""

import unicodedata


# Leading club-type abbreviations and their spelled-out form
CLUB_TYPE_ABBREVIATIONS = {
    "fk": "fotbalový klub",
    "tj": "tělovýchovná jednota",
    "sk": "sportovní klub",
}


def strip_diacritics(text: str) -> str:
    """
    Remove combining marks after NFD decomposition.

    Examples:
        "Příbram"          -> "Pribram"
        "České Budějovice" -> "Ceske Budejovice"
        "Hranice"          -> "Hranice"
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


def fold(text: str) -> str:
    """Lower-case and strip diacritics (comparison key)."""
    return strip_diacritics(text.lower())


def expand_abbreviation(token: str) -> str:
    """Expand a club-type abbreviation; unknown tokens pass through."""
    return CLUB_TYPE_ABBREVIATIONS.get(token.lower(), token)


def normalize_club_search_query(query: str) -> str:
    """
    Lower-case a query and expand its first token.

    Examples:
        "FK Teplice" -> "fotbalový klub teplice"
        "Sparta"     -> "sparta"
        "   "        -> ""
    """
    parts = query.strip().lower().split()
    if not parts:
        return ""
    parts[0] = expand_abbreviation(parts[0])
    return " ".join(parts)


def matches_token_prefix(text: str, query: str) -> bool:
    """True if any whitespace-delimited token of ``text`` starts with ``query``."""
    return any(word.startswith(query) for word in text.split())
