"""Fuzzy matching of recipe ingredient names against inventory article names.

The best match only seeds MappingRow.suggestion. It is never treated as a
confirmed mapping; only a user correction resolves a mapping row.
"""

import re
import unicodedata
from typing import Optional

EXACT_SCORE = 100
CONTAINS_SCORE = 50
TOKEN_SCORE = 5
MIN_SCORE = 10

_FOLDS = {"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss"}


def normalize_name(text: Optional[str]) -> str:
    """Normalize a name for matching: 'Pommes Frites (TK)' -> 'pommes frites tk'."""
    if not text:
        return ""
    normalized = str(text).lower()
    for char, replacement in _FOLDS.items():
        normalized = normalized.replace(char, replacement)

    # Fold remaining diacritics (é -> e)
    normalized = unicodedata.normalize("NFKD", normalized)
    normalized = "".join(c for c in normalized if not unicodedata.combining(c))

    normalized = re.sub(r"[^\w\s]|_", " ", normalized)
    return " ".join(normalized.split())


def score(a: str, b: str) -> int:
    """Score two already-normalized names."""
    if not a or not b:
        return 0
    total = 0
    if a == b:
        total += EXACT_SCORE
    if a in b or b in a:
        total += CONTAINS_SCORE
    total += TOKEN_SCORE * len(set(a.split()) & set(b.split()))
    return total


def rank(name: str, candidates: list[str], limit: int = 5) -> list[tuple[str, int]]:
    """
    Return up to `limit` (candidate, score) pairs scoring at least MIN_SCORE,
    best first. Equal scores keep candidate order.
    """
    target = normalize_name(name)
    scored = []
    for candidate in candidates:
        s = score(target, normalize_name(candidate))
        if s >= MIN_SCORE:
            scored.append((candidate, s))
    scored.sort(key=lambda x: x[1], reverse=True)
    return scored[:limit]


def suggest(name: str, candidates: list[str]) -> Optional[str]:
    """Best-guess inventory article for a recipe ingredient name, or None."""
    target = normalize_name(name)
    best, best_score = None, 0
    for candidate in candidates:
        s = score(target, normalize_name(candidate))
        # strict > keeps the first-seen candidate on ties
        if s > best_score:
            best, best_score = candidate, s
    return best if best_score >= MIN_SCORE else None
