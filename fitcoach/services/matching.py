# services/matching.py
"""Name resolution for exercises and meals.

Every candidate gets a score against the query:

    4  exact match (after normalization)
    3  one name is a prefix of the other
    2  one name contains the other
    (0, 1]  token-set overlap (Jaccard)

The best score wins; ties go to the longer (more specific) candidate and then
to the earlier one in catalog order.
"""

import re
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")

EXACT = 4.0
PREFIX = 3.0
CONTAINS = 2.0

_WHITESPACE = re.compile(r"\s+")
_TOKEN_SPLIT = re.compile(r"[\s\-_/]+")


def normalize_name(name: Optional[str]) -> str:
    if not name:
        return ""
    return _WHITESPACE.sub(" ", name.strip().lower())


def _tokens(name: str) -> set[str]:
    return {token for token in _TOKEN_SPLIT.split(name) if token}


def score_name(query: Optional[str], candidate: Optional[str]) -> float:
    q = normalize_name(query)
    c = normalize_name(candidate)
    if not q or not c:
        return 0.0
    if q == c:
        return EXACT
    if c.startswith(q) or q.startswith(c):
        return PREFIX
    if q in c or c in q:
        return CONTAINS
    q_tokens, c_tokens = _tokens(q), _tokens(c)
    union = q_tokens | c_tokens
    if not union:
        return 0.0
    return len(q_tokens & c_tokens) / len(union)


def rank_matches(
    query: Optional[str],
    candidates: Iterable[T],
    key: Callable[[T], str] = lambda item: item,
    min_score: float = 0.0,
) -> list[tuple[float, T]]:
    """All candidates scoring above ``min_score``, best first."""
    scored = []
    for index, candidate in enumerate(candidates):
        name = key(candidate)
        score = score_name(query, name)
        if score > min_score:
            scored.append(((score, len(normalize_name(name)), -index), candidate))
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [(rank[0], candidate) for rank, candidate in scored]


def best_match(
    query: Optional[str],
    candidates: Iterable[T],
    key: Callable[[T], str] = lambda item: item,
    min_score: float = 0.0,
) -> Optional[T]:
    ranked = rank_matches(query, candidates, key=key, min_score=min_score)
    return ranked[0][1] if ranked else None


def same_body_part(a: Optional[str], b: Optional[str]) -> bool:
    """Body-part tags match when equal or when one contains the other ("back" / "upper back")."""
    a, b = normalize_name(a), normalize_name(b)
    return bool(a and b) and (a == b or a in b or b in a)
