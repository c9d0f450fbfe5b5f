"""Fuzzy ranking of application names against a query fragment."""

from typing import List, Optional, Sequence

from .cache.models import ApplicationRecord

# Any name starting with the query gets this score
PREFIX_SCORE = 100.0

# Contained matches score CONTAINS_SCALE / (offset + 1), always below PREFIX_SCORE
CONTAINS_SCALE = 50.0


def score_name(query: str, name: str) -> Optional[float]:
    """
    Score a name against a query.

    Args:
        query: Lowercased, non-empty query fragment
        name: Candidate display name

    Returns:
        Score (higher is better) or None if the name does not contain the query
    """
    position = name.lower().find(query)
    if position < 0:
        return None
    if position == 0:
        return PREFIX_SCORE
    return CONTAINS_SCALE / (position + 1)


def search(query: str, records: Sequence[ApplicationRecord]) -> List[int]:
    """
    Rank records against a query.

    An empty query returns every index in original order. Otherwise only
    names containing the query (case-insensitive) are kept; prefix matches
    rank first, then earlier matches before later ones, ties in index order.

    Args:
        query: Raw query text
        records: Records to rank

    Returns:
        Indices into records, best match first
    """
    if not query:
        return list(range(len(records)))

    query_lower = query.lower()
    scored = []
    for index, record in enumerate(records):
        score = score_name(query_lower, record.name)
        if score is not None:
            scored.append((score, index))

    # sort() is stable, so equal scores keep index order
    scored.sort(key=lambda item: item[0], reverse=True)
    return [index for _, index in scored]


__all__ = ["PREFIX_SCORE", "score_name", "search"]
