"""Subsequence fuzzy matching shared by pickers and command search."""

from typing import Tuple

from jaskmoney.config.constants import (
    FUZZY_CONSECUTIVE_BONUS,
    FUZZY_EXACT_LABEL_BONUS,
    FUZZY_PREFIX_BONUS,
)


def fuzzy_match_score(label: str, query: str) -> Tuple[bool, int]:
    """
    Match ``query`` as an in-order subsequence of ``label``, case-insensitively.

    The score starts at the query length and rewards a match at the start of
    the label, runs of adjacent characters and an exact whole-label match.
    An empty query matches everything with a score of zero.

    Returns:
        (matched, score)
    """
    if not query:
        return True, 0
    label_lower = label.lower()
    query_lower = query.lower()

    positions = []
    search_from = 0
    for ch in query_lower:
        found = label_lower.find(ch, search_from)
        if found < 0:
            return False, 0
        positions.append(found)
        search_from = found + 1

    score = len(query_lower)
    if positions[0] == 0:
        score += FUZZY_PREFIX_BONUS
    for prev, cur in zip(positions, positions[1:]):
        if cur == prev + 1:
            score += FUZZY_CONSECUTIVE_BONUS
    if label.strip().lower() == query.strip().lower():
        score += FUZZY_EXACT_LABEL_BONUS
    return True, score
