"""Reconcile a freeform extracted branch name onto the branch vocabulary."""

from __future__ import annotations

import logging
from typing import Sequence

from rapidfuzz.distance import Levenshtein

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.6


def _normalize(value: str | None) -> str:
    return str(value or "").strip().upper()


def edit_distance(left: str, right: str) -> int:
    """Unit-cost insert/delete/substitute distance."""
    return int(Levenshtein.distance(left, right))


def similarity(left: str, right: str) -> float:
    """(max_len - edit_distance) / max_len over the case-normalized strings."""
    a = _normalize(left)
    b = _normalize(right)
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return (max_len - edit_distance(a, b)) / max_len


def match_branch(extracted: str | None, vocabulary: Sequence[str]) -> str | None:
    """Pick the vocabulary entry closest to ``extracted``.

    Rules are tried in order and the first one producing a candidate wins:
    exact (case-insensitive, trimmed), containment in either direction, then
    the best similarity score above ``SIMILARITY_THRESHOLD``. Ties keep the
    earliest vocabulary entry. Returns None when nothing qualifies.
    """
    needle = _normalize(extracted)
    if not needle:
        return None

    for branch in vocabulary:
        if _normalize(branch) == needle:
            return branch

    for branch in vocabulary:
        candidate = _normalize(branch)
        if not candidate:
            continue
        if needle in candidate or candidate in needle:
            logger.debug("Branch %r matched %r by containment", extracted, branch)
            return branch

    best_match: str | None = None
    best_score = 0.0
    for branch in vocabulary:
        score = similarity(needle, branch)
        if score > best_score and score > SIMILARITY_THRESHOLD:
            best_score = score
            best_match = branch

    if best_match is None:
        logger.debug("No branch match for %r", extracted)
    else:
        logger.debug("Branch %r matched %r with similarity %.3f", extracted, best_match, best_score)
    return best_match
