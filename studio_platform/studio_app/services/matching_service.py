"""Keyword-overlap producer matching."""

from __future__ import annotations

import random
from typing import Protocol, Sequence, TypeVar

from .catalog import GENRE_KEYWORDS


class _HasGenre(Protocol):
    genre: str | None


P = TypeVar("P", bound=_HasGenre)


def score_producer(genre_category: str | None, producer_genre: str | None) -> int:
    """Count the category keywords that appear inside the producer's genre text."""

    keywords = GENRE_KEYWORDS.get((genre_category or "").lower(), ())
    haystack = (producer_genre or "").lower()
    if not haystack:
        return 0
    return sum(1 for keyword in keywords if keyword in haystack)


def match_producer(
    genre_category: str | None,
    producers: Sequence[P],
    rng: random.Random | None = None,
) -> P | None:
    """Pick the best-scoring producer, or a random one when nobody scores.

    Equal scores keep their input order (``sorted`` is stable), so the
    earliest candidate wins a tie.
    """

    if not producers:
        return None
    ranked = sorted(
        ((score_producer(genre_category, p.genre), p) for p in producers),
        key=lambda item: item[0],
        reverse=True,
    )
    best_score, best = ranked[0]
    if best_score > 0:
        return best
    return (rng or random).choice(list(producers))
