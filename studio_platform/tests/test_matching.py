"""Keyword-overlap producer matching."""

from __future__ import annotations

import random
from dataclasses import dataclass

from studio_app.services.matching_service import match_producer, score_producer


@dataclass
class Candidate:
    name: str
    genre: str | None


def test_score_counts_keyword_substrings():
    assert score_producer("hip-hop", "Hip Hop, Trap") == 3  # "trap" also contains "rap"
    assert score_producer("hip-hop", "Trap") == 2
    assert score_producer("rnb", "R&B, Soul") == 2
    assert score_producer("hip-hop", None) == 0
    assert score_producer("unknown", "Pop") == 0


def test_best_score_wins():
    producers = [Candidate("rock", "Rock"), Candidate("trap", "Hip Hop, Trap"), Candidate("pop", "Pop")]
    assert match_producer("hip-hop", producers).name == "trap"


def test_tie_keeps_input_order():
    producers = [Candidate("first", "Reggae"), Candidate("second", "Reggae")]
    assert match_producer("reggae", producers).name == "first"


def test_no_match_falls_back_to_random_choice():
    producers = [Candidate("a", "Jazz"), Candidate("b", ""), Candidate("c", None)]
    rng = random.Random(7)
    expected = random.Random(7).choice(producers)
    assert match_producer("hip-hop", producers, rng=rng) is expected


def test_other_category_always_random():
    producers = [Candidate("a", "Anything")]
    assert match_producer("other", producers).name == "a"


def test_empty_list_returns_none():
    assert match_producer("pop", []) is None
