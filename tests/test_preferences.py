"""Tests for preference vector construction."""

import random

import pytest

from bookrec.recommender.preferences import (
    aggregate_category_quantities,
    build_preference_vector,
    normalize_scores,
)
from helpers import purchase


def test_aggregate_sums_quantities_per_category():
    events = [
        purchase(1, 10, "I", 2),
        purchase(1, 11, "I", 1),
        purchase(1, 20, "A", 1),
    ]

    assert aggregate_category_quantities(events) == {"A": 1, "I": 3}


def test_aggregate_skips_non_positive_quantities():
    events = [
        purchase(1, 10, "I", 0),
        purchase(1, 11, "A", -2),
        purchase(1, 12, "T", 2),
    ]

    assert aggregate_category_quantities(events) == {"T": 2}


def test_zero_quantity_only_history_gives_empty_vector():
    """Test that a user whose lines all have quantity 0 is still cold."""
    vector = build_preference_vector(1, [purchase(1, 10, "I", 0)])

    assert vector.scores == {}
    assert vector.is_empty()


def test_build_preference_vector_normalizes_by_own_maximum():
    """Test that the largest category scores exactly 1.0."""
    events = [purchase(2, 101, "I", 3), purchase(2, 201, "A", 1)]

    vector = build_preference_vector(2, events)

    assert vector.user_id == 2
    assert vector.scores["I"] == 1.0
    assert vector.scores["A"] == pytest.approx(1 / 3)
    assert max(vector.scores.values()) == pytest.approx(1.0)


def test_build_preference_vector_empty_history():
    """Test that a user without purchases gets an empty vector."""
    vector = build_preference_vector(99, [])

    assert vector.scores == {}
    assert vector.is_empty()


def test_build_preference_vector_ignores_other_users_events():
    events = [purchase(1, 10, "I", 2), purchase(2, 20, "A", 5)]

    vector = build_preference_vector(1, events)

    assert vector.scores == {"I": 1.0}


def test_build_preference_vector_is_order_independent():
    """Test that shuffling the events does not change the vector."""
    events = [
        purchase(1, 10, "I", 3),
        purchase(1, 11, "T", 2),
        purchase(1, 12, "A", 1),
        purchase(1, 13, "I", 1),
        purchase(1, 14, "K", 4),
    ]
    expected = build_preference_vector(1, events).scores

    rng = random.Random(7)
    for _ in range(5):
        shuffled = events[:]
        rng.shuffle(shuffled)
        assert build_preference_vector(1, shuffled).scores == expected


def test_same_proportions_give_same_vector():
    """Test that purchase volume does not matter, only proportions."""
    light = build_preference_vector(1, [purchase(1, 1, "I", 2), purchase(1, 2, "A", 1)])
    heavy = build_preference_vector(2, [purchase(2, 1, "I", 20), purchase(2, 2, "A", 10)])

    assert light.scores == pytest.approx(heavy.scores)


def test_normalize_scores_edge_cases():
    assert normalize_scores({}) == {}
    assert normalize_scores({"A": 0.0}) == {"A": 0.0}
    assert normalize_scores({"A": 4.0, "B": 2.0}) == {"A": 1.0, "B": 0.5}


def test_categories_by_score_breaks_ties_by_code():
    vector = build_preference_vector(
        1,
        [purchase(1, 1, "T", 2), purchase(1, 2, "B", 2), purchase(1, 3, "A", 1)],
    )

    assert vector.categories_by_score() == ["B", "T", "A"]
