"""Tests for neighbor selection."""

import pytest

from bookrec.recommender.models import PreferenceVector
from bookrec.recommender.neighbors import select_neighbors


def test_select_neighbors_excludes_target_itself():
    target = PreferenceVector(1, {"T": 1.0})
    candidates = [PreferenceVector(1, {"T": 1.0}), PreferenceVector(2, {"T": 1.0})]

    neighbors = select_neighbors(target, candidates)

    assert [n.user_id for n in neighbors] == [2]
    assert neighbors[0].similarity == pytest.approx(1.0)


def test_select_neighbors_drops_users_below_threshold():
    """Test that a reader of unrelated categories is never a neighbor."""
    u5 = PreferenceVector(5, {"A": 1.0})
    u6 = PreferenceVector(6, {"Z": 1.0})

    assert select_neighbors(u5, [u6], threshold=0.3) == []


def test_select_neighbors_keeps_similarity_equal_to_threshold():
    target = PreferenceVector(1, {"I": 1.0})
    same = PreferenceVector(2, {"I": 1.0})

    neighbors = select_neighbors(target, [same], threshold=1.0)

    assert [n.user_id for n in neighbors] == [2]


def test_select_neighbors_orders_by_similarity_then_user_id():
    target = PreferenceVector(1, {"I": 1.0, "T": 1.0})
    candidates = [
        PreferenceVector(9, {"I": 1.0}),
        PreferenceVector(3, {"I": 1.0, "K": 1.0}),
        PreferenceVector(8, {"T": 1.0}),
        PreferenceVector(4, {"I": 1.0, "T": 1.0}),
    ]

    neighbors = select_neighbors(target, candidates, threshold=0.3)

    # 4 is identical; 8 and 9 tie at 0.707; 3 scores 0.5
    assert [n.user_id for n in neighbors] == [4, 8, 9, 3]
    similarities = [n.similarity for n in neighbors]
    assert similarities == sorted(similarities, reverse=True)


def test_select_neighbors_truncates_to_max_neighbors():
    target = PreferenceVector(1, {"I": 1.0})
    candidates = [PreferenceVector(user_id, {"I": 1.0}) for user_id in range(2, 12)]

    neighbors = select_neighbors(target, candidates, max_neighbors=5)

    assert [n.user_id for n in neighbors] == [2, 3, 4, 5, 6]


def test_select_neighbors_empty_target_or_candidates():
    assert select_neighbors(PreferenceVector(1, {}), [PreferenceVector(2, {"I": 1.0})]) == []
    assert select_neighbors(PreferenceVector(1, {"I": 1.0}), []) == []


def test_select_neighbors_orders_mixed_id_types():
    """Test that ties between integer and string ids put integers first."""
    target = PreferenceVector("u-1", {"I": 1.0})
    candidates = [
        PreferenceVector("u-9", {"I": 1.0}),
        PreferenceVector(3, {"I": 1.0}),
        PreferenceVector("u-2", {"I": 1.0}),
    ]

    neighbors = select_neighbors(target, candidates)

    assert [n.user_id for n in neighbors] == [3, "u-2", "u-9"]
