"""Tests for category code extraction."""

import pytest

from bookrec.recommender.categories import (
    UNCATEGORIZED,
    category_name,
    extract_category_code,
)


@pytest.mark.parametrize(
    "classification, expected",
    [
        ("A41/2-1=2", "A"),
        ("I247.5/1", "I"),
        ("TP312,TP311", "T"),
        ("i247.5", "I"),
        ("  K825.6", "K"),
        ("123-B45", "B"),
        ("(9)R2", "R"),
    ],
)
def test_extract_category_code_returns_first_letter(classification, expected):
    """Test that the first letter of the first call number is returned."""
    assert extract_category_code(classification) == expected


def test_extract_category_code_only_uses_first_token():
    """Test that letters after the first comma are ignored."""
    assert extract_category_code("123, I247") == UNCATEGORIZED


@pytest.mark.parametrize("classification", ["", "   ", None, "12345", "--/=", ",A12"])
def test_extract_category_code_falls_back_to_sentinel(classification):
    """Test that inputs without a letter map to the catch-all class."""
    assert extract_category_code(classification) == "Z"


def test_category_name_known_and_unknown_codes():
    assert category_name("I") == "Literature"
    assert category_name("t") == "Industrial Technology"
    # Letters unused by the scheme fall back to comprehensive works
    assert category_name("W") == category_name("Z")
    assert category_name("") == "Comprehensive Works"
