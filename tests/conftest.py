"""Shared fixtures for BookRec tests."""

from typing import List

import pytest

from bookrec.recommender.models import CandidateBook
from helpers import make_book


@pytest.fixture
def popularity_catalog() -> List[CandidateBook]:
    """Twelve in-stock books with popularity 1..12 spread over categories."""
    codes = "IATK"
    return [
        make_book(book_id, codes[book_id % len(codes)], popularity_rank=book_id)
        for book_id in range(1, 13)
    ]


@pytest.fixture
def mixed_catalog() -> List[CandidateBook]:
    """Catalog with several books per category, one of them out of stock."""
    return [
        # Literature
        make_book(101, "I", popularity_rank=50),
        make_book(102, "I", popularity_rank=40),
        make_book(103, "I", popularity_rank=30),
        make_book(104, "I", popularity_rank=90, available_stock=0),
        # Marxism-Leninism
        make_book(201, "A", popularity_rank=20),
        make_book(202, "A", popularity_rank=10),
        # Industrial technology
        make_book(301, "T", popularity_rank=70),
        make_book(302, "T", popularity_rank=60),
        make_book(303, "T", popularity_rank=5),
        # History
        make_book(401, "K", popularity_rank=100),
        make_book(402, "K", popularity_rank=80),
        # Comprehensive works
        make_book(501, "Z", popularity_rank=15),
    ]
