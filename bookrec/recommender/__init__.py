"""Recommendation core for BookRec.

This module contains category extraction, preference vector construction,
cosine similarity, neighbor selection and the tiered recommendation engine
that turns a user's purchase history into ranked book suggestions.
"""

from bookrec.recommender.engine import BookRecommender, recommend_books_for_user
from bookrec.recommender.models import (
    CandidateBook,
    Neighbor,
    PreferenceVector,
    PurchaseEvent,
    RecommendationResult,
)

__all__ = [
    "BookRecommender",
    "CandidateBook",
    "Neighbor",
    "PreferenceVector",
    "PurchaseEvent",
    "RecommendationResult",
    "recommend_books_for_user",
]
