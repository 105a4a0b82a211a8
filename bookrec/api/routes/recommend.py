"""Recommendation endpoints for the BookRec API.

This module provides API endpoints for personalized book recommendations and
for the per-user preference analytics built from purchase history.
"""

import logging
import time
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from bookrec.api.metrics import metrics_service
from bookrec.api.state import get_recommender, reload_recommender
from bookrec.recommender.categories import category_name
from bookrec.recommender.engine import BookRecommender
from bookrec.recommender.models import STRATEGY_POPULAR, CandidateBook, coerce_user_id

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)

RECOMMEND_REASON = "Recommended from your purchase history"
POPULAR_REASON = "Popular with readers"


class BookOut(BaseModel):
    """A recommended book."""

    book_id: int
    title: str = ""
    author: str = ""
    classification: str = ""
    category_code: str
    category_name: str
    available_stock: int
    popularity_rank: int
    recommend_reason: Optional[str] = None


class NeighborOut(BaseModel):
    """A similar user that contributed to the recommendations."""

    user_id: Union[int, str]
    similarity: float


class RecommendationResponse(BaseModel):
    """Response model for recommendation requests.

    Attributes:
        user_id: The user ID for which recommendations were generated.
        strategy: Tier that produced the list.
        recommendations: Ordered list of recommended books.
        neighbors: Similar users, only filled when ``explain`` is set.
    """

    user_id: Union[int, str] = Field(..., description="User ID for recommendations")
    strategy: str = Field(..., description="popular, self_preference or neighbors")
    recommendations: List[BookOut] = Field(
        ..., description="Ordered list of recommended books"
    )
    neighbors: Optional[List[NeighborOut]] = Field(
        default=None, description="Similar users (explain mode only)"
    )


class CategoryStatOut(BaseModel):
    category_code: str
    category_name: str
    purchase_count: int
    preference_score: float


class PreferenceResponse(BaseModel):
    user_id: Union[int, str]
    scores: Dict[str, float]


def _book_out(book: CandidateBook, strategy: str) -> BookOut:
    return BookOut(
        book_id=book.book_id,
        title=book.title,
        author=book.author,
        classification=book.classification,
        category_code=book.category_code,
        category_name=category_name(book.category_code),
        available_stock=book.available_stock,
        popularity_rank=book.popularity_rank,
        recommend_reason=POPULAR_REASON if strategy == STRATEGY_POPULAR else RECOMMEND_REASON,
    )


@router.post("/reload-data")
def reload_data() -> Dict[str, str]:
    """Reload the catalog and order exports from disk.

    Useful after a new export has been written, without restarting the
    server.
    """
    logger.info("Reloading recommendation data...")
    reload_recommender()
    return {"status": "Data reloaded successfully"}


@router.get("/{user_id}", response_model=RecommendationResponse)
def get_recommendations(
    user_id: str,
    count: Optional[int] = None,
    explain: bool = False,
    recommender: BookRecommender = Depends(get_recommender),
) -> RecommendationResponse:
    """Get book recommendations for a user.

    Args:
        user_id: User ID for which to generate recommendations. Numeric ids
            are matched as integers.
        count: Number of books to return. Defaults to the configured
            default count and may not exceed the configured maximum.
        explain: If True, include the neighbors and their similarities.

    Returns:
        RecommendationResponse with the books and the strategy used.

    Example:
        GET /recommend/42?count=5
        Returns up to 5 book recommendations for user 42.
    """
    user_id = coerce_user_id(user_id)
    start_time = time.time()

    try:
        result = recommender.get_recommendations(user_id, count)
    except Exception:
        metrics_service.record_error()
        raise

    latency_ms = (time.time() - start_time) * 1000
    metrics_service.record_recommendation(result.strategy, latency_ms)

    neighbors = None
    if explain:
        neighbors = [
            NeighborOut(user_id=n.user_id, similarity=round(n.similarity, 4))
            for n in result.neighbors
        ]

    return RecommendationResponse(
        user_id=user_id,
        strategy=result.strategy,
        recommendations=[_book_out(book, result.strategy) for book in result.books],
        neighbors=neighbors,
    )


@router.get("/{user_id}/stats", response_model=List[CategoryStatOut])
def get_user_stats(
    user_id: str,
    recommender: BookRecommender = Depends(get_recommender),
) -> List[CategoryStatOut]:
    """Per-category purchase counts and preference scores of a user."""
    user_id = coerce_user_id(user_id)
    return [
        CategoryStatOut(**row) for row in recommender.get_user_category_report(user_id)
    ]


@router.get("/{user_id}/preference", response_model=PreferenceResponse)
def get_user_preference(
    user_id: str,
    recommender: BookRecommender = Depends(get_recommender),
) -> PreferenceResponse:
    """Normalized category preference vector of a user."""
    user_id = coerce_user_id(user_id)
    vector = recommender.get_user_preference(user_id)
    return PreferenceResponse(user_id=user_id, scores=vector.scores)


@router.post("/{user_id}/invalidate")
def invalidate_user(
    user_id: str,
    recommender: BookRecommender = Depends(get_recommender),
) -> Dict:
    """Drop a user's cached preferences after one of their orders completes."""
    user_id = coerce_user_id(user_id)
    invalidated = recommender.invalidate_user(user_id)
    return {"user_id": user_id, "invalidated": invalidated}
