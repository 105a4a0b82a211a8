"""Tiered book recommendation engine.

Recommendations are produced by the first tier that has enough data:

1. popular: the user has no counted purchases, so the most popular
   in-stock books are returned.
2. self_preference: the user has purchases but no similar users, so books
   are pulled from the user's own categories in preference order.
3. neighbors: category weights from the most similar users decide which
   categories to pull from, favoring categories the user has not bought.

Tiers 2 and 3 top up with popular books when their categories run dry.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set

from bookrec.config import RecommenderConfig
from bookrec.exceptions import InvalidRequestError
from bookrec.recommender.cache import PreferenceCache
from bookrec.recommender.categories import category_name
from bookrec.recommender.models import (
    STRATEGY_NEIGHBORS,
    STRATEGY_POPULAR,
    STRATEGY_SELF_PREFERENCE,
    CandidateBook,
    Neighbor,
    PreferenceVector,
    RecommendationResult,
    UserId,
)
from bookrec.recommender.neighbors import select_neighbors
from bookrec.recommender.preferences import (
    aggregate_category_quantities,
    build_preference_vector,
)
from bookrec.recommender.sources import (
    ORDER_BY_POPULARITY,
    CatalogSource,
    PurchaseHistorySource,
)

# Configure module logger
logger = logging.getLogger(__name__)


def recommend_books_for_user(
    user_id: UserId,
    count: int,
    catalog: CatalogSource,
    history: PurchaseHistorySource,
    config: Optional[RecommenderConfig] = None,
    cache: Optional[PreferenceCache] = None,
) -> RecommendationResult:
    """Recommend up to ``count`` books the user has not bought.

    Unknown users are treated like users without purchases. Empty histories,
    missing neighbors and an exhausted catalog only shorten the result.

    Args:
        user_id: User to recommend for.
        count: Maximum number of books to return. Must be positive.
        catalog: Source of candidate books.
        history: Source of counted purchase events.
        config: Engine parameters, defaults to :class:`RecommenderConfig`.
        cache: Optional cache of other users' preference vectors.

    Returns:
        RecommendationResult with the books and the strategy that produced
        them.

    Raises:
        InvalidRequestError: If ``count`` is not positive.
        DataSourceUnavailableError: If a source fails; propagated as is.

    Example:
        >>> result = recommend_books_for_user(42, 5, catalog, history)
        >>> print(result.strategy, result.book_ids)
    """
    if count <= 0:
        raise InvalidRequestError(
            f"count must be positive, got {count}",
            details={"user_id": user_id, "count": count},
        )

    config = config or RecommenderConfig()
    start_time = time.time()

    logger.info(
        "Starting recommendation generation",
        extra={"user_id": user_id, "count": count},
    )

    events = history.events_for_user(user_id)
    target = build_preference_vector(user_id, events)
    if cache is not None:
        cache.put(target)

    neighbors: List[Neighbor] = []
    purchased: Set[int] = {event.book_id for event in events}

    if target.is_empty():
        logger.info(
            "User has no purchase history, using popular books",
            extra={"user_id": user_id, "strategy": STRATEGY_POPULAR},
        )
        strategy = STRATEGY_POPULAR
        books = _popular_books(catalog, count, excluding=set())
    else:
        candidates = _load_candidate_vectors(history, user_id, cache)
        neighbors = select_neighbors(
            target,
            candidates,
            threshold=config.similarity_threshold,
            max_neighbors=config.max_neighbors,
        )

        if not neighbors:
            logger.info(
                "No similar users found, using own preferences",
                extra={"user_id": user_id, "strategy": STRATEGY_SELF_PREFERENCE},
            )
            strategy = STRATEGY_SELF_PREFERENCE
            categories = target.categories_by_score()
        else:
            strategy = STRATEGY_NEIGHBORS
            weights = accumulate_neighbor_weights(neighbors)
            categories = rank_categories(
                weights, target, config.purchased_category_weight
            )

        books = _books_from_categories(catalog, categories, count, purchased)
        if len(books) < count:
            selected_ids = {book.book_id for book in books}
            books.extend(
                _popular_books(catalog, count - len(books), excluding=purchased | selected_ids)
            )

    books = _finalize(books, purchased, count)
    total_time = time.time() - start_time

    logger.info(
        "Recommendations generated",
        extra={
            "user_id": user_id,
            "strategy": strategy,
            "num_neighbors": len(neighbors),
            "num_recommendations": len(books),
            "total_time_ms": round(total_time * 1000, 2),
        },
    )

    return RecommendationResult(
        user_id=user_id,
        books=books,
        strategy=strategy,
        neighbors=neighbors,
    )


def accumulate_neighbor_weights(neighbors: Sequence[Neighbor]) -> Dict[str, float]:
    """Sum ``similarity * score`` per category across neighbors."""
    weights: Dict[str, float] = defaultdict(float)
    for neighbor in neighbors:
        for code, score in neighbor.vector.scores.items():
            weights[code] += neighbor.similarity * score
    return dict(weights)


def rank_categories(
    weights: Dict[str, float],
    target: PreferenceVector,
    purchased_category_weight: float,
) -> List[str]:
    """Order categories by neighbor weight, discounting known ones.

    Categories already present in the target's vector have their weight
    multiplied by ``purchased_category_weight``. Ties go to the smaller code.
    """
    adjusted = {
        code: weight * purchased_category_weight if code in target.scores else weight
        for code, weight in weights.items()
    }
    return sorted(adjusted, key=lambda code: (-adjusted[code], code))


def _load_candidate_vectors(
    history: PurchaseHistorySource,
    user_id: UserId,
    cache: Optional[PreferenceCache],
) -> List[PreferenceVector]:
    """Build the preference vectors of every other user with history.

    Args:
        history: Source of counted purchase events.
        user_id: Target user, skipped.
        cache: Optional cache consulted before rebuilding a vector.

    Returns:
        Vectors in the order the history source lists its users.
    """
    vectors = []
    for other_id in history.all_users_with_purchase_history():
        if other_id == user_id:
            continue

        vector = cache.get(other_id) if cache is not None else None
        if vector is None:
            vector = build_preference_vector(other_id, history.events_for_user(other_id))
            if cache is not None:
                cache.put(vector)
        vectors.append(vector)

    return vectors


def _popular_books(
    catalog: CatalogSource,
    limit: int,
    excluding: Set[int],
) -> List[CandidateBook]:
    """Most popular in-stock books, skipping ``excluding``.

    Args:
        catalog: Source of candidate books.
        limit: Maximum number of books; non-positive returns nothing.
        excluding: Book ids to leave out.

    Returns:
        Books ordered by popularity, then recency.
    """
    if limit <= 0:
        return []
    return catalog.candidate_books(
        excluding=excluding,
        category=None,
        in_stock_only=True,
        limit=limit,
        order_by=ORDER_BY_POPULARITY,
    )


def _books_from_categories(
    catalog: CatalogSource,
    categories: Sequence[str],
    count: int,
    purchased: Set[int],
) -> List[CandidateBook]:
    """Pull in-stock, unpurchased books category by category.

    Args:
        catalog: Source of candidate books.
        categories: Category codes in the order they should be used.
        count: Number of books wanted.
        purchased: Book ids the user already bought.

    Returns:
        Up to ``count`` distinct books, grouped by category in the given
        order and by popularity within a category.
    """
    books: List[CandidateBook] = []
    selected_ids: Set[int] = set()

    for code in categories:
        if len(books) >= count:
            break

        in_category = catalog.candidate_books(
            excluding=purchased | selected_ids,
            category=code,
            in_stock_only=True,
            limit=count - len(books),
            order_by=ORDER_BY_POPULARITY,
        )
        for book in in_category:
            if book.book_id not in selected_ids:
                books.append(book)
                selected_ids.add(book.book_id)

    return books


def _finalize(
    books: Sequence[CandidateBook],
    purchased: Set[int],
    count: int,
) -> List[CandidateBook]:
    """Drop duplicates and purchased books, then cut to ``count``."""
    seen: Set[int] = set()
    result = []
    for book in books:
        if book.book_id in seen or book.book_id in purchased:
            continue
        seen.add(book.book_id)
        result.append(book)
        if len(result) == count:
            break
    return result


class BookRecommender:
    """Recommendation service bound to its data sources.

    Holds no per-request state; concurrent calls are independent. When a
    :class:`PreferenceCache` is given, call :meth:`invalidate_user` whenever
    one of the user's orders reaches a counted status.
    """

    def __init__(
        self,
        catalog: CatalogSource,
        history: PurchaseHistorySource,
        config: Optional[RecommenderConfig] = None,
        cache: Optional[PreferenceCache] = None,
    ):
        """Initialize.

        Args:
            catalog: Source of candidate books.
            history: Source of counted purchase events.
            config: Engine parameters, defaults to :class:`RecommenderConfig`.
            cache: Optional per-user preference cache.
        """
        self.catalog = catalog
        self.history = history
        self.config = config or RecommenderConfig()
        self.cache = cache

    def get_recommendations(
        self,
        user_id: UserId,
        count: Optional[int] = None,
    ) -> RecommendationResult:
        """Recommend books for a user, ``config.default_count`` by default.

        Raises:
            InvalidRequestError: If ``count`` exceeds ``config.max_count``.
        """
        if count is not None and count > self.config.max_count:
            raise InvalidRequestError(
                f"count must not exceed {self.config.max_count}, got {count}",
                details={"user_id": user_id, "count": count},
            )

        return recommend_books_for_user(
            user_id=user_id,
            count=self.config.default_count if count is None else count,
            catalog=self.catalog,
            history=self.history,
            config=self.config,
            cache=self.cache,
        )

    def get_user_purchase_stats(self, user_id: UserId) -> Dict[str, int]:
        """Units bought per category, before normalization."""
        return aggregate_category_quantities(self.history.events_for_user(user_id))

    def get_user_preference(self, user_id: UserId) -> PreferenceVector:
        """Normalized preference vector of a user."""
        vector = build_preference_vector(user_id, self.history.events_for_user(user_id))
        if self.cache is not None:
            self.cache.put(vector)
        return vector

    def get_user_category_report(self, user_id: UserId) -> List[Dict]:
        """Per-category purchase counts with names and preference scores.

        Rows are sorted by purchase count descending, then category code.
        """
        events = self.history.events_for_user(user_id)
        stats = aggregate_category_quantities(events)
        preference = build_preference_vector(user_id, events)

        report = [
            {
                "category_code": code,
                "category_name": category_name(code),
                "purchase_count": quantity,
                "preference_score": preference.scores.get(code, 0.0),
            }
            for code, quantity in stats.items()
        ]
        report.sort(key=lambda row: (-row["purchase_count"], row["category_code"]))
        return report

    def invalidate_user(self, user_id: UserId) -> bool:
        """Forget a user's cached vector. Returns True if one was cached."""
        if self.cache is None:
            return False
        invalidated = self.cache.invalidate(user_id)
        logger.debug(
            "Invalidated cached preference",
            extra={"user_id": user_id, "was_cached": invalidated},
        )
        return invalidated
