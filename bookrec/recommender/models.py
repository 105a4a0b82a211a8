"""Data types shared by the recommendation modules.

All of these are read models: they are rebuilt from the purchase history and
catalog sources for every request and never written back.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Hashable, Iterator, List, Optional, Tuple

UserId = Hashable

STRATEGY_POPULAR = "popular"
STRATEGY_SELF_PREFERENCE = "self_preference"
STRATEGY_NEIGHBORS = "neighbors"


def coerce_user_id(value: Any) -> UserId:
    """Normalize a user id read from text.

    Digit-only strings become ints so that ``"42"`` from a URL or a mixed
    CSV column matches the integer id 42. Other strings are stripped and
    kept as strings; non-string ids are returned unchanged.
    """
    if isinstance(value, str):
        value = value.strip()
        if value.isdecimal():
            return int(value)
    return value


def user_id_sort_key(user_id: UserId) -> Tuple[bool, Any]:
    """Sort key that orders integer ids before string ids."""
    return (isinstance(user_id, str), user_id)


@dataclass(frozen=True)
class PurchaseEvent:
    """One purchased order line that counts toward a user's preferences."""

    user_id: UserId
    book_id: int
    category_code: str
    quantity: int = 1


@dataclass(frozen=True)
class CandidateBook:
    """Catalog projection used for ranking.

    Attributes:
        book_id: Catalog identifier.
        category_code: Single-letter category of the book.
        available_stock: Copies available for sale.
        popularity_rank: Popularity count, higher means more popular.
        added_at: When the book entered the catalog, used as tie-break.
    """

    book_id: int
    category_code: str
    available_stock: int
    popularity_rank: int
    added_at: Optional[datetime] = None
    title: str = ""
    author: str = ""
    classification: str = ""

    @property
    def in_stock(self) -> bool:
        return self.available_stock > 0


@dataclass
class PreferenceVector:
    """Sparse category -> affinity mapping for a single user."""

    user_id: UserId
    scores: Dict[str, float] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.scores

    def categories_by_score(self) -> List[str]:
        """Return categories ordered by score descending, then code."""
        return sorted(self.scores, key=lambda code: (-self.scores[code], code))


@dataclass(frozen=True)
class Neighbor:
    """A similar user together with its similarity to the target."""

    vector: PreferenceVector
    similarity: float

    @property
    def user_id(self) -> UserId:
        return self.vector.user_id


@dataclass
class RecommendationResult:
    """Ordered, de-duplicated recommendations for one user.

    ``strategy`` records which tier produced the list: global popularity,
    the user's own preferences, or the neighbor-weighted path.
    """

    user_id: UserId
    books: List[CandidateBook] = field(default_factory=list)
    strategy: str = STRATEGY_POPULAR
    neighbors: List[Neighbor] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.books)

    def __iter__(self) -> Iterator[CandidateBook]:
        return iter(self.books)

    @property
    def book_ids(self) -> List[int]:
        return [book.book_id for book in self.books]
