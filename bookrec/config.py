"""Configuration for the recommendation engine and the API service.

Engine knobs live in :class:`RecommenderConfig`. Service settings are read
from environment variables (a ``.env`` file in the project root is loaded
first) by :func:`load_settings`.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

DEFAULT_SIMILARITY_THRESHOLD = 0.3
DEFAULT_MAX_NEIGHBORS = 5
DEFAULT_PURCHASED_CATEGORY_WEIGHT = 0.5
DEFAULT_RECOMMENDATION_COUNT = 10
MAX_RECOMMENDATION_COUNT = 100

# Order statuses whose line items count toward a user's preferences
COUNTED_ORDER_STATUSES: FrozenSet[str] = frozenset({"paid", "delivered", "completed"})


@dataclass(frozen=True)
class RecommenderConfig:
    """Tunable parameters of the recommendation engine.

    Attributes:
        similarity_threshold: Minimum cosine similarity for a neighbor.
        max_neighbors: Number of most similar users kept.
        purchased_category_weight: Multiplier applied to the neighbor weight
            of categories the target user already buys from. Values below 1
            favor novel categories.
        default_count: Number of books returned when none is requested.
        max_count: Largest count a recommendation request may ask for.
    """

    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    max_neighbors: int = DEFAULT_MAX_NEIGHBORS
    purchased_category_weight: float = DEFAULT_PURCHASED_CATEGORY_WEIGHT
    default_count: int = DEFAULT_RECOMMENDATION_COUNT
    max_count: int = MAX_RECOMMENDATION_COUNT

    def __post_init__(self) -> None:
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                f"similarity_threshold must be in [0, 1], got {self.similarity_threshold}"
            )
        if self.max_neighbors <= 0:
            raise ValueError(f"max_neighbors must be positive, got {self.max_neighbors}")
        if self.purchased_category_weight < 0:
            raise ValueError(
                "purchased_category_weight must be non-negative, "
                f"got {self.purchased_category_weight}"
            )
        if self.default_count <= 0 or self.max_count < self.default_count:
            raise ValueError("default_count must be positive and not exceed max_count")


@dataclass(frozen=True)
class ServiceSettings:
    """Settings of the HTTP service."""

    catalog_csv: Optional[str] = None
    orders_csv: Optional[str] = None
    log_level: str = "INFO"
    enable_cache: bool = True
    recommender: RecommenderConfig = field(default_factory=RecommenderConfig)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> ServiceSettings:
    """Build service settings from ``BOOKREC_*`` environment variables."""
    recommender = RecommenderConfig(
        similarity_threshold=float(
            os.getenv("BOOKREC_SIMILARITY_THRESHOLD", DEFAULT_SIMILARITY_THRESHOLD)
        ),
        max_neighbors=int(os.getenv("BOOKREC_MAX_NEIGHBORS", DEFAULT_MAX_NEIGHBORS)),
        purchased_category_weight=float(
            os.getenv(
                "BOOKREC_PURCHASED_CATEGORY_WEIGHT", DEFAULT_PURCHASED_CATEGORY_WEIGHT
            )
        ),
    )

    return ServiceSettings(
        catalog_csv=os.getenv("BOOKREC_CATALOG_CSV", "data/catalog.csv"),
        orders_csv=os.getenv("BOOKREC_ORDERS_CSV", "data/orders.csv"),
        log_level=os.getenv("BOOKREC_LOG_LEVEL", "INFO"),
        enable_cache=_env_bool("BOOKREC_ENABLE_CACHE", True),
        recommender=recommender,
    )
