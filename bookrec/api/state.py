"""Lazily loaded recommender shared by the API routes.

The CSV-backed sources are loaded on first use and kept until
``reload_recommender`` is called. Tests swap in fixture data through
``app.dependency_overrides[get_recommender]``.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from bookrec.config import ServiceSettings, load_settings
from bookrec.recommender.cache import PreferenceCache
from bookrec.recommender.engine import BookRecommender
from bookrec.recommender.sources import load_catalog_csv, load_orders_csv

# Configure module logger
logger = logging.getLogger(__name__)

_lock = threading.Lock()
_recommender: Optional[BookRecommender] = None
_loaded_at: Optional[datetime] = None


def _build_recommender(settings: ServiceSettings) -> BookRecommender:
    catalog = load_catalog_csv(settings.catalog_csv)
    history = load_orders_csv(settings.orders_csv, catalog=catalog)
    cache = PreferenceCache() if settings.enable_cache else None
    return BookRecommender(
        catalog=catalog,
        history=history,
        config=settings.recommender,
        cache=cache,
    )


def get_recommender() -> BookRecommender:
    """Return the shared recommender, loading data on first use.

    Raises:
        DataSourceUnavailableError: If the catalog or orders cannot be read.
    """
    global _recommender, _loaded_at

    if _recommender is not None:
        return _recommender

    with _lock:
        if _recommender is None:
            settings = load_settings()
            logger.info(
                "Loading recommendation data",
                extra={
                    "catalog_csv": settings.catalog_csv,
                    "orders_csv": settings.orders_csv,
                },
            )
            _recommender = _build_recommender(settings)
            _loaded_at = datetime.now(timezone.utc)
            logger.info("Recommendation data loaded successfully")

    return _recommender


def reload_recommender() -> BookRecommender:
    """Drop the loaded data and load it again."""
    global _recommender, _loaded_at

    with _lock:
        _recommender = None
        _loaded_at = None

    return get_recommender()


def get_status() -> Dict:
    """Describe the currently loaded data without triggering a load."""
    recommender = _recommender
    if recommender is None:
        return {
            "data_loaded": False,
            "timestamp_last_loaded": None,
            "num_users": 0,
            "num_books": 0,
            "cache": None,
        }

    return {
        "data_loaded": True,
        "timestamp_last_loaded": _loaded_at.isoformat() if _loaded_at else None,
        "num_users": len(recommender.history.all_users_with_purchase_history()),
        "num_books": len(recommender.catalog) if hasattr(recommender.catalog, "__len__") else 0,
        "cache": recommender.cache.stats() if recommender.cache is not None else None,
    }
