"""Preference vectors built from purchase history.

A user's vector holds, per category, the number of units bought divided by
the user's own maximum. Two users with the same category proportions get the
same vector regardless of how much they buy.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable

from bookrec.recommender.models import PreferenceVector, PurchaseEvent, UserId

# Configure module logger
logger = logging.getLogger(__name__)


def aggregate_category_quantities(events: Iterable[PurchaseEvent]) -> Dict[str, int]:
    """Sum purchased quantities per category code.

    Args:
        events: Purchase events of a single user. Events without a
            positive quantity are skipped.

    Returns:
        Dictionary mapping category codes to total units, keyed in sorted
        category order.
    """
    totals: Dict[str, int] = defaultdict(int)
    for event in events:
        if event.quantity <= 0:
            continue
        totals[event.category_code] += event.quantity

    return {code: totals[code] for code in sorted(totals)}


def normalize_scores(totals: Dict[str, float]) -> Dict[str, float]:
    """Divide every score by the largest one.

    Empty input, or input whose maximum is not positive, is returned as a
    copy without scaling.
    """
    if not totals:
        return {}

    max_score = max(totals.values())
    if max_score <= 0:
        return dict(totals)

    return {code: value / max_score for code, value in totals.items()}


def build_preference_vector(
    user_id: UserId,
    events: Iterable[PurchaseEvent],
) -> PreferenceVector:
    """Build a normalized preference vector for a user.

    Args:
        user_id: User the events belong to.
        events: The user's counted purchase events. Events of other users
            are ignored.

    Returns:
        PreferenceVector whose largest score is 1.0, or an empty vector if
        the user has no purchases.

    Example:
        >>> events = [
        ...     PurchaseEvent(user_id=1, book_id=10, category_code="I", quantity=3),
        ...     PurchaseEvent(user_id=1, book_id=11, category_code="A", quantity=1),
        ... ]
        >>> print(build_preference_vector(1, events).scores)
        {'A': 0.3333333333333333, 'I': 1.0}
    """
    own_events = [event for event in events if event.user_id == user_id]
    totals = aggregate_category_quantities(own_events)
    scores = normalize_scores({code: float(qty) for code, qty in totals.items()})

    logger.debug(
        "Built preference vector",
        extra={
            "user_id": user_id,
            "num_events": len(own_events),
            "num_categories": len(scores),
        },
    )

    return PreferenceVector(user_id=user_id, scores=scores)
