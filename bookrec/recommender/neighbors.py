"""Nearest-neighbor selection over preference vectors."""

import logging
from typing import List, Sequence

from bookrec.config import DEFAULT_MAX_NEIGHBORS, DEFAULT_SIMILARITY_THRESHOLD
from bookrec.recommender.models import Neighbor, PreferenceVector, user_id_sort_key
from bookrec.recommender.similarity import similarity_to_many

# Configure module logger
logger = logging.getLogger(__name__)


def select_neighbors(
    target: PreferenceVector,
    candidates: Sequence[PreferenceVector],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    max_neighbors: int = DEFAULT_MAX_NEIGHBORS,
) -> List[Neighbor]:
    """Pick the users most similar to the target.

    The target's own vector is skipped, candidates scoring strictly below
    ``threshold`` are dropped, and the rest are ranked by similarity
    descending with user id as tie-break.

    Args:
        target: Preference vector of the user being served.
        candidates: Vectors of all users with purchase history.
        threshold: Minimum similarity to count as a neighbor.
        max_neighbors: Maximum number of neighbors returned.

    Returns:
        Ranked list of neighbors, possibly empty.
    """
    others = [vector for vector in candidates if vector.user_id != target.user_id]
    if target.is_empty() or not others:
        return []

    scores = similarity_to_many(target, others)

    neighbors = [
        Neighbor(vector=vector, similarity=float(score))
        for vector, score in zip(others, scores)
        if score >= threshold
    ]
    neighbors.sort(key=lambda n: (-n.similarity, user_id_sort_key(n.user_id)))
    selected = neighbors[:max_neighbors]

    logger.info(
        "Selected neighbors",
        extra={
            "user_id": target.user_id,
            "num_candidates": len(others),
            "num_above_threshold": len(neighbors),
            "num_neighbors": len(selected),
            "max_similarity": round(selected[0].similarity, 3) if selected else 0.0,
        },
    )

    return selected
