"""Cosine similarity between preference vectors.

The scalar form compares two vectors over the union of their categories.
The batch form stacks many vectors into a sparse matrix and scores them
against a target in one call; both give the same numbers.
"""

import logging
from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy.sparse import csr_matrix
from sklearn.metrics.pairwise import cosine_similarity

from bookrec.recommender.models import PreferenceVector

# Configure module logger
logger = logging.getLogger(__name__)


def _clip_unit(values: np.ndarray) -> np.ndarray:
    # Rounding can push identical vectors slightly above 1
    return np.clip(values, 0.0, 1.0)


def cosine_similarity_score(a: PreferenceVector, b: PreferenceVector) -> float:
    """Compute the cosine similarity of two preference vectors.

    Categories missing from one vector count as 0. Returns 0.0 when either
    vector has zero magnitude.

    Args:
        a: First preference vector.
        b: Second preference vector.

    Returns:
        Similarity in [0, 1] for non-negative vectors.

    Example:
        >>> u3 = PreferenceVector(user_id=3, scores={"T": 1.0})
        >>> u4 = PreferenceVector(user_id=4, scores={"T": 1.0})
        >>> cosine_similarity_score(u3, u4)
        1.0
    """
    support = sorted(set(a.scores) | set(b.scores))
    if not support:
        return 0.0

    vec_a = np.array([a.scores.get(code, 0.0) for code in support], dtype=np.float64)
    vec_b = np.array([b.scores.get(code, 0.0) for code in support], dtype=np.float64)

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = np.dot(vec_a, vec_b) / (norm_a * norm_b)
    return float(_clip_unit(np.array([similarity]))[0])


def build_preference_matrix(
    vectors: Sequence[PreferenceVector],
) -> Tuple[csr_matrix, Dict[str, int]]:
    """Stack preference vectors into a sparse user x category matrix.

    Returns:
        A tuple of the CSR matrix (one row per vector, in input order) and
        the category code to column index mapping.
    """
    categories = sorted({code for vector in vectors for code in vector.scores})
    category_to_idx = {code: idx for idx, code in enumerate(categories)}

    rows: List[int] = []
    cols: List[int] = []
    data: List[float] = []
    for row, vector in enumerate(vectors):
        for code, score in vector.scores.items():
            rows.append(row)
            cols.append(category_to_idx[code])
            data.append(score)

    matrix = csr_matrix(
        (np.array(data, dtype=np.float64), (rows, cols)),
        shape=(len(vectors), len(categories)),
        dtype=np.float64,
    )
    return matrix, category_to_idx


def similarity_to_many(
    target: PreferenceVector,
    candidates: Sequence[PreferenceVector],
) -> np.ndarray:
    """Score every candidate against the target.

    Args:
        target: Vector to compare against.
        candidates: Vectors to score.

    Returns:
        Array of similarities aligned with ``candidates``.
    """
    if not candidates:
        return np.zeros(0, dtype=np.float64)

    matrix, _ = build_preference_matrix([target, *candidates])
    if matrix.shape[1] == 0:
        return np.zeros(len(candidates), dtype=np.float64)

    # Zero rows normalize to zero, so empty vectors score 0
    scores = cosine_similarity(matrix[0], matrix[1:])[0]

    logger.debug(
        "Scored candidates",
        extra={
            "user_id": target.user_id,
            "num_candidates": len(candidates),
            "num_categories": matrix.shape[1],
        },
    )

    return _clip_unit(scores)
