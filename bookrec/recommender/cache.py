"""Per-user preference vector cache.

Rebuilding every user's vector on each request makes the neighbor scan
O(users) in history queries. The cache keeps built vectors until the user's
history changes; callers must invalidate a user when one of their orders
reaches a counted status.
"""

import threading
from typing import Dict, Optional

from bookrec.recommender.models import PreferenceVector, UserId


class PreferenceCache:
    """Thread-safe map of user id to preference vector."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._vectors: Dict[UserId, PreferenceVector] = {}
        self._hits = 0
        self._misses = 0

    def get(self, user_id: UserId) -> Optional[PreferenceVector]:
        """Look up a user's vector and count the hit or miss.

        Args:
            user_id: User whose vector is wanted.

        Returns:
            The cached PreferenceVector, or None if the user is not cached.
        """
        with self._lock:
            vector = self._vectors.get(user_id)
            if vector is None:
                self._misses += 1
            else:
                self._hits += 1
            return vector

    def put(self, vector: PreferenceVector) -> None:
        """Store a vector under its ``user_id``, replacing any older one."""
        with self._lock:
            self._vectors[vector.user_id] = vector

    def invalidate(self, user_id: UserId) -> bool:
        """Drop one user's vector. Returns True if it was cached."""
        with self._lock:
            return self._vectors.pop(user_id, None) is not None

    def clear(self) -> None:
        """Drop every vector and reset the hit counters."""
        with self._lock:
            self._vectors.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._vectors)

    def stats(self) -> Dict:
        """Return size, hits, misses and hit rate (percent)."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._vectors),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }
