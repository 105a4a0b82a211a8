"""Tests for the per-user preference cache."""

import threading

from bookrec.recommender.cache import PreferenceCache
from bookrec.recommender.models import PreferenceVector


def test_cache_get_put_and_stats():
    cache = PreferenceCache()
    vector = PreferenceVector(1, {"I": 1.0})

    assert cache.get(1) is None
    cache.put(vector)
    assert cache.get(1) is vector

    assert cache.stats() == {"size": 1, "hits": 1, "misses": 1, "hit_rate": 50.0}


def test_cache_invalidate_single_user():
    cache = PreferenceCache()
    cache.put(PreferenceVector(1, {"I": 1.0}))
    cache.put(PreferenceVector(2, {"T": 1.0}))

    assert cache.invalidate(1) is True
    assert cache.invalidate(1) is False
    assert cache.get(1) is None
    assert cache.get(2) is not None
    assert len(cache) == 1


def test_cache_clear_resets_everything():
    cache = PreferenceCache()
    cache.put(PreferenceVector(1, {"I": 1.0}))
    cache.get(1)

    cache.clear()

    assert len(cache) == 0
    assert cache.stats()["hits"] == 0
    assert cache.stats()["hit_rate"] == 0.0


def test_cache_concurrent_puts():
    cache = PreferenceCache()

    def worker(offset):
        for user_id in range(offset, offset + 100):
            cache.put(PreferenceVector(user_id, {"A": 1.0}))
            cache.get(user_id)

    threads = [threading.Thread(target=worker, args=(i * 100,)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 400
    assert cache.stats()["hits"] == 400
