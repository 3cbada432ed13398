"""Tests for LRUTranslationCache."""

from __future__ import annotations

import threading

import pytest

from core.cache.lru_cache import LRUTranslationCache
from models.cache_models import CacheStats
from models.translation_models import ConfidenceLevel, TranslationResult


def _result(text: str) -> TranslationResult:
    return TranslationResult(text=text, confidence=ConfidenceLevel.HIGH, used_source="deepl")


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError, match="at least 1"):
        LRUTranslationCache(0)


def test_get_returns_stored_result() -> None:
    cache = LRUTranslationCache(2)

    assert cache.set("en:fr:hello", _result("bonjour")) is True

    assert cache.get("en:fr:hello") == _result("bonjour")
    assert cache.get("en:fr:missing") is None
    assert "en:fr:hello" in cache


def test_inserting_beyond_capacity_evicts_first_inserted_key() -> None:
    capacity = 3
    cache = LRUTranslationCache(capacity)
    keys: list[str] = [f"en:fr:word{i}" for i in range(capacity + 1)]

    for key in keys:
        cache.set(key, _result(key))

    assert len(cache) == capacity
    assert keys[0] not in cache
    assert all(key in cache for key in keys[1:])


def test_get_refreshes_recency() -> None:
    cache = LRUTranslationCache(2)
    cache.set("a", _result("1"))
    cache.set("b", _result("2"))

    cache.get("a")
    cache.set("c", _result("3"))

    assert "a" in cache
    assert "b" not in cache


def test_updating_existing_key_never_evicts() -> None:
    cache = LRUTranslationCache(2)
    cache.set("a", _result("1"))
    cache.set("b", _result("2"))

    cache.set("a", _result("updated"))

    assert len(cache) == 2
    assert cache.get("a") == _result("updated")
    assert "b" in cache


def test_error_results_are_refused() -> None:
    cache = LRUTranslationCache(2)

    stored: bool = cache.set("a", _result("x").copy_with(error="providers failed"))

    assert stored is False
    assert len(cache) == 0


def test_stats_and_clear() -> None:
    cache = LRUTranslationCache(5)
    cache.set("a", _result("1"))
    cache.set("b", _result("2"))

    assert cache.stats() == CacheStats(size=2, capacity=5)

    cache.clear()

    assert cache.stats() == CacheStats(size=0, capacity=5)


def test_size_never_exceeds_capacity_under_threads() -> None:
    cache = LRUTranslationCache(10)

    def writer(offset: int) -> None:
        for i in range(200):
            cache.set(f"k{offset}-{i}", _result(str(i)))
            cache.get(f"k{offset}-{i // 2}")

    threads: list[threading.Thread] = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 10
