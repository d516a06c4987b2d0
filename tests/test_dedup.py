# File: tests/test_dedup.py
"""VisitedSet and TransformGate under contention."""
from concurrent.futures import ThreadPoolExecutor

from image_scout.crawler.models import CacheKey
from image_scout.crawler.visited import VisitedSet
from image_scout.platform.cache import TransformGate


def test_put_if_absent_single_winner():
    visited = VisitedSet()
    with ThreadPoolExecutor(max_workers=16) as pool:
        wins = list(pool.map(lambda _: visited.put_if_absent("http://a/"), range(500)))

    assert wins.count(True) == 1
    assert "http://a/" in visited
    assert len(visited) == 1


def test_snapshot_sorted():
    visited = VisitedSet()
    for loc in ("http://b/", "http://a/", "http://b/"):
        visited.put_if_absent(loc)
    assert visited.snapshot() == ["http://a/", "http://b/"]


def test_gate_single_winner_per_key():
    gate = TransformGate()
    keys = [CacheKey(f"img{i % 5}", t) for i in range(200) for t in ("null", "tint")]
    with ThreadPoolExecutor(max_workers=16) as pool:
        wins = list(pool.map(gate.try_claim, keys))

    assert wins.count(True) == 10
    assert len(gate) == 10
    assert sorted(key.transform for key, won in zip(keys, wins) if won) == ["null"] * 5 + ["tint"] * 5


def test_gate_keys_are_independent():
    gate = TransformGate()
    assert gate.try_claim(CacheKey("a", "null"))
    assert gate.try_claim(CacheKey("a", "tint"))
    assert gate.try_claim(CacheKey("b", "null"))
    assert not gate.try_claim(CacheKey("a", "null"))
    assert not gate.try_claim(CacheKey("b", "null"))
    assert gate.try_claim(CacheKey("b", "tint"))
