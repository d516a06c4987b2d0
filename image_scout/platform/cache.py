# image_scout/platform/cache.py
"""
At-most-once guard for transformed artifacts.

Every ``(source, transform name)`` pair can be claimed exactly once per crawl
run; the winner computes and stores the transform, everyone else skips it.
"""
from __future__ import annotations

import threading
from typing import Set

from image_scout.crawler.models import CacheKey


class TransformGate:
    """Atomic test-and-set over :class:`CacheKey` values."""

    def __init__(self) -> None:
        self._claimed: Set[CacheKey] = set()
        self._lock = threading.Lock()

    def try_claim(self, key: CacheKey) -> bool:
        """True for the first caller with *key*, False for all others."""
        with self._lock:
            if key in self._claimed:
                return False
            self._claimed.add(key)
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)
