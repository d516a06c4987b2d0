# image_scout/crawler/visited.py
"""Concurrent set of page locations already claimed by some crawl branch."""
from __future__ import annotations

import threading
from typing import Set


class VisitedSet:
    """Locations are only ever added, through the atomic :meth:`put_if_absent`."""

    def __init__(self) -> None:
        self._locations: Set[str] = set()
        self._lock = threading.Lock()

    def put_if_absent(self, location: str) -> bool:
        """Adds *location*; True only for the caller that added it."""
        with self._lock:
            if location in self._locations:
                return False
            self._locations.add(location)
            return True

    def __contains__(self, location: object) -> bool:
        with self._lock:
            return location in self._locations

    def __len__(self) -> int:
        with self._lock:
            return len(self._locations)

    def snapshot(self) -> list[str]:
        with self._lock:
            return sorted(self._locations)
