# image_scout/crawler/base.py
"""
Crawl engine contract shared by every strategy.

A strategy only decides *how* the per-page work is scheduled. The steps
themselves live here so that all strategies observe the same cancellation
points, the same dedup primitives and the same error policy:

1. cancellation check, 2. depth check, 3. visited check, 4. fetch (failure
counts 0), 5. images of the page and crawls of its links, 6. sum.
"""
from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, ClassVar, Dict, Optional

from image_scout.aggregator import CrawlReport
from image_scout.config import StrategyName
from image_scout.controller import Controller
from image_scout.crawler.models import CacheKey, CrawlEvent, EventKind, Image, Page
from image_scout.crawler.visited import VisitedSet
from image_scout.errors import CrawlCancelled, DownloadError, FetchError, TransformError
from image_scout.logger import logger
from image_scout.platform.cache import TransformGate
from image_scout.sequence import SplittableSequence
from image_scout.transforms import Transform

__all__ = ["ImageCrawler"]


class ImageCrawler(ABC):
    """Recursive image crawl; subclasses implement :meth:`crawl`."""

    strategy: ClassVar[StrategyName]

    def __init__(self, controller: Controller) -> None:
        self.controller = controller
        self.config = controller.config
        self.root_url = controller.config.root_url
        self.max_depth = controller.config.max_depth
        self.diagnostics = controller.config.diagnostics_enabled
        self.fetcher = controller.fetcher
        self.storage = controller.storage
        self.transforms = controller.transforms
        self.visited = VisitedSet()
        self.gate = TransformGate()
        self._stats_lock = threading.Lock()
        self._produced: Counter[str] = Counter()
        self._failures = 0

    # ------------------------------------------------------------------ #
    # Contract                                                           #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def crawl(self, location: str, depth: int) -> int:
        """Number of transformed images produced from *location* and below."""

    def setup(self) -> None:  # noqa: B027
        """Acquire strategy resources (thread pools) before a run."""

    def teardown(self) -> None:  # noqa: B027
        """Release what :meth:`setup` acquired."""

    def cancel(self) -> None:
        self.controller.cancellation.cancel()

    def run(self) -> CrawlReport:
        """Crawls from the configured root with fresh dedup state."""
        self.visited = VisitedSet()
        self.gate = TransformGate()
        self._produced = Counter()
        self._failures = 0
        if self.config.reset_cache:
            self.storage.clear([t.name for t in self.transforms])

        logger.info(
            "Starting %s crawl of %s (max depth %d)", self.strategy.value, self.root_url, self.max_depth
        )
        cancelled = False
        count = 0
        start = time.monotonic()
        self.setup()
        try:
            count = self.crawl(self.root_url, 0)
        except CrawlCancelled:
            cancelled = True
        finally:
            self.teardown()
        if cancelled:
            # transforms claimed before the flag was set finish during teardown
            count = self.image_count
            logger.info("Crawl cancelled after %d images", count)
        elapsed = time.monotonic() - start

        kind = EventKind.CANCELLED if cancelled else EventKind.COMPLETED
        self.report(kind, self.root_url, count=count)
        logger.info(
            "%s crawl finished: %d images, %d pages in %.2f s",
            self.strategy.value,
            count,
            len(self.visited),
            elapsed,
        )
        return CrawlReport(
            strategy=self.strategy.value,
            root_url=self.root_url,
            max_depth=self.max_depth,
            image_count=count,
            pages_visited=len(self.visited),
            transforms=self.produced_by_transform(),
            failures=self._failures,
            cancelled=cancelled,
            elapsed=elapsed,
        )

    # ------------------------------------------------------------------ #
    # Shared steps                                                       #
    # ------------------------------------------------------------------ #

    def log(self, msg: str, *args: Any) -> None:
        """Per-step trace, emitted only with diagnostics enabled."""
        if self.diagnostics:
            logger.debug(msg, *args)

    def report(self, kind: EventKind, location: str, **fields: Any) -> None:
        self.controller.consumer(CrawlEvent(kind=kind, location=location, **fields))

    def check_cancelled(self) -> None:
        self.controller.cancellation.raise_if_cancelled()

    def should_crawl(self, location: str, depth: int) -> bool:
        """Steps 1-3: raises on cancellation, False past max depth or if already visited."""
        self.check_cancelled()
        self.log(">> Depth: %d [%s] (%s)", depth, location, threading.current_thread().name)
        if depth > self.max_depth:
            self.log("Exceeded max depth of %d", self.max_depth)
            return False
        if not self.visited.put_if_absent(location):
            self.log("Already processed %s", location)
            return False
        return True

    def fetch_page(self, location: str, depth: int) -> Optional[Page]:
        self.check_cancelled()
        try:
            page = self.fetcher.fetch(location)
        except FetchError as exc:
            self._record_failure(location, exc, depth=depth)
            return None
        self.report(EventKind.PAGE, location, depth=depth)
        return page

    def get_or_download_image(self, location: str) -> Optional[Image]:
        try:
            return self.storage.download(location)
        except DownloadError as exc:
            self._record_failure(location, exc)
            return None

    def claim_transform(self, image: Image, transform: Transform) -> bool:
        return self.gate.try_claim(CacheKey(image.source, transform.name))

    def apply_transform(self, transform: Transform, image: Image) -> Optional[Image]:
        """Runs a claimed transform and stores the result; None on failure."""
        key = CacheKey(image.source, transform.name)
        try:
            result = transform(image)
            self.storage.store(result, key)
        except CrawlCancelled:
            raise
        except Exception as exc:
            self._record_failure(image.source, TransformError(image.source, transform.name, exc))
            return None
        with self._stats_lock:
            self._produced[transform.name] += 1
        self.report(EventKind.IMAGE, image.source, transform=transform.name, count=1)
        return result

    def transform_image(self, image: Image) -> int:
        """Applies every transform this caller wins the gate for."""
        produced = 0
        for transform in self.transforms:
            if not self.claim_transform(image, transform):
                self.log("Already transformed %s with %s", image.source, transform.name)
                continue
            if self.apply_transform(transform, image) is not None:
                produced += 1
        return produced

    def process_images(self, images: SplittableSequence[str]) -> int:
        """Downloads and transforms one page's images; returns the artifacts produced."""
        self.check_cancelled()
        produced = 0
        for location in images:
            image = self.get_or_download_image(location)
            if image is not None:
                produced += self.transform_image(image)
        return produced

    # ------------------------------------------------------------------ #
    # Statistics                                                         #
    # ------------------------------------------------------------------ #

    def _record_failure(self, location: str, exc: Exception, depth: int = 0) -> None:
        logger.warning("%s", exc)
        with self._stats_lock:
            self._failures += 1
        self.report(EventKind.FAILURE, location, depth=depth, message=str(exc))

    @property
    def image_count(self) -> int:
        with self._stats_lock:
            return sum(self._produced.values())

    def produced_by_transform(self) -> Dict[str, int]:
        with self._stats_lock:
            return {t.name: self._produced.get(t.name, 0) for t in self.transforms}
