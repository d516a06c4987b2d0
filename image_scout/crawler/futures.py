# image_scout/crawler/futures.py
"""
Future-pipeline strategy.

The page fetch is an asynchronous handle; the image count and the link counts
are continuations chained onto it and a third continuation sums them. Only
:meth:`FuturesCrawler.crawl`, the outermost call, waits.
"""
from __future__ import annotations

import operator
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from image_scout.concurrency.futures import Promise
from image_scout.config import StrategyName
from image_scout.crawler.base import ImageCrawler
from image_scout.crawler.models import Image, Page
from image_scout.transforms import Transform


class FuturesCrawler(ImageCrawler):
    strategy = StrategyName.FUTURES

    executor: Optional[ThreadPoolExecutor] = None

    def setup(self) -> None:
        self.executor = ThreadPoolExecutor(
            max_workers=self.config.parallelism, thread_name_prefix="futures"
        )

    def teardown(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=True)
            self.executor = None

    def crawl(self, location: str, depth: int) -> int:
        if self.executor is None:
            raise RuntimeError("FuturesCrawler.crawl() requires setup() or run()")
        return self.crawl_async(location, depth).join()

    # ------------------------------------------------------------------ #
    # Pipeline                                                           #
    # ------------------------------------------------------------------ #

    def _zero(self) -> Promise[int]:
        return Promise.completed(self.executor, 0)

    def crawl_async(self, location: str, depth: int) -> Promise[int]:
        if not self.should_crawl(location, depth):
            return self._zero()

        page = Promise.supply_async(self.executor, self.fetch_page, location, depth)
        images_on_page = page.then_compose(self._process_images_async)
        images_on_links = page.then_compose(lambda fetched: self._crawl_links_async(fetched, depth + 1))
        return images_on_page.then_combine(images_on_links, operator.add)

    def _crawl_links_async(self, page: Optional[Page], depth: int) -> Promise[int]:
        if page is None:
            return self._zero()
        return Promise.reduce(
            self.executor,
            [self.crawl_async(link, depth) for link in page.links()],
            operator.add,
            0,
        )

    def _process_images_async(self, page: Optional[Page]) -> Promise[int]:
        if page is None:
            return self._zero()
        self.check_cancelled()
        counts = [
            Promise.supply_async(self.executor, self.get_or_download_image, location).then_compose(
                self._transform_image_async
            )
            for location in page.images()
        ]
        return Promise.reduce(self.executor, counts, operator.add, 0)

    def _transform_image_async(self, image: Optional[Image]) -> Promise[int]:
        if image is None:
            return self._zero()
        claimed = [t for t in self.transforms if self.claim_transform(image, t)]
        counts = [
            Promise.supply_async(self.executor, self._apply_claimed, transform, image)
            for transform in claimed
        ]
        return Promise.reduce(self.executor, counts, operator.add, 0)

    def _apply_claimed(self, transform: Transform, image: Image) -> int:
        return 0 if self.apply_transform(transform, image) is None else 1
