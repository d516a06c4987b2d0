# image_scout/crawler/forkjoin.py
"""
Fork-join strategy.

Each page is split into two sibling tasks, the image batch and the link
crawls. Link crawls are divided recursively with
:meth:`~image_scout.sequence.SequenceSplitter.split` until every leaf task
holds a single link. Tasks are forked onto a work-stealing
:class:`~image_scout.concurrency.forkjoin.ForkJoinPool` and joined.
"""
from __future__ import annotations

import operator
from typing import Optional

from image_scout.concurrency.forkjoin import ForkJoinPool, ForkJoinTask, current_pool, invoke_all
from image_scout.config import StrategyName
from image_scout.crawler.base import ImageCrawler
from image_scout.sequence import SequenceSplitter


class ForkJoinCrawler(ImageCrawler):
    strategy = StrategyName.FORK_JOIN

    pool: Optional[ForkJoinPool] = None

    def setup(self) -> None:
        self.pool = ForkJoinPool(self.config.parallelism, name="fork-join")

    def teardown(self) -> None:
        if self.pool is not None:
            self.pool.shutdown()
            self.pool = None

    def crawl(self, location: str, depth: int) -> int:
        pool = self.pool
        if pool is None:
            raise RuntimeError("ForkJoinCrawler.crawl() requires setup() or run()")
        if current_pool() is not pool:
            # Outermost call: hand the root task to the pool and wait.
            return pool.invoke(self.crawl, location, depth)

        if not self.should_crawl(location, depth):
            return 0

        page = self.fetch_page(location, depth)
        if page is None:
            return 0

        images_on_page, images_on_links = invoke_all(
            ForkJoinTask(self.process_images, page.images()),
            ForkJoinTask(self._crawl_links, page.links().splitter(), depth + 1),
        )
        return images_on_page + images_on_links

    def _crawl_links(self, links: SequenceSplitter[str], depth: int) -> int:
        upper = links.split()
        if upper is None:
            return links.reduce(lambda link: self.crawl(link, depth), operator.add, 0)

        lower_count, upper_count = invoke_all(
            ForkJoinTask(self._crawl_links, links, depth),
            ForkJoinTask(self._crawl_links, upper, depth),
        )
        return lower_count + upper_count
