# image_scout/crawler/sequential.py
"""Single-threaded baseline: the reference result for the other strategies."""
from __future__ import annotations

from image_scout.config import StrategyName
from image_scout.crawler.base import ImageCrawler
from image_scout.crawler.models import Page
from image_scout.sequence import SplittableSequence


class SequentialCrawler(ImageCrawler):
    """Plain recursion, one page at a time."""

    strategy = StrategyName.SEQUENTIAL

    def crawl(self, location: str, depth: int) -> int:
        if not self.should_crawl(location, depth):
            return 0

        page = self.fetch_page(location, depth)
        if page is None:
            return 0

        images_on_page = self.process_images(page.images())
        for images_on_link in self._crawl_links(page, depth + 1):
            images_on_page += images_on_link
        return images_on_page

    def _crawl_links(self, page: Page, depth: int) -> SplittableSequence[int]:
        """One count per hyperlink on *page*."""
        results: SplittableSequence[int] = SplittableSequence()
        for link in page.links():
            results.append(self.crawl(link, depth))
        return results
