# image_scout/crawler/registry.py
"""Strategy lookup by configured name."""
from __future__ import annotations

from typing import Dict, Type, Union

from image_scout.config import StrategyName
from image_scout.controller import Controller
from image_scout.crawler.base import ImageCrawler
from image_scout.crawler.forkjoin import ForkJoinCrawler
from image_scout.crawler.futures import FuturesCrawler
from image_scout.crawler.sequential import SequentialCrawler

CRAWLERS: Dict[StrategyName, Type[ImageCrawler]] = {
    StrategyName.SEQUENTIAL: SequentialCrawler,
    StrategyName.FORK_JOIN: ForkJoinCrawler,
    StrategyName.FUTURES: FuturesCrawler,
}


def make_crawler(strategy: Union[StrategyName, str], controller: Controller) -> ImageCrawler:
    return CRAWLERS[StrategyName(strategy)](controller)
