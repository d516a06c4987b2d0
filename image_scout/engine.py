# File: image_scout/engine.py
"""image_scout.engine: Orchestration layer для запуска обхода и агрегации результатов."""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from image_scout.aggregator import CrawlReport, EventCollector, aggregate_results
from image_scout.config import CrawlerConfig, StrategyName
from image_scout.controller import Controller, EventConsumer
from image_scout.crawler.fetcher import PageFetcher
from image_scout.crawler.models import CrawlEvent
from image_scout.crawler.registry import make_crawler
from image_scout.logger import logger
from image_scout.platform.storage import Storage
from image_scout.transforms import Transform

__all__ = ["Engine"]


class Engine:
    """Фасад для CLI и тестов: загрузка конфига, запуск стратегий, отмена и агрегация."""

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        fetcher: Optional[PageFetcher] = None,
        storage: Optional[Storage] = None,
        transforms: Optional[Sequence[Transform]] = None,
        consumer: Optional[EventConsumer] = None,
    ) -> None:
        """Строит Controller; ошибки конфигурации всплывают здесь, до начала обхода."""
        self.config = config
        self.collector = EventCollector()
        self._listener = consumer
        self.controller = Controller.from_config(
            config,
            consumer=self._dispatch,
            fetcher=fetcher,
            storage=storage,
            transforms=transforms,
        )

    def _dispatch(self, event: CrawlEvent) -> None:
        self.collector(event)
        if self._listener is not None:
            self._listener(event)

    def start_crawl(self, strategy: Union[StrategyName, str, None] = None) -> CrawlReport:
        """Запускает выбранную стратегию и возвращает агрегированный отчёт."""
        chosen = StrategyName(strategy) if strategy is not None else self.config.strategy
        self.collector.clear()
        crawler = make_crawler(chosen, self.controller)
        try:
            report = crawler.run()
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
        return aggregate_results(report, self.collector.events)

    def compare(self, strategies: Optional[Sequence[StrategyName]] = None) -> List[CrawlReport]:
        """Запускает стратегии по очереди на одном графе страниц."""
        reports: List[CrawlReport] = []
        for strategy in strategies or list(StrategyName):
            if self.controller.cancellation.cancelled:
                break
            reports.append(self.start_crawl(strategy))
        return reports

    def cancel(self) -> None:
        """Поднимает флаг отмены; наблюдается всеми выполняющимися шагами обхода."""
        logger.info("Cancellation requested")
        self.controller.cancellation.cancel()

    def close(self) -> None:
        self.controller.close()

    def __enter__(self) -> Engine:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
