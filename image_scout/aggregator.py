# File: image_scout/aggregator.py
"""image_scout.aggregator: Модуль агрегатора результатов обхода."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, TypedDict

from image_scout.crawler.models import CrawlEvent, EventKind


class PageInfo(TypedDict, total=False):
    """Информация о загруженной странице."""

    url: str
    depth: int
    thread: str


class FailureInfo(TypedDict, total=False):
    """Информация о восстановимой ошибке (страница, загрузка, преобразование)."""

    url: str
    message: str


@dataclass(slots=True)
class CrawlReport:
    """Результаты одного запуска стратегии обхода."""

    strategy: str
    root_url: str
    max_depth: int
    image_count: int = 0
    pages_visited: int = 0
    transforms: Dict[str, int] = field(default_factory=dict)
    failures: int = 0
    cancelled: bool = False
    elapsed: float = 0.0

    pages: List[PageInfo] = field(default_factory=list)
    failure_details: List[FailureInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление CrawlReport."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


class EventCollector:
    """Потокобезопасный потребитель событий: запоминает всё, что сообщают краулеры."""

    def __init__(self) -> None:
        self._events: List[CrawlEvent] = []
        self._lock = threading.Lock()

    def __call__(self, event: CrawlEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[CrawlEvent]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def of_kind(self, kind: EventKind) -> List[CrawlEvent]:
        return [e for e in self.events if e.kind is kind]


def _aggregate_pages(events: Sequence[CrawlEvent]) -> List[PageInfo]:
    """Страницы в порядке обхода по событиям PAGE."""
    pages: List[PageInfo] = []
    for event in events:
        if event.kind is EventKind.PAGE:
            pages.append({"url": event.location, "depth": event.depth, "thread": event.thread})
    return pages


def _aggregate_failures(events: Sequence[CrawlEvent]) -> List[FailureInfo]:
    """Ошибки по событиям FAILURE."""
    return [
        {"url": e.location, "message": e.message} for e in events if e.kind is EventKind.FAILURE
    ]


def aggregate_results(report: CrawlReport, events: Sequence[CrawlEvent]) -> CrawlReport:
    """Дополняет CrawlReport списками страниц и ошибок из потока событий."""
    report.pages = _aggregate_pages(events)
    report.failure_details = _aggregate_failures(events)
    return report


def counts_agree(reports: Sequence[CrawlReport]) -> bool:
    """True, если все завершённые стратегии вернули одинаковое число изображений."""
    finished = [r for r in reports if not r.cancelled]
    return len({r.image_count for r in finished}) <= 1


def summary(reports: Sequence[CrawlReport]) -> Dict[str, Optional[int]]:
    """strategy -> image_count (None для отменённых запусков)."""
    return {r.strategy: (None if r.cancelled else r.image_count) for r in reports}
