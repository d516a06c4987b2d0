# image_scout/controller.py
"""
Controller: the validated bundle of collaborators a crawler runs against.

Built once before a run; any missing piece is a :class:`ConfigurationError`
raised here, before a single page is fetched.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from image_scout.config import CrawlerConfig
from image_scout.crawler.fetcher import PageFetcher
from image_scout.crawler.models import CrawlEvent
from image_scout.crawler.transport import CompositeTransport, HttpTransport, Transport
from image_scout.errors import ConfigurationError, CrawlCancelled
from image_scout.logger import logger
from image_scout.platform.storage import FileSystemStorage, Storage
from image_scout.transforms import Transform, make_transforms

__all__ = ["Controller", "Cancellation", "EventConsumer", "SerializedConsumer"]

EventConsumer = Callable[[CrawlEvent], None]


def log_consumer(event: CrawlEvent) -> None:
    logger.debug("[%s] %s %s %s", event.thread, event.kind.value, event.location, event.transform or "")


class SerializedConsumer:
    """Delivers events to *consumer* one at a time, whatever thread reports them."""

    def __init__(self, consumer: EventConsumer) -> None:
        self._consumer = consumer
        self._lock = threading.Lock()

    def __call__(self, event: CrawlEvent) -> None:
        with self._lock:
            self._consumer(event)


class Cancellation:
    """Process-wide stop flag observed by every in-flight crawl step."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CrawlCancelled()


@dataclass
class Controller:
    config: CrawlerConfig
    fetcher: Optional[PageFetcher]
    storage: Optional[Storage]
    transforms: Sequence[Transform] = ()
    consumer: EventConsumer = log_consumer
    cancellation: Cancellation = field(default_factory=Cancellation)
    transport: Optional[Transport] = None

    def __post_init__(self) -> None:
        if self.fetcher is None:
            raise ConfigurationError("A page fetcher must be specified.")
        if self.storage is None:
            raise ConfigurationError("A platform storage must be specified.")
        if not self.transforms:
            raise ConfigurationError("At least one transform must be configured.")
        names = [t.name for t in self.transforms]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Transform names must be unique: {names}")
        self.transforms = tuple(self.transforms)
        if not isinstance(self.consumer, SerializedConsumer):
            self.consumer = SerializedConsumer(self.consumer)

    @classmethod
    def from_config(
        cls,
        config: CrawlerConfig,
        *,
        consumer: Optional[EventConsumer] = None,
        fetcher: Optional[PageFetcher] = None,
        storage: Optional[Storage] = None,
        transforms: Optional[Sequence[Transform]] = None,
    ) -> Controller:
        """Builds the default file/HTTP collaborators for anything not supplied."""
        transport: Optional[Transport] = None
        if fetcher is None or storage is None:
            transport = CompositeTransport(
                http=HttpTransport(
                    timeout=config.timeout,
                    retry_times=config.retry_times,
                    user_agent=config.user_agent,
                )
            )
        return cls(
            config=config,
            fetcher=fetcher or PageFetcher(transport),  # type: ignore[arg-type]
            storage=storage or FileSystemStorage(config.download_path, transport),  # type: ignore[arg-type]
            transforms=transforms if transforms is not None else make_transforms(config.transforms),
            consumer=consumer or log_consumer,
            transport=transport,
        )

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()
