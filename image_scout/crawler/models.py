# image_scout/crawler/models.py
"""
Data models for the ImageScout crawler.
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from typing import NamedTuple, Optional

from image_scout.parser.html_parser import ParsedPage, parse_html
from image_scout.sequence import SplittableSequence


class Page(ABC):
    """A fetched page exposing its hyperlinks and image locations."""

    url: str

    @abstractmethod
    def links(self) -> SplittableSequence[str]:
        """Locations of pages linked from this page."""

    @abstractmethod
    def images(self) -> SplittableSequence[str]:
        """Locations of images embedded in this page."""


class HtmlPage(Page):
    """Page backed by HTML markup; links and images are extracted on first use."""

    def __init__(self, url: str, html: str, base_url: Optional[str] = None) -> None:
        self.url = url
        self.html = html
        self.base_url = base_url or url

    @cached_property
    def _parsed(self) -> ParsedPage:
        return parse_html(self.html, self.base_url)

    def links(self) -> SplittableSequence[str]:
        return SplittableSequence(self._parsed.links)

    def images(self) -> SplittableSequence[str]:
        return SplittableSequence(self._parsed.images)

    def __repr__(self) -> str:
        return f"HtmlPage({self.url!r})"


@dataclass(frozen=True, slots=True)
class Image:
    """In-memory image: source location and encoded bytes.

    ``transform`` is None for a downloaded original and the transform name for
    derived images.
    """

    source: str
    data: bytes = field(repr=False)
    transform: Optional[str] = None

    def with_data(self, data: bytes, transform: Optional[str] = None) -> Image:
        return replace(self, data=data, transform=transform if transform is not None else self.transform)


class CacheKey(NamedTuple):
    """Identity of one transformed artifact."""

    source: str
    transform: str


class EventKind(str, Enum):
    PAGE = "page"
    IMAGE = "image"
    FAILURE = "failure"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class CrawlEvent:
    """Progress notification delivered to the result consumer."""

    kind: EventKind
    location: str = ""
    depth: int = 0
    transform: Optional[str] = None
    count: int = 0
    message: str = ""
    thread: str = field(default_factory=lambda: threading.current_thread().name)
