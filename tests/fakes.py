# File: tests/fakes.py
"""In-memory collaborators: a page graph instead of a site, a dict instead of a disk."""
from __future__ import annotations

import threading
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from image_scout.crawler.models import CacheKey, Image, Page
from image_scout.errors import DownloadError, FetchError
from image_scout.platform.storage import Storage
from image_scout.sequence import SplittableSequence
from image_scout.transforms import Transform

ROOT = "http://site.test/"

Graph = Dict[str, Tuple[Sequence[str], Sequence[str]]]


def page(name: str) -> str:
    """Normalized location of a test page."""
    return ROOT if name == "root" else f"{ROOT}{name}/"


def img(name: str) -> str:
    return f"{ROOT}img/{name}.png"


def graph(**pages: Tuple[Iterable[str], Iterable[str]]) -> Graph:
    """graph(root=(["a"], ["x"]), a=([], [])) -> {location: (links, images)}."""
    return {
        page(name): ([page(link) for link in links], [img(i) for i in images])
        for name, (links, images) in pages.items()
    }


def reverse_bytes(image: Image) -> Image:
    return image.with_data(image.data[::-1])


def upper_bytes(image: Image) -> Image:
    return image.with_data(image.data.upper())


TEST_TRANSFORMS = [Transform("reverse", reverse_bytes), Transform("upper", upper_bytes)]


class GraphPage(Page):
    def __init__(self, url: str, links: Sequence[str], images: Sequence[str]) -> None:
        self.url = url
        self._links = list(links)
        self._images = list(images)

    def links(self) -> SplittableSequence[str]:
        return SplittableSequence(self._links)

    def images(self) -> SplittableSequence[str]:
        return SplittableSequence(self._images)


class GraphFetcher:
    """In-memory page graph; records every fetch."""

    def __init__(self, pages: Graph, on_fetch: Optional[Callable[[str], None]] = None) -> None:
        self.pages = pages
        self.on_fetch = on_fetch
        self.fetched: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, location: str) -> Page:
        with self._lock:
            self.fetched.append(location)
        if self.on_fetch is not None:
            self.on_fetch(location)
        if location not in self.pages:
            raise FetchError(location, "404")
        links, images = self.pages[location]
        return GraphPage(location, links, images)

    @property
    def counts(self) -> Counter:
        with self._lock:
            return Counter(self.fetched)


class MemoryStorage(Storage):
    """Images live in a dict; every download and store is counted."""

    def __init__(self, images: Optional[Dict[str, bytes]] = None) -> None:
        self.images = dict(images or {})
        self.downloads: Counter = Counter()
        self.stores: Counter = Counter()
        self.stored: Dict[CacheKey, Image] = {}
        self.cleared = 0
        self._lock = threading.Lock()

    def download(self, location: str) -> Image:
        with self._lock:
            self.downloads[location] += 1
        if location not in self.images:
            raise DownloadError(location, "404")
        return Image(source=location, data=self.images[location])

    def store(self, image: Image, key: CacheKey) -> Path:
        with self._lock:
            self.stores[key] += 1
            self.stored[key] = image
        return Path(key.transform) / key.source

    def cache_dir(self) -> Path:
        return Path("memory")

    def clear(self, transforms: Iterable[str] = ()) -> None:
        with self._lock:
            self.stored.clear()
            self.stores.clear()
            self.cleared += 1


def images_for(pages: Graph) -> Dict[str, bytes]:
    """Payload for every image referenced by *pages*."""
    return {loc: loc.encode("utf-8") for _, imgs in pages.values() for loc in imgs}


