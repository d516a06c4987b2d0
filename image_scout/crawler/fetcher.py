# image_scout/crawler/fetcher.py
"""
Fetcher module: turns a page location into a :class:`~image_scout.crawler.models.Page`.
"""
from __future__ import annotations

from image_scout.crawler.models import HtmlPage, Page
from image_scout.crawler.transport import Transport
from image_scout.errors import FetchError, TransportError
from image_scout.logger import logger
from image_scout.utils import page_location


class PageFetcher:
    """Reads page markup through a :class:`Transport` and wraps it in an :class:`HtmlPage`."""

    def __init__(self, transport: Transport, *, encoding: str = "utf-8") -> None:
        self.transport = transport
        self.encoding = encoding

    def fetch(self, location: str) -> Page:
        """
        Fetch the page at *location*.

        Local locations naming a directory are read from its ``index.html``;
        links are resolved against the file actually read. Raises
        :class:`FetchError` on failure.
        """
        target = page_location(location)
        try:
            raw = self.transport.read(target)
        except TransportError as exc:
            raise FetchError(location, exc.reason) from exc
        logger.debug("Fetched %s (%d bytes)", target, len(raw))
        return HtmlPage(location, raw.decode(self.encoding, errors="replace"), base_url=target)
