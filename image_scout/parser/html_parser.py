"""HTML parsing utilities for ImageScout.

Extraction of the two things the crawler needs from a page:

* links  — absolute locations from ``<a href="…">`` tags;
* images — absolute locations from ``<img src="…">`` tags.

Both lists keep document order and drop duplicates. Locations pass through
:func:`image_scout.utils.normalize_url` so that visited-page and cache keys
compare by exact string.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from image_scout.utils import normalize_url

__all__: Sequence[str] = ("ParsedPage", "parse_html")

# mailto:, javascript:, ftp: и т.п. не обходим
_CRAWLABLE_SCHEMES = frozenset({"http", "https", "file"})


@dataclass(slots=True)
class ParsedPage:
    """Lightweight representation of an HTML page."""

    url: str
    links: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)


def _absolute(base_url: str, values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for raw in values:
        value = raw.strip()
        if not value or value.startswith("#"):
            continue
        abs_url = normalize_url(urljoin(base_url, value))
        if urlparse(abs_url).scheme not in _CRAWLABLE_SCHEMES:
            continue
        if abs_url not in seen:
            seen.add(abs_url)
            result.append(abs_url)
    return result


def parse_html(html: str | bytes, base_url: str = "") -> ParsedPage:
    """Parse *html* and resolve every link and image against *base_url*."""
    soup = BeautifulSoup(html, "html.parser")

    base_tag = soup.find("base", href=True)
    if base_tag is not None:
        base_url = urljoin(base_url, base_tag["href"])  # type: ignore[index,arg-type]

    hrefs = [str(tag["href"]) for tag in soup.find_all("a", href=True)]  # type: ignore[index]
    srcs = [str(tag["src"]) for tag in soup.find_all("img", src=True)]  # type: ignore[index]

    return ParsedPage(
        url=base_url,
        links=_absolute(base_url, hrefs),
        images=_absolute(base_url, srcs),
    )
