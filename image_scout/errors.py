# image_scout/errors.py
"""
Error taxonomy for ImageScout.

* recoverable, per unit of work: :class:`FetchError`, :class:`DownloadError`,
  :class:`TransformError` (and the lower level :class:`TransportError`);
* control signal: :class:`CrawlCancelled`;
* fatal setup problems: :class:`ConfigurationError`.
"""
from __future__ import annotations

__all__ = [
    "ImageScoutError",
    "TransportError",
    "FetchError",
    "DownloadError",
    "TransformError",
    "CrawlCancelled",
    "ConfigurationError",
]


class ImageScoutError(Exception):
    """Base class for all project errors."""


class TransportError(ImageScoutError):
    """Raw bytes for a location could not be read."""

    def __init__(self, location: str, reason: object) -> None:
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason


class FetchError(ImageScoutError):
    """A page could not be fetched or parsed."""

    def __init__(self, location: str, reason: object) -> None:
        super().__init__(f"Unable to fetch page {location}: {reason}")
        self.location = location


class DownloadError(ImageScoutError):
    """An image could not be downloaded."""

    def __init__(self, location: str, reason: object) -> None:
        super().__init__(f"Unable to download image {location}: {reason}")
        self.location = location


class TransformError(ImageScoutError):
    """A transform failed for one image."""

    def __init__(self, location: str, transform: str, reason: object) -> None:
        super().__init__(f"Transform '{transform}' failed for {location}: {reason}")
        self.location = location
        self.transform = transform


class CrawlCancelled(ImageScoutError):
    """Raised when the cancellation flag is observed. Not a failure."""


class ConfigurationError(ImageScoutError):
    """Invalid setup detected before any crawl work starts."""
