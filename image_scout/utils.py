# File: image_scout/utils.py
"""image_scout.utils: helpers for locations (URL normalization, local paths, file names)."""

from __future__ import annotations

import hashlib
import posixpath
from pathlib import Path, PurePosixPath
from typing import Sequence
from urllib.parse import unquote, urlparse, urlunparse

from image_scout.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "is_local",
    "to_path",
    "storage_name",
    "page_location",
)

_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff")


def normalize_url(url: str) -> str:
    """Normalizes a location: lower-case scheme and host, dot segments resolved, fragment dropped.

    Plain filesystem paths are turned into ``file://`` URLs so that every location
    compares by exact string.
    """
    parsed = urlparse(url)
    if not parsed.scheme or len(parsed.scheme) == 1:
        # "C:/..." parses with a one-letter scheme.
        parsed = urlparse(Path(url).expanduser().resolve().as_uri())

    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = parsed.path or "/"
    norm = posixpath.normpath(path)
    if (path.endswith("/") or not PurePosixPath(norm).suffix) and not norm.endswith("/"):
        norm += "/"
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")

    normalized = urlunparse((scheme, netloc, norm, parsed.params, parsed.query, ""))
    if normalized != url:
        logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def is_local(location: str) -> bool:
    """True for ``file://`` URLs and bare paths."""
    scheme = urlparse(location).scheme
    return scheme in ("", "file") or len(scheme) == 1


def to_path(location: str) -> Path:
    """Maps a local location to a filesystem path."""
    parsed = urlparse(location)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(location).expanduser()


def page_location(location: str) -> str:
    """Local pages are directories holding ``index.html`` unless an html file is named."""
    if not is_local(location):
        return location
    path = location.rstrip("/")
    if path.endswith((".html", ".htm")):
        return path
    return path + "/index.html"


def storage_name(location: str) -> str:
    """Stable file name for *location*: a digest plus the original image suffix."""
    digest = hashlib.sha1(location.encode("utf-8")).hexdigest()
    suffix = PurePosixPath(urlparse(location).path).suffix.lower()
    if suffix not in _IMAGE_SUFFIXES:
        suffix = ""
    return f"{digest}{suffix}"
