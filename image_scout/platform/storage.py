# image_scout/platform/storage.py
"""
Storage for downloaded originals and transformed artifacts.

Layout under the download path::

    downloads/<name>          originals, reused by later downloads
    <transform>/<name>        one file per (image, transform) pair

``<name>`` is :func:`image_scout.utils.storage_name` of the image location.
"""
from __future__ import annotations

import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Union

from image_scout.crawler.models import CacheKey, Image
from image_scout.crawler.transport import Transport
from image_scout.errors import DownloadError, TransportError
from image_scout.logger import logger
from image_scout.utils import storage_name

__all__ = ["Storage", "FileSystemStorage"]

DOWNLOADS_DIR = "downloads"


class Storage(ABC):
    """Platform storage consumed by the crawlers."""

    @abstractmethod
    def download(self, location: str) -> Image:
        """Return the image at *location*, downloading it only if not stored yet."""

    @abstractmethod
    def store(self, image: Image, key: CacheKey) -> Path:
        """Persist a transformed *image* under *key*."""

    @abstractmethod
    def cache_dir(self) -> Path:
        ...

    def clear(self, transforms: Iterable[str] = ()) -> None:  # noqa: B027
        """Forget the originals and the artifacts of *transforms* from previous runs.

        Anything else under the cache directory is left alone.
        """


def _atomic_write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class FileSystemStorage(Storage):
    """Stores images as files below *download_path*."""

    def __init__(self, download_path: Union[str, Path], transport: Transport) -> None:
        self._root = Path(download_path).expanduser()
        self.transport = transport

    def cache_dir(self) -> Path:
        return self._root

    def original_path(self, location: str) -> Path:
        return self._root / DOWNLOADS_DIR / storage_name(location)

    def artifact_path(self, key: CacheKey) -> Path:
        return self._root / key.transform / storage_name(key.source)

    def download(self, location: str) -> Image:
        path = self.original_path(location)
        try:
            if path.is_file():
                return Image(source=location, data=path.read_bytes())
            data = self.transport.read(location)
            _atomic_write(path, data)
        except TransportError as exc:
            raise DownloadError(location, exc.reason) from exc
        except OSError as exc:
            raise DownloadError(location, exc) from exc
        logger.debug("Downloaded %s -> %s", location, path)
        return Image(source=location, data=data)

    def store(self, image: Image, key: CacheKey) -> Path:
        path = self.artifact_path(key)
        _atomic_write(path, image.data)
        return path

    def _owned_dirs(self, transforms: Iterable[str]) -> List[Path]:
        root = self._root.resolve()
        dirs = []
        for name in (DOWNLOADS_DIR, *transforms):
            path = (self._root / name).resolve()
            # только прямые подкаталоги download_path
            if path.parent == root:
                dirs.append(path)
        return dirs

    def clear(self, transforms: Iterable[str] = ()) -> None:
        for path in self._owned_dirs(transforms):
            if path.is_dir():
                logger.debug("Clearing cache directory %s", path)
                shutil.rmtree(path)
