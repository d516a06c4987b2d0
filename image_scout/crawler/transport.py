# image_scout/crawler/transport.py
"""
Transport layer: raw bytes for a location, either from the local filesystem or
over HTTP with retry/backoff and timeout.

Crawl strategies run on plain threads, so :class:`HttpTransport` keeps one
private asyncio event loop on a daemon thread and submits every request to it;
callers block only on their own request.
"""
from __future__ import annotations

import asyncio
import threading
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from image_scout.errors import TransportError
from image_scout.logger import logger
from image_scout.utils import is_local, to_path

__all__ = ["Transport", "FileTransport", "HttpTransport", "CompositeTransport"]

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)


class Transport(ABC):
    """Reads raw bytes for a location."""

    @abstractmethod
    def read(self, location: str) -> bytes:
        """Return the bytes at *location* or raise :class:`TransportError`."""

    def close(self) -> None:  # noqa: B027
        """Release resources; no-op by default."""

    def __enter__(self) -> Transport:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FileTransport(Transport):
    """``file://`` URLs and plain paths."""

    def read(self, location: str) -> bytes:
        path = to_path(location)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise TransportError(location, exc) from exc


class HttpTransport(Transport):
    """HTTP(S) GET with retries on 5xx/429 and exponential backoff."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        retry_times: int = 3,
        user_agent: str = "ImageScoutBot/1.0",
        backoff_base: float = 2.0,
    ) -> None:
        self.timeout = timeout
        self.retry_times = retry_times
        self.user_agent = user_agent
        self.backoff_base = backoff_base
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._session: Optional[ClientSession] = None
        self._start_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Event-loop thread                                                  #
    # ------------------------------------------------------------------ #

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._start_lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="image-scout-http", daemon=True
                )
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    async def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(
                timeout=ClientTimeout(total=self.timeout),
                headers={"User-Agent": self.user_agent},
                raise_for_status=False,
            )
        return self._session

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    def read(self, location: str) -> bytes:
        loop = self._ensure_loop()
        future = asyncio.run_coroutine_threadsafe(self._read(location), loop)
        return future.result()

    async def _read(self, location: str) -> bytes:
        session = await self._get_session()
        attempts = 0
        while True:
            try:
                async with session.get(location) as resp:
                    if resp.status in RETRY_STATUS:
                        raise ClientError(f"retryable status {resp.status}")
                    if resp.status != 200:
                        raise TransportError(location, f"HTTP {resp.status}")
                    return await resp.read()
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise TransportError(location, "timeout") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.retry_times:
                    raise TransportError(location, exc) from exc
                backoff = min(60.0, self.backoff_base**attempts)
                logger.debug(
                    "Retry %d/%d for %s after %.2f s", attempts, self.retry_times, location, backoff
                )
                await asyncio.sleep(backoff)

    async def _close_session(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    def close(self) -> None:
        with self._start_lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None:
            return
        asyncio.run_coroutine_threadsafe(self._close_session(), loop).result()
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join()
        loop.close()


class CompositeTransport(Transport):
    """Routes local locations to files and everything else to HTTP."""

    def __init__(self, http: Optional[HttpTransport] = None, local: Optional[FileTransport] = None) -> None:
        self.http = http or HttpTransport()
        self.local = local or FileTransport()

    def read(self, location: str) -> bytes:
        if is_local(location):
            return self.local.read(location)
        return self.http.read(location)

    def close(self) -> None:
        self.http.close()
