"""
Data feed loaders: where the raw coordinates buffer comes from.

A feed exposes the address it reads from and a `fetch()` coroutine returning
raw bytes. Transport errors propagate unchanged; the engine wraps them.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import urlparse

import aiohttp

from trackplay.playback.config import PlaybackConfig
from trackplay.utils.log import get_logger

logger = get_logger(__name__)


class DataFeed(Protocol):
    """Source of a raw coordinates buffer."""

    @property
    def endpoint(self) -> str: ...

    async def fetch(self) -> bytes: ...


class HttpDataFeed:
    """
    Fetch the feed with an HTTP GET.

    Parameters
    ----------
    url : str
        Absolute http(s) URL of the feed.
    timeout : float
        Total timeout (s) for the request.
    session : aiohttp.ClientSession, optional
        Session to reuse; a short-lived one is opened per fetch otherwise.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._session = session

    @classmethod
    def from_resource_path(cls, resource_path: str, timeout: float = 30.0) -> Optional[HttpDataFeed]:
        """Return a feed for `resource_path`, or None if it is not an http(s) URL."""
        parsed = urlparse(resource_path)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return None
        return cls(resource_path, timeout=timeout)

    @property
    def endpoint(self) -> str:
        return self._url

    async def fetch(self) -> bytes:
        if self._session is not None:
            return await self._get(self._session)
        async with aiohttp.ClientSession(
            headers={"Accept": "application/json"},
        ) as session:
            return await self._get(session)

    async def _get(self, session: aiohttp.ClientSession) -> bytes:
        logger.info("Fetching feed %s", self._url)
        async with session.get(
            self._url, timeout=aiohttp.ClientTimeout(total=self._timeout)
        ) as response:
            response.raise_for_status()
            return await response.read()


class LocalDataFeed:
    """
    Read the feed from a file on disk.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @classmethod
    def from_path(cls, path: str | Path) -> Optional[LocalDataFeed]:
        """Return a feed for `path`, or None if no such file exists."""
        if not Path(path).is_file():
            return None
        return cls(path)

    @property
    def endpoint(self) -> str:
        return self._path.resolve().as_uri()

    async def fetch(self) -> bytes:
        logger.info("Reading feed %s", self._path)
        return await asyncio.to_thread(self._path.read_bytes)


class BytesDataFeed:
    """
    Serve a fixed in-memory buffer.
    """

    def __init__(self, buffer: bytes, endpoint: str = "memory://") -> None:
        self._buffer = buffer
        self._endpoint = endpoint

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def fetch(self) -> bytes:
        return self._buffer


def feed_from_config(cfg: PlaybackConfig) -> Optional[DataFeed]:
    """
    Build the feed named by the config; None when no usable source is configured.
    """
    if cfg.feed_path:
        return LocalDataFeed.from_path(cfg.feed_path)
    if cfg.feed_url:
        return HttpDataFeed.from_resource_path(cfg.feed_url, timeout=cfg.http_timeout)
    return None
