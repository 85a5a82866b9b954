from __future__ import annotations

"""
Fetch Capabilities.

A fetch capability maps a URL onto a readable byte stream. The update
pipeline only depends on the Fetcher protocol; HttpFetcher is the default
implementation built on requests.
"""

import io
import logging
from typing import BinaryIO, Callable, Dict, Optional, Protocol

import requests

from selfupdate.infra.network.common import CHUNK_SIZE, DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Protocol describing a transport able to retrieve a URL."""

    def fetch(self, url: str) -> BinaryIO:
        """Return a readable stream with the resource body, or raise."""


class HttpFetcher:
    """
    Retrieve artifacts over HTTP(S) with buffered streaming.

    The body is read into memory in chunks; the returned stream is an
    in-memory buffer, so the connection is released before extraction.
    """

    def __init__(
            self,
            *,
            timeout: float = DEFAULT_TIMEOUT,
            headers: Optional[Dict[str, str]] = None,
            session: Optional[requests.Session] = None,
            progress_callback: Optional[Callable[[float], None]] = None,
    ) -> None:
        self._timeout = timeout
        self._headers = {"User-Agent": USER_AGENT, **(headers or {})}
        self._session = session
        self._progress_callback = progress_callback

    def fetch(self, url: str) -> BinaryIO:
        """
        Download a URL into an in-memory buffer.

        Args:
            url: Absolute artifact URL.

        Returns:
            BinaryIO: Buffer positioned at the start of the body.

        Raises:
            requests.RequestException: On connection errors, timeouts or
                non-2xx responses.
        """
        getter = self._session.get if self._session is not None else requests.get
        logger.debug(f"GET {url}")

        buffer = io.BytesIO()
        with getter(url, headers=self._headers, stream=True, timeout=self._timeout) as response:
            response.raise_for_status()
            total_size = int(response.headers.get("content-length", 0) or 0)
            downloaded_size = 0

            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    buffer.write(chunk)
                    downloaded_size += len(chunk)
                    if self._progress_callback and total_size > 0:
                        self._progress_callback((downloaded_size / total_size) * 100)

        logger.debug(f"Fetched {downloaded_size} bytes from {url}")
        buffer.seek(0)
        return buffer
