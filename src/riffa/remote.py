"""
HTTP byte source so RIFF files can be read straight off a URL.

Only the reader can run over HTTP: it needs nothing but sequential reads,
whereas the writer must seek back to patch the header.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

import requests

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


class IterSource:
    """Adapts an iterable of byte blocks to the `read(n)` interface."""

    def __init__(self, blocks: Iterable[bytes]) -> None:
        self._blocks: Iterator[bytes] = iter(blocks)
        self._buffer = bytearray()
        self._exhausted = False

    def read(self, n: int = -1) -> bytes:
        if n is None or n < 0:
            self._buffer.extend(b"".join(self._blocks))
            self._exhausted = True
            data = bytes(self._buffer)
            self._buffer.clear()
            return data

        while len(self._buffer) < n and not self._exhausted:
            try:
                block = next(self._blocks)
            except StopIteration:
                self._exhausted = True
                break
            self._buffer.extend(block)

        data = bytes(self._buffer[:n])
        del self._buffer[:n]
        return data


@contextmanager
def open_url(
    url: str,
    *,
    timeout: float = 10.0,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    session: requests.Session | None = None,
) -> Iterator[IterSource]:
    """
    Stream `url` and yield a byte source over the response body.

    HTTP errors surface as `requests.HTTPError`; the response is always
    closed on exit.
    """
    requester = session or requests
    response = requester.get(url, stream=True, timeout=timeout)
    try:
        response.raise_for_status()
        logger.debug(
            "Streaming %s (status=%s, content_length=%s)",
            url,
            response.status_code,
            response.headers.get("Content-Length"),
        )
        yield IterSource(response.iter_content(chunk_size=chunk_size))
    finally:
        response.close()
