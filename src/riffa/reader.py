"""
Streaming RIFF reader.

`RiffReader` parses the 12-byte container header on construction and then
hands out chunks strictly in order. Every byte pulled from the source is
counted against the size declared in the header; a stream that yields more
than it declared is rejected as corrupted even if each read succeeded.
"""

from __future__ import annotations

import logging
from typing import Iterator

from .binary import (
    CHUNK_HEADER_LENGTH,
    RIFF_HEADER_LENGTH,
    decode_u32,
    padded_length,
    read_exact,
)
from .chunk import FOURCC_LENGTH, FOURCC_RIFF, Chunk
from .errors import CorruptedError
from .transport import ByteSource

logger = logging.getLogger(__name__)


class RiffReader:
    """Reads RIFF chunks from a sequential byte source.

    The source is not owned by the reader and is never closed by it. A reader
    is not safe for concurrent use.
    """

    def __init__(self, source: ByteSource) -> None:
        self._source = source

        header = read_exact(source, RIFF_HEADER_LENGTH)
        if len(header) < RIFF_HEADER_LENGTH:
            raise CorruptedError(
                f"truncated RIFF header: read {len(header)} of {RIFF_HEADER_LENGTH} bytes"
            )

        magic = header[:FOURCC_LENGTH]
        if magic != FOURCC_RIFF:
            raise CorruptedError(f"data does not begin with RIFF header (found {magic!r})")

        size = decode_u32(header[4:8])
        if size < FOURCC_LENGTH:
            raise CorruptedError(f"impossibly small file size ({size})")

        self._size = size
        self._file_type = header[8:12]
        # The file type tag already counts against the declared size.
        self._bytes_read = FOURCC_LENGTH

        logger.debug("Parsed RIFF header (file_type=%r, size=%s)", self._file_type, size)

    @property
    def file_type(self) -> bytes:
        return self._file_type

    @property
    def size(self) -> int:
        """Size declared in the header: bytes following the size field."""
        return self._size

    @property
    def bytes_read(self) -> int:
        return self._bytes_read

    def read_chunk(self) -> tuple[Chunk, int]:
        """
        Read the next chunk and return it with the number of bytes consumed.

        The consumed count is the chunk header plus the padded payload. The
        returned chunk's data never includes the pad byte.

        Raises:
            EOFError: the stream ended cleanly on a chunk boundary.
            CorruptedError: the chunk was truncated, or reading it went past
                the declared container size.
        """
        header = self._read(CHUNK_HEADER_LENGTH)
        if not header:
            raise EOFError("no more chunks")
        if len(header) < CHUNK_HEADER_LENGTH:
            raise CorruptedError(
                f"truncated chunk header: read {len(header)} of {CHUNK_HEADER_LENGTH} bytes"
            )

        identifier = header[:FOURCC_LENGTH]
        chunk_size = decode_u32(header[4:8])
        wire_size = padded_length(chunk_size)
        limit = padded_length(self._size)
        if self._bytes_read + wire_size > limit:
            raise CorruptedError(
                f"{identifier!r} chunk of {chunk_size} bytes overruns declared file size "
                f"({self._bytes_read + wire_size} > {limit})"
            )

        payload = self._read(wire_size)
        if len(payload) < wire_size:
            raise CorruptedError(
                f"truncated {identifier!r} chunk: read {len(payload)} of {wire_size} bytes"
            )

        consumed = CHUNK_HEADER_LENGTH + wire_size
        logger.debug("Read chunk %r (size=%s, consumed=%s)", identifier, chunk_size, consumed)
        return Chunk(identifier, payload[:chunk_size]), consumed

    def read_to_end(self, into: list[Chunk] | None = None) -> list[Chunk]:
        """
        Read chunks until the end of the stream and return them in order.

        Any error other than end of stream propagates immediately. Chunks read
        before the failure remain in `into` when the caller supplies a list.
        """
        chunks = into if into is not None else []
        while True:
            try:
                chunk, _ = self.read_chunk()
            except EOFError:
                return chunks
            chunks.append(chunk)

    def __iter__(self) -> Iterator[Chunk]:
        while True:
            try:
                chunk, _ = self.read_chunk()
            except EOFError:
                return
            yield chunk

    def _read(self, n: int) -> bytes:
        data = read_exact(self._source, n)
        self._bytes_read += len(data)
        if self._bytes_read > padded_length(self._size):
            raise CorruptedError(
                f"read past declared file size ({self._bytes_read} > {padded_length(self._size)})"
            )
        return data
