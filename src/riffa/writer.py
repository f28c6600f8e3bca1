"""
RIFF writer with deferred size finalisation.

The container size must appear in the header, but it is only known once all
chunks have been written. The writer therefore emits a zero placeholder when
it is created and patches the real size in at offset 4 on `close()`.
"""

from __future__ import annotations

import logging

from .binary import MAX_U32, encode_u32, pad, write_all
from .chunk import FOURCC_LENGTH, FOURCC_RIFF, Chunk, fourcc
from .errors import ClosedError, CorruptedError, ShortWriteError
from .transport import SeekableSink, require_seekable, write_at

logger = logging.getLogger(__name__)

_SIZE_OFFSET = len(FOURCC_RIFF)
_SIZE_PLACEHOLDER = b"\x00" * 4


class RiffWriter:
    """Writes RIFF chunks to a seekable sink.

    The sink should be positioned at the start of its stream. The writer does
    not own the sink and never closes it; call `close()` (or use the writer
    as a context manager) to finalise the header. A writer is not safe for
    concurrent use.
    """

    def __init__(self, sink: SeekableSink, file_type: bytes | str) -> None:
        self._sink = require_seekable(sink)
        self._file_type = fourcc(file_type)
        self._size = 0
        self._closed = False

        write_all(self._sink, FOURCC_RIFF, _SIZE_PLACEHOLDER, self._file_type)
        self._size = FOURCC_LENGTH
        logger.debug("Wrote provisional RIFF header (file_type=%r)", self._file_type)

    @property
    def file_type(self) -> bytes:
        return self._file_type

    @property
    def size(self) -> int:
        """Running container size: file type tag plus every byte of every chunk."""
        return self._size

    @property
    def closed(self) -> bool:
        return self._closed

    def write_chunk(self, chunk: Chunk) -> int:
        """
        Write `chunk` (header, payload, pad byte) and return the bytes written.

        Raises:
            ClosedError: the writer has been closed; nothing is written.
            CorruptedError: the container would exceed 4 GiB (nothing is
                written), or the sink accepted only part of the chunk.
        """
        if self._closed:
            raise ClosedError("cannot write chunk: writer is closed")

        new_size = self._size + chunk.byte_length
        if new_size > MAX_U32:
            raise CorruptedError(
                f"wrote too many bytes - size overflow ({new_size} > {MAX_U32})"
            )

        pieces = (chunk.identifier, encode_u32(chunk.size), pad(chunk.data))
        written = 0
        try:
            for piece in pieces:
                written += write_all(self._sink, piece)
        except ShortWriteError as exc:
            written += exc.bytes_written
            raise CorruptedError(
                f"short write of {chunk.identifier!r} chunk ({written} of {chunk.byte_length} bytes)"
            ) from exc
        except OSError as exc:
            written += getattr(exc, "characters_written", 0)
            raise
        finally:
            self._size += written

        logger.debug("Wrote chunk %r (size=%s, written=%s)", chunk.identifier, chunk.size, written)
        return written

    def close(self) -> None:
        """
        Finalise the header by writing the container size at offset 4.

        Closing is one-shot: the writer is marked closed before the patch is
        attempted, so a failed patch is not retried by a second call.
        """
        if self._closed:
            raise ClosedError("writer is already closed")
        self._closed = True

        write_at(self._sink, encode_u32(self._size), _SIZE_OFFSET)
        logger.debug("Finalised RIFF header (size=%s)", self._size)

    def __enter__(self) -> "RiffWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._closed:
            self.close()
