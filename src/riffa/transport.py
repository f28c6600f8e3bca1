"""
Transport capabilities required by the RIFF reader and writer.

The reader only needs sequential reads. The writer needs sequential writes
plus one positioned write at close time to patch the container size, so an
append-only sink (a socket, a pipe, an HTTP upload) cannot back a writer.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .binary import write_all

if TYPE_CHECKING:
    from .chunk import Chunk


@runtime_checkable
class ByteSource(Protocol):
    """Anything with a blocking `read(n)` returning bytes (empty at end of stream)."""

    def read(self, n: int = -1, /) -> bytes: ...


@runtime_checkable
class ByteSink(Protocol):
    """Anything with a sequential `write(data)`."""

    def write(self, data: bytes, /) -> int | None: ...


@runtime_checkable
class SeekableSink(ByteSink, Protocol):
    """A sink that can also overwrite previously written bytes."""

    def seek(self, offset: int, whence: int = io.SEEK_SET, /) -> int: ...

    def tell(self) -> int: ...


def require_seekable(sink: object) -> SeekableSink:
    """Reject sinks that cannot perform the positioned write at close time."""
    if not isinstance(sink, SeekableSink):
        raise TypeError(f"{type(sink).__name__} does not support seek()/tell(); RIFF writers need a seekable sink.")
    seekable = getattr(sink, "seekable", None)
    if callable(seekable) and not seekable():
        raise TypeError(f"{type(sink).__name__} reports seekable() == False.")
    return sink


def write_at(sink: SeekableSink, data: bytes, offset: int) -> int:
    """Write `data` at `offset`, then restore the sink's previous position."""
    position = sink.tell()
    sink.seek(offset)
    try:
        return write_all(sink, data)
    finally:
        sink.seek(position)


class ChunkReader(Protocol):
    """Chunk-level reading, as provided by `RiffReader`."""

    def read_chunk(self) -> tuple["Chunk", int]: ...


class ChunkWriter(Protocol):
    """Chunk-level writing, as provided by `RiffWriter`."""

    def write_chunk(self, chunk: "Chunk") -> int: ...
