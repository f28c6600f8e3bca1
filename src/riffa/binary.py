"""
Byte-accounting helpers shared by the RIFF reader and writer.

Chunk payloads are word aligned: an odd-length payload is followed by a
single zero byte on the wire. `padded_length` and `pad` capture that rule;
the remaining helpers cover little-endian integers and exact-length I/O.
"""

from __future__ import annotations

import struct

from .errors import ShortWriteError

WORD_LENGTH = 2
MAX_U16 = 0xFFFF
MAX_U32 = 0xFFFFFFFF
CHUNK_HEADER_LENGTH = 8
RIFF_HEADER_LENGTH = 12

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


def padded_length(n: int) -> int:
    """Return `n` rounded up to the next multiple of the word length."""
    remainder = n % WORD_LENGTH
    if remainder:
        return n + (WORD_LENGTH - remainder)
    return n


def pad(data: bytes) -> bytes:
    """Return `data` zero-padded to the next word boundary."""
    remainder = len(data) % WORD_LENGTH
    if remainder:
        return bytes(data) + b"\x00" * (WORD_LENGTH - remainder)
    return bytes(data)


def encode_u16(value: int) -> bytes:
    return _U16.pack(value)


def encode_u32(value: int) -> bytes:
    return _U32.pack(value)


def decode_u16(raw: bytes) -> int:
    return _U16.unpack(raw)[0]


def decode_u32(raw: bytes) -> int:
    return _U32.unpack(raw)[0]


def read_exact(source, n: int) -> bytes:
    """
    Read up to `n` bytes, retrying until the source is exhausted.

    Sources may legitimately return fewer bytes than requested (sockets, raw
    file objects); only an empty read means the stream has ended. The result
    is shorter than `n` exactly when the stream ended first.
    """
    if n == 0:
        return b""

    parts: list[bytes] = []
    remaining = n
    while remaining > 0:
        block = source.read(remaining)
        if not block:
            break
        parts.append(block)
        remaining -= len(block)
    return b"".join(parts)


def write_all(sink, *pieces: bytes) -> int:
    """
    Write each piece in order and return the number of bytes written.

    A sink that reports fewer bytes than offered raises `ShortWriteError`
    carrying the running total, and the remaining pieces are not written.
    Exceptions raised by the sink itself propagate untouched.
    """
    total = 0
    for piece in pieces:
        n = sink.write(piece)
        if n is None:
            n = len(piece)
        total += n
        if n < len(piece):
            raise ShortWriteError(sum(len(p) for p in pieces), total)
    return total
