"""
RIFF chunk model and well-known FourCC identifiers.
"""

from __future__ import annotations

from dataclasses import dataclass

from .binary import CHUNK_HEADER_LENGTH, encode_u32, pad, padded_length
from .errors import BadChunkError

FOURCC_LENGTH = 4


def fourcc(value: bytes | str) -> bytes:
    """Normalise a 4-character code to bytes, rejecting any other length."""
    if isinstance(value, str):
        try:
            value = value.encode("ascii")
        except UnicodeEncodeError as exc:
            raise BadChunkError(f"FourCC must be ASCII: {value!r}") from exc
    raw = bytes(value)
    if len(raw) != FOURCC_LENGTH:
        raise BadChunkError(f"FourCC must be exactly {FOURCC_LENGTH} bytes, got {len(raw)}")
    return raw


FOURCC_RIFF = fourcc("RIFF")
FOURCC_FORMAT = fourcc("fmt ")
FOURCC_DATA = fourcc("data")
FOURCC_SMPL = fourcc("smpl")
FOURCC_WSMP = fourcc("wsmp")

FILE_TYPE_WAVE = fourcc("WAVE")
FILE_TYPE_WEBP = fourcc("WEBP")


@dataclass(frozen=True)
class Chunk:
    """A single RIFF chunk: FourCC identifier plus unpadded payload."""

    identifier: bytes
    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "identifier", fourcc(self.identifier))
        object.__setattr__(self, "data", bytes(self.data))

    @property
    def size(self) -> int:
        """Declared payload size (never includes the pad byte)."""
        return len(self.data)

    @property
    def byte_length(self) -> int:
        """Bytes this chunk occupies on the wire, header and padding included."""
        return CHUNK_HEADER_LENGTH + padded_length(len(self.data))

    def to_bytes(self) -> bytes:
        return self.identifier + encode_u32(len(self.data)) + pad(self.data)

    def __repr__(self) -> str:
        return f"Chunk(identifier={self.identifier!r}, size={len(self.data)})"
