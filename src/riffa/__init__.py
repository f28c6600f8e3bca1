"""
riffa package initialization.

RIFF container reading and writing, plus the WAVE format chunk codec. The CLI
entry point is exposed via `riffa.cli:main`.
"""

from .binary import pad, padded_length
from .chunk import (
    FILE_TYPE_WAVE,
    FILE_TYPE_WEBP,
    FOURCC_DATA,
    FOURCC_FORMAT,
    FOURCC_RIFF,
    FOURCC_SMPL,
    FOURCC_WSMP,
    Chunk,
    fourcc,
)
from .errors import (
    BadChunkError,
    ClosedError,
    CorruptedError,
    ErrorKind,
    RiffaError,
    ValidationError,
)
from .reader import RiffReader
from .writer import RiffWriter

__all__ = [
    "BadChunkError",
    "Chunk",
    "ClosedError",
    "CorruptedError",
    "ErrorKind",
    "FILE_TYPE_WAVE",
    "FILE_TYPE_WEBP",
    "FOURCC_DATA",
    "FOURCC_FORMAT",
    "FOURCC_RIFF",
    "FOURCC_SMPL",
    "FOURCC_WSMP",
    "RiffReader",
    "RiffWriter",
    "RiffaError",
    "ValidationError",
    "fourcc",
    "pad",
    "padded_length",
]
