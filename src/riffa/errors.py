"""
Custom exception hierarchy for riffa.

Callers branch on the exception class (or its ``kind``), never on the message.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CORRUPTED = "corrupted"
    CLOSED = "closed"
    BAD_CHUNK = "bad_chunk"
    VALIDATION = "validation"


class RiffaError(Exception):
    """Base class for riffa exceptions."""

    kind: ErrorKind | None = None


class CorruptedError(RiffaError):
    """Raised when RIFF data violates a structural or consistency invariant."""

    kind = ErrorKind.CORRUPTED


class ClosedError(RiffaError):
    """Raised when an operation is attempted on a finalised writer."""

    kind = ErrorKind.CLOSED


class BadChunkError(RiffaError, ValueError):
    """Raised when a chunk cannot be built from the supplied values."""

    kind = ErrorKind.BAD_CHUNK


class ValidationError(RiffaError, ValueError):
    """Raised when WAVE format fields are not valid for encoding."""

    kind = ErrorKind.VALIDATION


class ShortWriteError(OSError):
    """Raised when a sink accepts fewer bytes than it was given."""

    def __init__(self, expected: int, bytes_written: int) -> None:
        super().__init__(f"short write: wrote {bytes_written} of {expected} bytes")
        self.expected = expected
        self.bytes_written = bytes_written


class AudioDeviceError(RiffaError):
    """Raised when audio playback fails or the format cannot be played."""
