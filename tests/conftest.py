from __future__ import annotations

import io
import struct

import pytest

from riffa.chunk import Chunk


class TrickleSource:
    """Returns at most `step` bytes per read, like a slow socket."""

    def __init__(self, data: bytes, step: int = 1):
        self._buffer = io.BytesIO(data)
        self.step = step
        self.reads = 0

    def read(self, n: int = -1) -> bytes:
        self.reads += 1
        if n < 0:
            return self._buffer.read()
        return self._buffer.read(min(n, self.step))


class FailingSource:
    """Serves `data`, then raises `error` on the next read."""

    def __init__(self, data: bytes, error: Exception):
        self._buffer = io.BytesIO(data)
        self.error = error

    def read(self, n: int = -1) -> bytes:
        chunk = self._buffer.read(n)
        if chunk:
            return chunk
        raise self.error


class FlakySink(io.BytesIO):
    """BytesIO that misbehaves on a chosen write call (1-based)."""

    def __init__(self, *, fail_on: int | None = None, error: Exception | None = None, short_on: int | None = None):
        super().__init__()
        self.fail_on = fail_on
        self.error = error or OSError("disk full")
        self.short_on = short_on
        self.calls = 0

    def write(self, data) -> int:
        self.calls += 1
        if self.fail_on is not None and self.calls == self.fail_on:
            raise self.error
        if self.short_on is not None and self.calls == self.short_on:
            return super().write(bytes(data)[: len(data) // 2])
        return super().write(data)


def _build_riff(chunks=(), *, file_type: bytes = b"WAVE", size: int | None = None, magic: bytes = b"RIFF") -> bytes:
    body = b"".join(chunk.to_bytes() for chunk in chunks)
    declared = size if size is not None else len(file_type) + len(body)
    return magic + struct.pack("<I", declared) + file_type + body


def _fmt_payload(
    *,
    audio_format: int = 1,
    channels: int = 2,
    sample_rate: int = 44_100,
    byte_rate: int = 176_400,
    block_align: int = 4,
    bits_per_sample: int = 16,
) -> bytes:
    return struct.pack("<HHIIHH", audio_format, channels, sample_rate, byte_rate, block_align, bits_per_sample)


@pytest.fixture
def build_riff():
    return _build_riff


@pytest.fixture
def fmt_payload():
    return _fmt_payload


@pytest.fixture
def sample_wav(build_riff, fmt_payload):
    """Stereo 16-bit 44.1kHz WAVE with a short data chunk and a LIST chunk."""
    return build_riff(
        [
            Chunk(b"fmt ", fmt_payload()),
            Chunk(b"data", bytes(range(16))),
            Chunk(b"LIST", b"INFOISFT\x05\x00\x00\x00riffa\x00"),
        ]
    )


@pytest.fixture
def sample_webp(build_riff):
    return build_riff(
        [
            Chunk(b"VP8L", b"\x2f\x00\x00\x00\x10\x07\x10\x11\x11\x88\x88\xfe\x07\x00"),
            Chunk(b"EXIF", b"II*\x00\x08"),
        ],
        file_type=b"WEBP",
    )
