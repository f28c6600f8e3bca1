"""
WAVE format chunk codec.

A WAVE file is a RIFF container of type ``WAVE`` whose first chunk is the
fixed 16-byte ``fmt `` payload::

    u16 audio_format | u16 channels | u32 sample_rate
    u32 byte_rate    | u16 block_align | u16 bits_per_sample

`byte_rate` and `block_align` are redundant with the other fields. They are
always derived when encoding and cross-checked when decoding; a mismatch
means the stream is internally inconsistent and is reported as corruption.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from .binary import CHUNK_HEADER_LENGTH, MAX_U16, MAX_U32
from .chunk import FILE_TYPE_WAVE, FOURCC_DATA, FOURCC_FORMAT, Chunk
from .errors import CorruptedError, ValidationError
from .reader import RiffReader
from .transport import ChunkReader, ChunkWriter

__all__ = [
    "AudioFormat",
    "FILE_TYPE_WAVE",
    "FORMAT_PAYLOAD_LENGTH",
    "LENGTH_FORMAT_CHUNK",
    "WaveFormat",
    "read_format",
    "read_wave",
    "write_pcm",
]

_FORMAT_LAYOUT = struct.Struct("<HHIIHH")

FORMAT_PAYLOAD_LENGTH = _FORMAT_LAYOUT.size
LENGTH_FORMAT_CHUNK = CHUNK_HEADER_LENGTH + FORMAT_PAYLOAD_LENGTH


class AudioFormat(IntEnum):
    PCM = 1


def _coerce_audio_format(code: int) -> AudioFormat | int:
    try:
        return AudioFormat(code)
    except ValueError:
        return code


@dataclass(frozen=True)
class WaveFormat:
    """Audio parameters carried by a WAVE ``fmt `` chunk."""

    sample_rate: int
    channels: int
    bits_per_sample: int
    audio_format: AudioFormat | int = AudioFormat.PCM

    @property
    def block_align(self) -> int:
        """Bytes per multi-channel sample frame."""
        return self.bits_per_sample // 8 * self.channels

    @property
    def byte_rate(self) -> int:
        """Bytes of audio per second."""
        return self.sample_rate * self.block_align

    def validate(self) -> "WaveFormat":
        """Check field validity before encoding; return self for chaining."""
        if not 0 < self.bits_per_sample <= MAX_U16 or self.bits_per_sample % 8 != 0:
            raise ValidationError(
                f"bits_per_sample must be a positive 16-bit multiple of 8 (got {self.bits_per_sample})"
            )
        if not 0 < self.channels <= MAX_U16:
            raise ValidationError(f"channels must be between 1 and {MAX_U16} (got {self.channels})")
        if not 0 < self.sample_rate <= MAX_U32:
            raise ValidationError(f"sample_rate must be between 1 and {MAX_U32} (got {self.sample_rate})")
        if self.block_align > MAX_U16:
            raise ValidationError(f"block_align {self.block_align} does not fit in 16 bits")
        if self.byte_rate > MAX_U32:
            raise ValidationError(f"byte_rate {self.byte_rate} does not fit in 32 bits")
        return self

    def to_bytes(self) -> bytes:
        """Serialise the 16-byte ``fmt `` payload."""
        try:
            return _FORMAT_LAYOUT.pack(
                int(self.audio_format),
                self.channels,
                self.sample_rate,
                self.byte_rate,
                self.block_align,
                self.bits_per_sample,
            )
        except struct.error as exc:
            raise ValidationError(f"format field out of range: {exc}") from exc

    def to_chunk(self) -> Chunk:
        return Chunk(FOURCC_FORMAT, self.to_bytes())

    @classmethod
    def from_payload(cls, payload: bytes) -> "WaveFormat":
        """Parse a ``fmt `` payload, checking the redundant fields."""
        if len(payload) != FORMAT_PAYLOAD_LENGTH:
            raise CorruptedError(
                f"format payload must be {FORMAT_PAYLOAD_LENGTH} bytes (got {len(payload)})"
            )

        (
            audio_format,
            channels,
            sample_rate,
            stored_byte_rate,
            stored_block_align,
            bits_per_sample,
        ) = _FORMAT_LAYOUT.unpack(payload)

        fmt = cls(
            sample_rate=sample_rate,
            channels=channels,
            bits_per_sample=bits_per_sample,
            audio_format=_coerce_audio_format(audio_format),
        )

        if stored_byte_rate != fmt.byte_rate:
            raise CorruptedError(
                "stream has invalid average bytes-per-second field "
                f"(expected {fmt.byte_rate}, was {stored_byte_rate})"
            )
        if stored_block_align != fmt.block_align:
            raise CorruptedError(
                "stream contained invalid block alignment "
                f"(expected {fmt.block_align}, was {stored_block_align})"
            )
        return fmt

    def describe(self) -> str:
        audio_format = (
            self.audio_format.name
            if isinstance(self.audio_format, AudioFormat)
            else f"format {self.audio_format}"
        )
        return (
            f"{self.sample_rate}Hz, {self.bits_per_sample}-bit, "
            f"{self.channels}-channel, {audio_format} audio"
        )


def read_format(reader: ChunkReader, *, validate: bool = False) -> WaveFormat:
    """
    Read one chunk from `reader` and decode it as the WAVE format chunk.

    `EOFError` and transport errors from the reader propagate unchanged.
    """
    chunk, consumed = reader.read_chunk()
    if consumed != LENGTH_FORMAT_CHUNK:
        raise CorruptedError(f"format chunk is invalid size ({consumed})")
    if chunk.identifier != FOURCC_FORMAT:
        raise CorruptedError(
            f"format chunk FourCC incorrect ({chunk.identifier!r}, should be {FOURCC_FORMAT!r})"
        )

    fmt = WaveFormat.from_payload(chunk.data)
    if validate:
        fmt.validate()
    return fmt


def read_wave(reader: RiffReader) -> tuple[WaveFormat, list[Chunk]]:
    """Decode the format chunk and collect every following chunk as-is."""
    if reader.file_type != FILE_TYPE_WAVE:
        raise CorruptedError(f"not a WAVE file (file type {reader.file_type!r})")
    fmt = read_format(reader)
    return fmt, reader.read_to_end()


def write_pcm(writer: ChunkWriter, fmt: WaveFormat, pcm: bytes) -> int:
    """
    Write the ``fmt `` chunk followed by a ``data`` chunk holding `pcm`.

    Returns the combined number of bytes written. If the format chunk fails,
    the data chunk is not attempted; `writer.size` reflects whatever reached
    the sink.
    """
    written = writer.write_chunk(fmt.to_chunk())
    written += writer.write_chunk(Chunk(FOURCC_DATA, pcm))
    return written
