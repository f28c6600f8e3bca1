from __future__ import annotations

import io

import pytest

from conftest import FlakySink
from riffa.chunk import Chunk
from riffa.errors import CorruptedError, ErrorKind, ValidationError
from riffa.reader import RiffReader
from riffa.wave import (
    FILE_TYPE_WAVE,
    LENGTH_FORMAT_CHUNK,
    AudioFormat,
    WaveFormat,
    read_format,
    read_wave,
    write_pcm,
)
from riffa.writer import RiffWriter

STEREO_CD = WaveFormat(sample_rate=44_100, channels=2, bits_per_sample=16)


class StubReader:
    """Hands back a canned chunk and consumed-byte count."""

    def __init__(self, chunk: Chunk, consumed: int | None = None):
        self.chunk = chunk
        self.consumed = consumed if consumed is not None else chunk.byte_length

    def read_chunk(self):
        return self.chunk, self.consumed


def test_derived_fields():
    assert STEREO_CD.block_align == 4
    assert STEREO_CD.byte_rate == 176_400
    assert STEREO_CD.audio_format is AudioFormat.PCM


def test_read_format(build_riff, fmt_payload):
    reader = RiffReader(io.BytesIO(build_riff([Chunk(b"fmt ", fmt_payload())])))

    fmt = read_format(reader)

    assert fmt == STEREO_CD
    assert fmt.describe() == "44100Hz, 16-bit, 2-channel, PCM audio"


def test_read_format_rejects_wrong_fourcc(fmt_payload):
    with pytest.raises(CorruptedError):
        read_format(StubReader(Chunk(b"data", fmt_payload())))


def test_read_format_rejects_wrong_length():
    with pytest.raises(CorruptedError):
        read_format(StubReader(Chunk(b"fmt ", bytes(18))))


def test_read_format_rejects_odd_payload_hidden_by_padding():
    # 15 declared bytes pad to 16 on the wire, so only the payload check catches it.
    chunk = Chunk(b"fmt ", bytes(15))
    assert chunk.byte_length == LENGTH_FORMAT_CHUNK
    with pytest.raises(CorruptedError):
        read_format(StubReader(chunk))


def test_read_format_rejects_bad_byte_rate(fmt_payload):
    with pytest.raises(CorruptedError) as excinfo:
        read_format(StubReader(Chunk(b"fmt ", fmt_payload(byte_rate=88_200))))
    assert excinfo.value.kind is ErrorKind.CORRUPTED


def test_read_format_rejects_bad_block_align(fmt_payload):
    with pytest.raises(CorruptedError):
        read_format(StubReader(Chunk(b"fmt ", fmt_payload(block_align=2))))


def test_read_format_keeps_unknown_audio_format(fmt_payload):
    fmt = read_format(StubReader(Chunk(b"fmt ", fmt_payload(audio_format=3))))
    assert fmt.audio_format == 3
    assert "format 3" in fmt.describe()


def test_read_format_optionally_validates(fmt_payload):
    payload = fmt_payload(channels=0, byte_rate=0, block_align=0)
    assert read_format(StubReader(Chunk(b"fmt ", payload))).channels == 0
    with pytest.raises(ValidationError):
        read_format(StubReader(Chunk(b"fmt ", payload)), validate=True)


def test_read_format_propagates_end_of_stream(build_riff):
    reader = RiffReader(io.BytesIO(build_riff()))
    with pytest.raises(EOFError):
        read_format(reader)


@pytest.mark.parametrize(
    "fmt",
    [
        WaveFormat(sample_rate=44_100, channels=2, bits_per_sample=0),
        WaveFormat(sample_rate=44_100, channels=2, bits_per_sample=12),
        WaveFormat(sample_rate=44_100, channels=0, bits_per_sample=16),
        WaveFormat(sample_rate=0, channels=2, bits_per_sample=16),
        WaveFormat(sample_rate=0xFFFFFFFF, channels=2, bits_per_sample=16),
        WaveFormat(sample_rate=-8_000, channels=1, bits_per_sample=16),
        WaveFormat(sample_rate=8_000, channels=-1, bits_per_sample=16),
        WaveFormat(sample_rate=8_000, channels=1, bits_per_sample=-16),
        WaveFormat(sample_rate=8_000, channels=0x10000, bits_per_sample=8),
    ],
)
def test_validate_rejects_invalid_fields(fmt):
    with pytest.raises(ValidationError) as excinfo:
        fmt.validate()
    assert isinstance(excinfo.value, ValueError)
    assert not isinstance(excinfo.value, CorruptedError)


def test_validate_returns_format():
    assert STEREO_CD.validate() is STEREO_CD


def test_write_pcm(fmt_payload):
    sink = io.BytesIO()
    writer = RiffWriter(sink, FILE_TYPE_WAVE)
    pcm = bytes([42, 61, 79])

    written = write_pcm(writer, STEREO_CD, pcm)
    writer.close()

    assert written == LENGTH_FORMAT_CHUNK + 8 + 4
    assert sink.getvalue()[12:36] == b"fmt \x10\x00\x00\x00" + fmt_payload()
    assert sink.getvalue()[36:] == b"data\x03\x00\x00\x00" + pcm + b"\x00"


def test_write_pcm_recomputes_redundant_fields():
    mono_8bit = WaveFormat(sample_rate=8_000, channels=1, bits_per_sample=8)
    payload = mono_8bit.to_bytes()
    decoded = WaveFormat.from_payload(payload)

    assert decoded == mono_8bit
    assert payload[8:12] == (8_000).to_bytes(4, "little")
    assert payload[12:14] == (1).to_bytes(2, "little")


def test_write_pcm_stops_after_format_failure():
    error = OSError("disk full")
    # Header takes three writes; fail on the fmt chunk's payload.
    sink = FlakySink(fail_on=6, error=error)
    writer = RiffWriter(sink, FILE_TYPE_WAVE)

    with pytest.raises(OSError) as excinfo:
        write_pcm(writer, STEREO_CD, b"\x00\x00\x00\x00")

    assert excinfo.value is error
    assert sink.calls == 6
    assert writer.size == 4 + 8


def test_write_pcm_data_failure_reports_format_bytes():
    error = OSError("disk full")
    sink = FlakySink(fail_on=9, error=error)
    writer = RiffWriter(sink, FILE_TYPE_WAVE)

    with pytest.raises(OSError):
        write_pcm(writer, STEREO_CD, b"\x00\x00\x00\x00")

    assert writer.size == 4 + LENGTH_FORMAT_CHUNK + 8


def test_read_wave(sample_wav):
    fmt, chunks = read_wave(RiffReader(io.BytesIO(sample_wav)))

    assert fmt == STEREO_CD
    assert [chunk.identifier for chunk in chunks] == [b"data", b"LIST"]
    assert chunks[0].data == bytes(range(16))


def test_read_wave_rejects_other_file_types(sample_webp):
    with pytest.raises(CorruptedError):
        read_wave(RiffReader(io.BytesIO(sample_webp)))
