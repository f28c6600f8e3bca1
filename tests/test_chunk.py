from __future__ import annotations

import pytest

from riffa.chunk import FOURCC_DATA, Chunk, fourcc
from riffa.errors import BadChunkError, ErrorKind, RiffaError


def test_byte_length_includes_header_and_padding():
    chunk = Chunk(FOURCC_DATA, bytes(3))
    assert chunk.size == 3
    assert chunk.byte_length == 8 + 3 + 1


def test_identifier_accepts_str():
    chunk = Chunk("fmt ", b"\x01")
    assert chunk.identifier == b"fmt "
    assert chunk == Chunk(b"fmt ", bytearray(b"\x01"))


def test_to_bytes_pads_odd_payload():
    chunk = Chunk(b"data", b"Hello, world!")
    assert chunk.to_bytes() == b"data\x0d\x00\x00\x00Hello, world!\x00"


@pytest.mark.parametrize("identifier", [b"abc", b"abcde", "", "dätä"])
def test_invalid_identifier_raises_bad_chunk(identifier):
    with pytest.raises(BadChunkError) as excinfo:
        Chunk(identifier, b"")

    assert isinstance(excinfo.value, RiffaError)
    assert isinstance(excinfo.value, ValueError)
    assert excinfo.value.kind is ErrorKind.BAD_CHUNK


def test_fourcc_compares_bytewise():
    assert fourcc("WAVE") == b"WAVE"
    assert fourcc(b"wave") != fourcc("WAVE")
