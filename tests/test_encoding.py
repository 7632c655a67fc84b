from __future__ import annotations

import pytest

from hmm_stratum.encoding import ByteReader, encode_varint, push_data, scriptnum_encode, sha256d
from hmm_stratum.endian import (
    hash_hex_to_internal,
    internal_to_hash_hex,
    stratum_prevhash,
    swap_endian_words,
)


def test_sha256d_empty_payload() -> None:
    assert sha256d(b"").hex() == "5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456"


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, "00"),
        (0xFC, "fc"),
        (0xFD, "fdfd00"),
        (0xFFFF, "fdffff"),
        (0x10000, "fe00000100"),
        (0xFFFFFFFF, "feffffffff"),
        (2**32, "ff0000000001000000"),
    ],
)
def test_varint_size_boundaries(value: int, expected: str) -> None:
    assert encode_varint(value).hex() == expected


def test_varint_rejects_out_of_range() -> None:
    with pytest.raises(ValueError):
        encode_varint(-1)
    with pytest.raises(ValueError):
        encode_varint(2**64)


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, ""),
        (1, "01"),
        (127, "7f"),
        (128, "8000"),
        (255, "ff00"),
        (256, "0001"),
        (800_000, "00350c"),
        (-1, "81"),
        (-128, "8080"),
    ],
)
def test_scriptnum_minimal_encoding(value: int, expected: str) -> None:
    assert scriptnum_encode(value).hex() == expected


def test_push_data_picks_smallest_opcode() -> None:
    assert push_data(b"\xaa" * 75)[:1] == b"\x4b"
    assert push_data(b"\xaa" * 76)[:2] == b"\x4c\x4c"
    assert push_data(b"\xaa" * 256)[:3] == b"\x4d\x00\x01"
    assert len(push_data(b"\xaa" * 256)) == 259


def test_byte_reader_reads_sequentially_and_detects_truncation() -> None:
    reader = ByteReader(bytes.fromhex("fd0300aabbcc01"))
    assert reader.read_var_bytes() == b"\xaa\xbb\xcc"
    assert reader.remaining == 1
    assert reader.peek(4) == b"\x01"
    with pytest.raises(ValueError):
        reader.read(2)
    assert reader.read_uint(1) == 1
    assert reader.remaining == 0


def test_swap_endian_words_reverses_inside_each_word() -> None:
    raw = bytes(range(8))
    assert swap_endian_words(raw) == bytes([3, 2, 1, 0, 7, 6, 5, 4])
    assert swap_endian_words(swap_endian_words(raw)) == raw

    with pytest.raises(ValueError):
        swap_endian_words(b"\x00" * 5)


def test_hash_hex_round_trip_is_byte_reversal() -> None:
    display = "000000000019d6689c085ae165831e934ff763ae46a2a6c172b3f1b60a8ce26f"
    internal = hash_hex_to_internal(display)
    assert internal[:2] == b"\x6f\xe2"
    assert internal_to_hash_hex(internal) == display


def test_stratum_prevhash_swaps_words_of_internal_order() -> None:
    display = "0" * 60 + "abcd"
    assert stratum_prevhash(hash_hex_to_internal(display)) == "0000abcd" + "0" * 56

    with pytest.raises(ValueError):
        stratum_prevhash(b"\x00" * 31)
