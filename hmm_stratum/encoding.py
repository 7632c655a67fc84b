"""Consensus byte encodings shared by transactions, scripts and blocks."""

from __future__ import annotations

import hashlib


HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_hex(value: str) -> bool:
    """True for strings made only of hex digits; `bytes.fromhex` alone also skips whitespace."""
    return all(c in HEX_DIGITS for c in value)


def sha256d(payload: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(payload).digest()).digest()


def encode_varint(value: int) -> bytes:
    if value < 0:
        raise ValueError("varint cannot encode negative values")
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b"\xfd" + value.to_bytes(2, "little")
    if value <= 0xFFFFFFFF:
        return b"\xfe" + value.to_bytes(4, "little")
    if value <= 0xFFFFFFFFFFFFFFFF:
        return b"\xff" + value.to_bytes(8, "little")
    raise ValueError("varint cannot encode values above 2^64-1")


def scriptnum_encode(value: int) -> bytes:
    """Minimal little-endian script number (sign bit in the last byte)."""
    if value == 0:
        return b""
    result = bytearray()
    neg = value < 0
    value = abs(value)
    while value:
        result.append(value & 0xFF)
        value >>= 8
    if result[-1] & 0x80:
        result.append(0x80 if neg else 0x00)
    elif neg:
        result[-1] |= 0x80
    return bytes(result)


def push_data(data: bytes) -> bytes:
    """Smallest push opcode sequence for `data`."""
    size = len(data)
    if size < 0x4C:
        return bytes([size]) + data
    if size <= 0xFF:
        return b"\x4c" + bytes([size]) + data
    if size <= 0xFFFF:
        return b"\x4d" + size.to_bytes(2, "little") + data
    return b"\x4e" + size.to_bytes(4, "little") + data


class ByteReader:
    """Sequential reader over a byte string; raises ValueError on truncation."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def peek(self, size: int) -> bytes:
        return self.data[self.offset : self.offset + size]

    def read(self, size: int) -> bytes:
        if size < 0 or size > self.remaining:
            raise ValueError(
                f"need {size} bytes at offset {self.offset}, only {self.remaining} left"
            )
        chunk = self.data[self.offset : self.offset + size]
        self.offset += size
        return chunk

    def read_uint(self, size: int) -> int:
        return int.from_bytes(self.read(size), "little")

    def read_varint(self) -> int:
        prefix = self.read_uint(1)
        if prefix < 0xFD:
            return prefix
        if prefix == 0xFD:
            return self.read_uint(2)
        if prefix == 0xFE:
            return self.read_uint(4)
        return self.read_uint(8)

    def read_var_bytes(self) -> bytes:
        return self.read(self.read_varint())
