"""Byte-order helpers for the Stratum wire format.

Nodes display hashes big-endian; block headers and Stratum carry them in
internal (little-endian) order, and `mining.notify` additionally reverses
the bytes inside every 4-byte word of the previous block hash.
"""

from __future__ import annotations


def hash_hex_to_internal(hash_hex: str) -> bytes:
    """Big-endian display hex -> internal little-endian bytes."""
    return bytes.fromhex(hash_hex)[::-1]


def internal_to_hash_hex(raw: bytes) -> str:
    return raw[::-1].hex()


def swap_endian_words(raw: bytes) -> bytes:
    """Swap byte order within each 4-byte word (Stratum prevhash convention)."""
    if len(raw) % 4:
        raise ValueError("length must be a multiple of 4 bytes")
    return b"".join(raw[i : i + 4][::-1] for i in range(0, len(raw), 4))


def stratum_prevhash(prev_hash_le: bytes) -> str:
    """Hex string of the word-swapped internal-order previous block hash."""
    if len(prev_hash_le) != 32:
        raise ValueError("expected 32-byte hash")
    return swap_endian_words(prev_hash_le).hex()
