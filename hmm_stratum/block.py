"""Candidate block: header fields plus the ordered transaction list."""

from __future__ import annotations

from dataclasses import dataclass

from .encoding import encode_varint, sha256d
from .transaction import Transaction


@dataclass(frozen=True)
class CandidateBlock:
    version: int
    prev_hash: bytes            # internal (little-endian) order
    merkle_root: bytes          # internal order
    timestamp: int
    bits: int
    nonce: int
    transactions: tuple[Transaction, ...]

    @property
    def coinbase(self) -> Transaction:
        return self.transactions[0]

    def header(self) -> bytes:
        """80-byte block header."""
        return (
            (self.version & 0xFFFFFFFF).to_bytes(4, "little")
            + self.prev_hash
            + self.merkle_root
            + self.timestamp.to_bytes(4, "little")
            + self.bits.to_bytes(4, "little")
            + self.nonce.to_bytes(4, "little")
        )

    def hash(self) -> bytes:
        return sha256d(self.header())

    def hash_hex(self) -> str:
        return self.hash()[::-1].hex()

    def serialize(self) -> bytes:
        """Full block in submitblock form (witness serialization)."""
        return (
            self.header()
            + encode_varint(len(self.transactions))
            + b"".join(tx.serialize(include_witness=True) for tx in self.transactions)
        )
