"""Bitcoin transaction records and their consensus serialization.

Records are frozen so jobs can share them between concurrent share checks;
derive modified copies with `dataclasses.replace`.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from .encoding import ByteReader, encode_varint, is_hex, sha256d
from .errors import TemplateDecodeError


NULL_HASH = b"\x00" * 32
MAX_SEQUENCE = 0xFFFFFFFF


@dataclass(frozen=True)
class TxIn:
    prev_hash: bytes
    prev_index: int
    script_sig: bytes
    sequence: int = MAX_SEQUENCE
    witness: tuple[bytes, ...] = ()

    def serialize(self) -> bytes:
        return (
            self.prev_hash
            + self.prev_index.to_bytes(4, "little")
            + encode_varint(len(self.script_sig))
            + self.script_sig
            + self.sequence.to_bytes(4, "little")
        )

    def serialize_witness(self) -> bytes:
        return encode_varint(len(self.witness)) + b"".join(
            encode_varint(len(item)) + item for item in self.witness
        )


@dataclass(frozen=True)
class TxOut:
    value: int
    script_pubkey: bytes

    def serialize(self) -> bytes:
        return (
            self.value.to_bytes(8, "little", signed=True)
            + encode_varint(len(self.script_pubkey))
            + self.script_pubkey
        )


@dataclass(frozen=True)
class Transaction:
    version: int
    inputs: tuple[TxIn, ...]
    outputs: tuple[TxOut, ...]
    locktime: int = 0

    @property
    def has_witness(self) -> bool:
        return any(txin.witness for txin in self.inputs)

    @property
    def is_coinbase(self) -> bool:
        return (
            len(self.inputs) == 1
            and self.inputs[0].prev_hash == NULL_HASH
            and self.inputs[0].prev_index == 0xFFFFFFFF
        )

    def serialize(self, include_witness: bool = True) -> bytes:
        """Witness form (BIP144) when requested and present, legacy form otherwise."""
        witness = include_witness and self.has_witness
        parts = [self.version.to_bytes(4, "little", signed=True)]
        if witness:
            parts.append(b"\x00\x01")
        parts.append(encode_varint(len(self.inputs)))
        parts.extend(txin.serialize() for txin in self.inputs)
        parts.append(encode_varint(len(self.outputs)))
        parts.extend(txout.serialize() for txout in self.outputs)
        if witness:
            parts.extend(txin.serialize_witness() for txin in self.inputs)
        parts.append(self.locktime.to_bytes(4, "little"))
        return b"".join(parts)

    def to_hex(self, include_witness: bool = True) -> str:
        return self.serialize(include_witness).hex()

    @cached_property
    def txid_bytes(self) -> bytes:
        """Legacy hash in internal byte order (merkle leaf form)."""
        return sha256d(self.serialize(include_witness=False))

    @cached_property
    def wtxid_bytes(self) -> bytes:
        return sha256d(self.serialize(include_witness=True))

    @property
    def txid(self) -> str:
        return self.txid_bytes[::-1].hex()

    @property
    def wtxid(self) -> str:
        return self.wtxid_bytes[::-1].hex()

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Transaction":
        try:
            reader = ByteReader(raw)
            tx = _read_transaction(reader)
        except ValueError as exc:
            raise TemplateDecodeError(f"malformed transaction: {exc}") from exc
        if reader.remaining:
            raise TemplateDecodeError(f"malformed transaction: {reader.remaining} trailing bytes")
        return tx

    @classmethod
    def from_hex(cls, raw_hex: str) -> "Transaction":
        if not is_hex(raw_hex):
            raise TemplateDecodeError(f"transaction data is not hex: {raw_hex[:32]!r}")
        try:
            raw = bytes.fromhex(raw_hex)
        except ValueError as exc:
            raise TemplateDecodeError(f"transaction data is not hex: {exc}") from exc
        return cls.from_bytes(raw)


def _read_transaction(reader: ByteReader) -> Transaction:
    version = int.from_bytes(reader.read(4), "little", signed=True)

    segwit = reader.peek(2) == b"\x00\x01"
    if segwit:
        reader.read(2)

    input_count = reader.read_varint()
    if input_count == 0:
        raise ValueError("transaction has no inputs")
    raw_inputs = [
        (reader.read(32), reader.read_uint(4), reader.read_var_bytes(), reader.read_uint(4))
        for _ in range(input_count)
    ]

    outputs = tuple(
        TxOut(value=int.from_bytes(reader.read(8), "little", signed=True), script_pubkey=reader.read_var_bytes())
        for _ in range(reader.read_varint())
    )

    witnesses: list[tuple[bytes, ...]] = [()] * input_count
    if segwit:
        witnesses = [
            tuple(reader.read_var_bytes() for _ in range(reader.read_varint()))
            for _ in range(input_count)
        ]

    locktime = reader.read_uint(4)

    inputs = tuple(
        TxIn(prev_hash=prev_hash, prev_index=prev_index, script_sig=script, sequence=sequence, witness=witness)
        for (prev_hash, prev_index, script, sequence), witness in zip(raw_inputs, witnesses)
    )
    return Transaction(version=version, inputs=inputs, outputs=outputs, locktime=locktime)
