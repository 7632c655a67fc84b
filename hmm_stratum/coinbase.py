"""
Coinbase transaction construction.

Layout of the pool coinbase (transaction version 2, locktime 0):

    input:   null outpoint, sequence 0xffffffff
             scriptSig = <BIP34 height push> <extranonce1> <extranonce2>
             witness   = [32 zero bytes]  (witness reserved value)
    outputs: one per payout address, value split by percentage;
             output 0's script is replaced by the segwit commitment

Stratum miners receive the legacy serialization split around the
extranonce bytes as coinb1/coinb2.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from fractions import Fraction
from typing import Sequence

from .address import address_to_script_pubkey
from .encoding import encode_varint, push_data, scriptnum_encode, sha256d
from .errors import CoinbaseScriptError, PayoutConfigError, UnsupportedHeightEncoding
from .merkle import merkle_root
from .template import PayoutAddress
from .transaction import MAX_SEQUENCE, NULL_HASH, Transaction, TxIn, TxOut

logger = logging.getLogger(__name__)

WITNESS_RESERVED_VALUE = b"\x00" * 32
WITNESS_COMMITMENT_HEADER = bytes.fromhex("aa21a9ed")
OP_RETURN = 0x6A

MAX_HEIGHT_SCRIPTNUM_BYTES = 4
MIN_SCRIPT_SIG_SIZE = 2
MAX_SCRIPT_SIG_SIZE = 100


def encode_height(height: int) -> bytes:
    """
    BIP34 height push, byte-identical to Bitcoin Core's `CScript() << height`.

    0 -> OP_0, 1..16 -> OP_1..OP_16, otherwise a minimal script-number push.
    """
    if height < 0:
        raise UnsupportedHeightEncoding(f"negative block height {height}")
    if height == 0:
        return b"\x00"
    if height <= 16:
        return bytes([0x50 + height])

    number = scriptnum_encode(height)
    if len(number) > MAX_HEIGHT_SCRIPTNUM_BYTES:
        raise UnsupportedHeightEncoding(
            f"height {height} needs {len(number)} script bytes (max {MAX_HEIGHT_SCRIPTNUM_BYTES})"
        )
    return push_data(number)


def split_payout_values(payouts: Sequence[PayoutAddress], total: int) -> list[int]:
    """
    floor(percent / 100 * total) per address; the first address absorbs the
    remainder so the values always sum to `total`.
    """
    if not payouts:
        raise PayoutConfigError("at least one payout address is required")

    values = [
        math.floor(Fraction(payout.percent) * total / 100)
        for payout in payouts
    ]
    values[0] = total - sum(values[1:])
    if values[0] < 0:
        raise PayoutConfigError(
            f"payout percentages exceed 100% (first output would be {values[0]} sat)"
        )
    return values


def build_payout_outputs(payouts: Sequence[PayoutAddress], total: int, hrp: str) -> list[TxOut]:
    values = split_payout_values(payouts, total)
    return [
        TxOut(value=value, script_pubkey=address_to_script_pubkey(payout.address, hrp))
        for payout, value in zip(payouts, values)
    ]


def build_coinbase_transaction(
    payouts: Sequence[PayoutAddress],
    height: int,
    total: int,
    hrp: str,
    extranonce_placeholder: bytes,
    version: int = 2,
) -> Transaction:
    """Coinbase before the witness commitment is applied."""
    script_sig = encode_height(height) + extranonce_placeholder
    if not MIN_SCRIPT_SIG_SIZE <= len(script_sig) <= MAX_SCRIPT_SIG_SIZE:
        raise CoinbaseScriptError(
            f"coinbase scriptSig is {len(script_sig)} bytes "
            f"(allowed {MIN_SCRIPT_SIG_SIZE}-{MAX_SCRIPT_SIG_SIZE})"
        )

    coinbase_input = TxIn(
        prev_hash=NULL_HASH,
        prev_index=0xFFFFFFFF,
        script_sig=script_sig,
        sequence=MAX_SEQUENCE,
        witness=(WITNESS_RESERVED_VALUE,),
    )
    return Transaction(
        version=version,
        inputs=(coinbase_input,),
        outputs=tuple(build_payout_outputs(payouts, total, hrp)),
        locktime=0,
    )


def witness_commitment_script(commitment: bytes) -> bytes:
    # OP_RETURN, push 36, aa21a9ed, 32-byte commitment
    return bytes([OP_RETURN]) + push_data(WITNESS_COMMITMENT_HEADER + commitment)


def witness_commitment(transactions: Sequence[Transaction]) -> bytes:
    """
    BIP141 commitment hash for a block whose non-coinbase transactions are
    `transactions`: sha256d(witness merkle root || witness reserved value),
    with the coinbase's wtxid taken as 32 zero bytes.
    """
    leaves = [b"\x00" * 32] + [tx.wtxid_bytes for tx in transactions]
    return sha256d(merkle_root(leaves) + WITNESS_RESERVED_VALUE)


def apply_witness_commitment(coinbase: Transaction, transactions: Sequence[Transaction]) -> Transaction:
    """Overwrite output 0's script with the commitment; its value is kept."""
    commitment = witness_commitment(transactions)
    first = coinbase.outputs[0]
    committed = replace(first, script_pubkey=witness_commitment_script(commitment))
    logger.debug("witness commitment %s over %d transactions", commitment.hex(), len(transactions))
    return replace(coinbase, outputs=(committed,) + coinbase.outputs[1:])


def with_extranonce(coinbase: Transaction, height_script: bytes, extranonce1: bytes, extranonce2: bytes) -> Transaction:
    coinbase_input = replace(coinbase.inputs[0], script_sig=height_script + extranonce1 + extranonce2)
    return replace(coinbase, inputs=(coinbase_input,) + coinbase.inputs[1:])


@dataclass(frozen=True)
class CoinbaseParts:
    """Legacy coinbase serialization split at the extranonce insertion point."""
    coinb1: bytes
    coinb2: bytes
    extranonce_offset: int
    extranonce_size: int

    def join(self, extranonce1: bytes, extranonce2: bytes) -> bytes:
        return self.coinb1 + extranonce1 + extranonce2 + self.coinb2


def split_coinbase(coinbase: Transaction, height_script: bytes, extranonce_size: int) -> CoinbaseParts:
    """
    Serialize `coinbase` (legacy form) in two phases around the extranonce.

    Phase one writes everything up to and including the height push and
    records that offset; phase two writes what follows the extranonce bytes.
    """
    coinbase_input = coinbase.inputs[0]
    if not coinbase_input.script_sig.startswith(height_script) or (
        len(coinbase_input.script_sig) != len(height_script) + extranonce_size
    ):
        raise CoinbaseScriptError("coinbase scriptSig does not match height push + extranonce layout")

    head = (
        coinbase.version.to_bytes(4, "little", signed=True)
        + encode_varint(len(coinbase.inputs))
        + coinbase_input.prev_hash
        + coinbase_input.prev_index.to_bytes(4, "little")
        + encode_varint(len(coinbase_input.script_sig))
        + height_script
    )
    offset = len(head)

    tail = [coinbase_input.sequence.to_bytes(4, "little")]
    tail.extend(txin.serialize() for txin in coinbase.inputs[1:])
    tail.append(encode_varint(len(coinbase.outputs)))
    tail.extend(txout.serialize() for txout in coinbase.outputs)
    tail.append(coinbase.locktime.to_bytes(4, "little"))

    return CoinbaseParts(
        coinb1=head,
        coinb2=b"".join(tail),
        extranonce_offset=offset,
        extranonce_size=extranonce_size,
    )
