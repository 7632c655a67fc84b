"""Segwit payout addresses (BIP173 bech32, BIP350 bech32m) to coinbase output scripts."""

from __future__ import annotations

import bech32

from .errors import InvalidPayoutAddress


NETWORK_HRPS = {
    "bitcoin": "bc",
    "testnet": "tb",
    "signet": "tb",
    "regtest": "bcrt",
}


def decode_segwit_address(address: str, hrp: str) -> tuple[int, bytes]:
    """Return (witness version, witness program) for `address` on network `hrp`."""
    witver, program = bech32.decode(hrp, address)
    if witver is None:
        raise InvalidPayoutAddress(f"not a valid segwit address for hrp {hrp!r}: {address!r}")
    return witver, bytes(program)


def witness_script_pubkey(witver: int, program: bytes) -> bytes:
    # OP_0 or OP_1..OP_16, then a direct push of the program
    version_op = 0x00 if witver == 0 else 0x50 + witver
    return bytes([version_op, len(program)]) + program


def address_to_script_pubkey(address: str, hrp: str) -> bytes:
    return witness_script_pubkey(*decode_segwit_address(address, hrp))
