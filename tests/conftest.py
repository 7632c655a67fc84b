from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hmm_stratum.transaction import Transaction, TxIn, TxOut  # noqa: E402


# BIP173 examples
P2WPKH_MAINNET = "bc1qxy2kgdygjrsqtzq2n0yrf2493p83kkfjhx0wlh"
P2WPKH_MAINNET_PROGRAM = "311564348890e005880a9bc834aaa5884f1b5932"
P2WSH_MAINNET = "bc1qrp33g0q5c5txsp9arysrx4k6zdkfs4nce4xj0gdcccefvpysxf3qccfmv3"
P2WSH_MAINNET_PROGRAM = "1863143c14c5166804bd19203356da136c985678cd4d27a1b8c6329604903262"

BLOCK_800000_PREVHASH = "00000000000000000002a7c4c1e48d76c5a37902165a270156b7a8d72728a054"


def make_spend(seed: int, segwit: bool = False) -> Transaction:
    txin = TxIn(
        prev_hash=bytes([seed]) * 32,
        prev_index=seed,
        script_sig=b"" if segwit else b"\x51",
        sequence=0xFFFFFFFD,
        witness=(b"\x30" * 71, b"\x02" * 33) if segwit else (),
    )
    txout = TxOut(value=10_000 + seed, script_pubkey=b"\x00\x14" + bytes([seed]) * 20)
    return Transaction(version=2, inputs=(txin,), outputs=(txout,), locktime=0)


@pytest.fixture
def spend() -> Callable[..., Transaction]:
    return make_spend


@pytest.fixture
def make_template() -> Callable[..., dict[str, Any]]:
    def _make(
        transactions: list[Transaction] | None = None,
        height: int = 800_000,
        bits: str = "170d2f10",
        coinbasevalue: int = 625_000_000,
        previousblockhash: str = BLOCK_800000_PREVHASH,
        version: int = 0x20000000,
    ) -> dict[str, Any]:
        return {
            "previousblockhash": previousblockhash,
            "version": version,
            "bits": bits,
            "height": height,
            "coinbasevalue": coinbasevalue,
            "curtime": 1690168629,
            "rules": ["csv", "!segwit", "taproot"],
            "transactions": [
                {"data": tx.to_hex(), "txid": tx.txid, "hash": tx.wtxid}
                for tx in (transactions or [])
            ],
        }

    return _make


@pytest.fixture
def payouts() -> list[dict[str, Any]]:
    return [{"address": P2WPKH_MAINNET, "percent": 100}]
