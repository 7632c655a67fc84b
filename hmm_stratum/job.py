"""
Mining job assembly.

A `MiningJob` is built once per block template and never modified; a new
template produces a new job (with `clean_jobs` telling miners whether to drop
in-flight work). Share checks read the job from any number of threads.
"""
from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Iterable

from .block import CandidateBlock
from .coinbase import apply_witness_commitment, build_coinbase_transaction, encode_height, split_coinbase
from .config import JobBuilderConfig
from .difficulty import network_difficulty
from .endian import stratum_prevhash
from .merkle import merkle_branch, merkle_root
from .template import (
    BlockTemplate,
    PayoutAddress,
    decode_template_transactions,
    parse_block_template,
    parse_payouts,
)
from .transaction import Transaction

logger = logging.getLogger(__name__)

MINING_NOTIFY = "mining.notify"


@dataclass(frozen=True)
class MiningJob:
    job_id: str
    prev_hash: bytes                    # little-endian, as in the block header
    version: int
    bits: int
    timestamp: int
    merkle_branch: tuple[bytes, ...]    # coinbase siblings, leaf to root
    coinb1: bytes
    coinb2: bytes
    network_difficulty: float
    clean_jobs: bool
    block: CandidateBlock               # skeleton, coinbase carries zero extranonces
    height: int
    height_script: bytes
    extranonce1_size: int
    extranonce2_size: int

    @property
    def merkle_root(self) -> bytes:
        return self.block.merkle_root

    @property
    def coinbase(self) -> Transaction:
        return self.block.coinbase

    @property
    def merkle_branch_hex(self) -> list[str]:
        return [h.hex() for h in self.merkle_branch]

    def notify_params(self) -> list[Any]:
        return [
            self.job_id,
            stratum_prevhash(self.prev_hash),
            self.coinb1.hex(),
            self.coinb2.hex(),
            self.merkle_branch_hex,
            f"{self.version & 0xFFFFFFFF:x}",
            f"{self.bits:x}",
            f"{self.timestamp:x}",
            self.clean_jobs,
        ]

    def notify_message(self) -> str:
        return json.dumps(
            {
                "id": None,
                "method": MINING_NOTIFY,
                "params": self.notify_params(),
            }
        )


def new_job_id() -> str:
    return uuid.uuid4().hex[:16]


def build_mining_job(
    job_id: str,
    template: BlockTemplate | dict[str, Any],
    payouts: Iterable[PayoutAddress | dict[str, Any]] | None = None,
    clean_jobs: bool = True,
    *,
    config: JobBuilderConfig | None = None,
    timestamp: int | None = None,
) -> MiningJob:
    """
    Build the job for `template`, paying `payouts` (defaults to the configured list).

    Raises TemplateDecodeError for malformed template data and
    InvalidPayoutAddress / PayoutConfigError for unusable payouts; nothing is
    returned on failure.
    """
    config = config or JobBuilderConfig()
    tpl = parse_block_template(template)
    payout_list = parse_payouts(config.payouts if payouts is None else payouts)
    transactions = decode_template_transactions(tpl)

    bits = tpl.bits_value
    difficulty = network_difficulty(bits)
    height_script = encode_height(tpl.height)

    coinbase = build_coinbase_transaction(
        payout_list,
        tpl.height,
        tpl.coinbasevalue,
        config.hrp,
        config.extranonce_placeholder(),
        version=config.coinbase_version,
    )
    coinbase = apply_witness_commitment(coinbase, transactions)
    parts = split_coinbase(coinbase, height_script, config.extranonce_size)

    leaves = [coinbase.txid_bytes] + [tx.txid_bytes for tx in transactions]
    branch = tuple(merkle_branch(leaves, 0))

    block = CandidateBlock(
        version=tpl.version,
        prev_hash=tpl.prev_hash_le,
        merkle_root=merkle_root(leaves),
        timestamp=int(time.time()) if timestamp is None else timestamp,
        bits=bits,
        nonce=0,
        transactions=(coinbase, *transactions),
    )

    job = MiningJob(
        job_id=job_id,
        prev_hash=block.prev_hash,
        version=block.version,
        bits=bits,
        timestamp=block.timestamp,
        merkle_branch=branch,
        coinb1=parts.coinb1,
        coinb2=parts.coinb2,
        network_difficulty=difficulty,
        clean_jobs=clean_jobs,
        block=block,
        height=tpl.height,
        height_script=height_script,
        extranonce1_size=config.extranonce1_size,
        extranonce2_size=config.extranonce2_size,
    )

    logger.info(
        "Built job %s (height=%s, txs=%d, difficulty=%.6g, clean_jobs=%s)",
        job_id,
        tpl.height,
        len(block.transactions),
        difficulty,
        clean_jobs,
    )
    logger.debug(
        "job %s coinb1=%s coinb2=%s branch=%s",
        job_id,
        parts.coinb1.hex(),
        parts.coinb2.hex(),
        job.merkle_branch_hex,
    )
    return job
