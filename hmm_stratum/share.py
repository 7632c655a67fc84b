"""
Candidate block reconstruction for submitted shares.

`reconstruct_block` never touches the job: every record involved is frozen,
so each call derives its own coinbase and header with `dataclasses.replace`.
Safe to call concurrently against one job.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .block import CandidateBlock
from .coinbase import with_extranonce
from .encoding import is_hex
from .errors import ExtranonceLengthMismatch, InvalidShareParameters
from .job import MiningJob
from .merkle import fold_branch

logger = logging.getLogger(__name__)

UINT32_MAX = 0xFFFFFFFF


class ShareSubmission(BaseModel):
    """Share values as handed over by the Stratum session layer."""
    model_config = ConfigDict(frozen=True)

    nonce: int = Field(ge=0, le=UINT32_MAX)
    extranonce1: str
    extranonce2: str
    version_mask: int | None = Field(default=0, ge=0, le=UINT32_MAX)


def _extranonce_bytes(value: str | bytes, name: str, expected_size: int) -> bytes:
    if isinstance(value, str):
        if not is_hex(value):
            raise InvalidShareParameters(f"{name} is not hex: {value!r}")
        try:
            value = bytes.fromhex(value)
        except ValueError as exc:
            raise InvalidShareParameters(f"{name} is not hex: {exc}") from exc
    if len(value) != expected_size:
        raise ExtranonceLengthMismatch(
            f"{name} is {len(value)} bytes, job expects {expected_size}"
        )
    return value


def reconstruct_block(
    job: MiningJob,
    nonce: int,
    extranonce1: str | bytes,
    extranonce2: str | bytes,
    version_mask: int | None = 0,
) -> CandidateBlock:
    if not 0 <= nonce <= UINT32_MAX:
        raise InvalidShareParameters(f"nonce {nonce} out of uint32 range")
    if not 0 <= (version_mask or 0) <= UINT32_MAX:
        raise InvalidShareParameters(f"version mask {version_mask} out of uint32 range")

    ex1 = _extranonce_bytes(extranonce1, "extranonce1", job.extranonce1_size)
    ex2 = _extranonce_bytes(extranonce2, "extranonce2", job.extranonce2_size)

    skeleton = job.block
    version = skeleton.version
    if version_mask:
        version = (version ^ version_mask) & UINT32_MAX

    coinbase = with_extranonce(skeleton.coinbase, job.height_script, ex1, ex2)
    root = fold_branch(coinbase.txid_bytes, job.merkle_branch)

    candidate = replace(
        skeleton,
        version=version,
        nonce=nonce,
        merkle_root=root,
        transactions=(coinbase,) + skeleton.transactions[1:],
    )
    logger.debug(
        "job %s candidate nonce=%08x version=%08x root=%s",
        job.job_id,
        nonce,
        version & UINT32_MAX,
        root.hex(),
    )
    return candidate


def try_share(job: MiningJob, submission: ShareSubmission | dict) -> CandidateBlock:
    if not isinstance(submission, ShareSubmission):
        try:
            submission = ShareSubmission.model_validate(submission)
        except ValidationError as exc:
            raise InvalidShareParameters(f"invalid share submission: {exc}") from exc

    return reconstruct_block(
        job,
        nonce=submission.nonce,
        extranonce1=submission.extranonce1,
        extranonce2=submission.extranonce2,
        version_mask=submission.version_mask or 0,
    )
