"""
Input models: the node's block template and the pool's payout list.

Both arrive as loosely typed JSON (getblocktemplate result, config file);
pydantic validates them before any consensus bytes are produced.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .encoding import is_hex
from .endian import hash_hex_to_internal
from .errors import PayoutConfigError, TemplateDecodeError
from .transaction import Transaction


class TemplateTransaction(BaseModel):
    """One entry of getblocktemplate's `transactions` array; only `data` is used"""
    model_config = ConfigDict(frozen=True)

    data: str


class BlockTemplate(BaseModel):
    """
    The subset of a getblocktemplate result needed to build a job.

    Other template fields (curtime, target, rules, default_witness_commitment ...)
    are accepted and ignored.
    """
    model_config = ConfigDict(frozen=True)

    previousblockhash: str              # 64 hex chars, big-endian display order
    version: int
    bits: str                           # compact target as hex: "170d2f10"
    height: int = Field(ge=0)
    coinbasevalue: int = Field(ge=0)    # satoshis, subsidy + fees
    transactions: list[TemplateTransaction] = Field(default_factory=list)

    @field_validator("previousblockhash")
    @classmethod
    def _check_previousblockhash(cls, value: str) -> str:
        if len(value) != 64 or not is_hex(value):
            raise ValueError("previousblockhash must be 64 hex characters")
        return value.lower()

    @field_validator("bits")
    @classmethod
    def _check_bits(cls, value: str) -> str:
        if not 1 <= len(value) <= 8 or not is_hex(value):
            raise ValueError("bits must be 1-8 hex characters")
        return value.lower()

    @property
    def prev_hash_le(self) -> bytes:
        return hash_hex_to_internal(self.previousblockhash)

    @property
    def bits_value(self) -> int:
        return int(self.bits, 16)


class PayoutAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    percent: Decimal = Field(ge=0, allow_inf_nan=False)


def parse_block_template(payload: BlockTemplate | dict[str, Any]) -> BlockTemplate:
    if isinstance(payload, BlockTemplate):
        return payload
    try:
        return BlockTemplate.model_validate(payload)
    except ValidationError as exc:
        raise TemplateDecodeError(f"invalid block template: {exc}") from exc


def decode_template_transactions(template: BlockTemplate) -> list[Transaction]:
    transactions: list[Transaction] = []
    for index, entry in enumerate(template.transactions):
        try:
            transactions.append(Transaction.from_hex(entry.data))
        except TemplateDecodeError as exc:
            raise TemplateDecodeError(f"template transaction {index}: {exc}") from exc
    return transactions


def parse_payouts(items: Iterable[PayoutAddress | dict[str, Any]]) -> list[PayoutAddress]:
    payouts: list[PayoutAddress] = []
    for item in items:
        if isinstance(item, PayoutAddress):
            payouts.append(item)
            continue
        try:
            payouts.append(PayoutAddress.model_validate(item))
        except ValidationError as exc:
            raise PayoutConfigError(f"invalid payout entry {item!r}: {exc}") from exc
    if not payouts:
        raise PayoutConfigError("at least one payout address is required")
    return payouts
