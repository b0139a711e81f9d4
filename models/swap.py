"""
Transaction-side models of a swap.

``FeeParams`` is what the caller decides (gas and nonce); ``PendingSwap`` is
what the executor hands to the confirmation tracker once the signed
transaction has been broadcast.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field


class FeeParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    gas_price_wei: int = Field(ge=0)
    gas_limit: int = Field(gt=0)
    nonce: int = Field(ge=0)


class PendingSwap(BaseModel):
    model_config = ConfigDict(frozen=True)

    tx_hash: str
    to: str
    value: int
    gas: int
    gas_price: int
    nonce: int
    raw_transaction: str
    native_input: bool
    amount_in: int
    amount_out_min: int = 0
    submitted_at: float = Field(default_factory=time.time)
