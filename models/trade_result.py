"""
Final artifact of a successful session: how much of the output token the
holder owns once the swap is mined.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class TradeResult(BaseModel):
    token_out: str
    holder: str
    decimals: int
    balance_raw: int
    amount_out: Decimal
    tx_hash: str
    status: int
