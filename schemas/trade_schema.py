"""
Result type returned by ``TradeSession.run``.

A session never raises for expected failures: it returns a ``TradeOutcome``
whose ``error_kind`` tells a UI or the CLI what went wrong and how far the
session got (pool found, transaction sent, receipt status).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from enums.error_kind import ErrorKind
from models.trade_result import TradeResult
from utils.errors import SniperError


@dataclass
class TradeOutcome:
    """Schema for reporting the end of a session."""

    ok: bool
    error_kind: Optional[ErrorKind] = None
    reason: Optional[str] = None
    pair_address: Optional[str] = None
    tx_hash: Optional[str] = None
    receipt_status: Optional[int] = None
    result: Optional[TradeResult] = None

    @classmethod
    def success(cls, result: TradeResult, pair_address: str) -> "TradeOutcome":
        return cls(
            ok=True,
            pair_address=pair_address,
            tx_hash=result.tx_hash,
            receipt_status=result.status,
            result=result,
        )

    @classmethod
    def failure(
        cls,
        error: SniperError,
        pair_address: Optional[str] = None,
        tx_hash: Optional[str] = None,
        receipt_status: Optional[int] = None,
    ) -> "TradeOutcome":
        return cls(
            ok=False,
            error_kind=error.kind,
            reason=error.message,
            pair_address=pair_address,
            tx_hash=tx_hash,
            receipt_status=receipt_status,
        )
