"""
States of the pair monitor.

The monitor walks these states in order and never goes back: first it waits
for the factory to create the pool, then for the pool to receive a non-zero
balance of the input token.
"""

from __future__ import annotations

from enum import Enum


class MonitorState(str, Enum):
    """Possible states of a ``PairMonitorService`` run."""

    SEARCHING_POOL = "searching_pool"
    POOL_FOUND = "pool_found"
    WAITING_FOR_LIQUIDITY = "waiting_for_liquidity"
    LIQUIDITY_DETECTED = "liquidity_detected"
