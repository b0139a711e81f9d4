"""
Classification attached to every error raised by the sniper engine.

Callers (the CLI, a UI) switch on these values instead of parsing messages.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    CONNECTIVITY = "connectivity"
    ON_CHAIN = "on_chain"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
