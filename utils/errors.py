"""
Exception hierarchy for the sniper engine.

Every failure the engine knows about is raised as a ``SniperError`` carrying
an ``ErrorKind``. ``TradeSession.run`` converts them into a failed
``TradeOutcome`` so nothing below the CLI has to terminate the process.
"""

from __future__ import annotations

from enums.error_kind import ErrorKind


class SniperError(Exception):
    """Base class; ``kind`` tells the caller how to react."""

    kind: ErrorKind = ErrorKind.ON_CHAIN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(SniperError):
    """Operator input is malformed. Raised before any network interaction."""

    kind = ErrorKind.CONFIGURATION


class ConnectivityError(SniperError):
    """RPC dial failure, call timeout or undecodable response."""

    kind = ErrorKind.CONNECTIVITY


class OnChainError(SniperError):
    """The chain rejected or reverted what we asked for."""

    kind = ErrorKind.ON_CHAIN


class PollTimeoutError(SniperError):
    """A configured poll or confirmation bound was exhausted."""

    kind = ErrorKind.TIMEOUT


class SessionCancelled(SniperError):
    kind = ErrorKind.CANCELLED
