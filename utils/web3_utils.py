"""
Small helpers around addresses and units shared by the services.
"""

from __future__ import annotations

from decimal import Context, Decimal, getcontext, localcontext

from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
UINT256_MAX = 2 ** 256 - 1
GWEI = 10 ** 9


def is_zero_address(address: str | None) -> bool:
    if not address:
        return True
    return int(address, 16) == 0


def checksum(address: str) -> str:
    """Return the EIP-55 form of ``address``; raises ``ValueError`` if malformed."""
    if not isinstance(address, str) or not Web3.is_address(address.strip()):
        raise ValueError(f"dirección inválida: {address!r}")
    return Web3.to_checksum_address(address.strip())
def exact_context(value: Decimal, shift: int) -> Context:
    """
    Decimal context wide enough to scale ``value`` by ``10**shift`` (or
    multiply it by ``shift``) without rounding.

    The default context keeps 28 significant digits, fewer than a large
    token balance in base units.
    """
    ctx = getcontext().copy()
    digits = len(value.as_tuple().digits) + len(str(abs(int(shift))))
    ctx.prec = max(ctx.prec, digits + 2)
    return ctx


def gwei_to_wei(gas_price_gwei: Decimal) -> int:
    """Convert a gas price in gwei to wei, truncating sub-wei fractions."""
    gas_price_gwei = Decimal(gas_price_gwei)
    with localcontext(exact_context(gas_price_gwei, GWEI)):
        return int(gas_price_gwei * GWEI)
