"""
How a human token amount is turned into base units.

``EXPONENT`` multiplies by ``10 ** decimals``. ``LEGACY_MULTIPLIER``
reproduces the first version of the bot, which multiplied by the raw
``decimals`` value (18 instead of 10**18) and therefore sent amounts far
smaller than requested. It is kept only so old runs can be reproduced.
"""

from __future__ import annotations

from enum import Enum


class AmountScaling(str, Enum):
    EXPONENT = "exponent"
    LEGACY_MULTIPLIER = "legacy_multiplier"
