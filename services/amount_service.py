# services/amount_service.py
from __future__ import annotations
from decimal import Decimal, localcontext

from enums.amount_scaling import AmountScaling
from utils.errors import ConfigurationError
from utils.logger import logger_manager, log_function
from utils.web3_utils import UINT256_MAX, exact_context

logger = logger_manager.setup_logger(__name__)

NATIVE_DECIMALS = 18


def to_base_units(amount: Decimal, decimals: int, scaling: AmountScaling = AmountScaling.EXPONENT) -> int:
    """
    Convert a human amount into the integer sent on-chain.

    ``EXPONENT`` refuses amounts with more fractional digits than ``decimals``
    instead of truncating them. ``LEGACY_MULTIPLIER`` reproduces the old
    ``amount * decimals`` formula, truncation included.
    """
    amount = Decimal(amount)
    # contexto ancho: con 28 dígitos un saldo grande se redondea sin avisar
    with localcontext(exact_context(amount, decimals)):
        if scaling is AmountScaling.LEGACY_MULTIPLIER:
            base = int(amount * decimals)
        else:
            scaled = amount.scaleb(decimals)
            if scaled != scaled.to_integral_value():
                raise ConfigurationError(
                    f"{amount} tiene más de {decimals} decimales; no se trunca"
                )
            base = int(scaled)

    if base <= 0:
        raise ConfigurationError(f"{amount} se queda en {base} unidades base")
    if base > UINT256_MAX:
        raise ConfigurationError(f"{amount} no cabe en uint256")
    return base


def to_human(raw: int, decimals: int) -> Decimal:
    """Base units back to a decimal figure: ``raw / 10**decimals``."""
    raw = Decimal(int(raw))
    with localcontext(exact_context(raw, decimals)):
        return raw.scaleb(-int(decimals))


class AmountService:
    """Normaliza la cantidad configurada a unidades base del token de entrada."""

    def __init__(self, web3_service, scaling: AmountScaling = AmountScaling.EXPONENT) -> None:
        self.w3s = web3_service
        self.scaling = scaling

    @log_function
    def normalize(self, amount: Decimal, token_address: str, native_input: bool) -> int:
        if native_input:
            # el nativo siempre va con 18 decimales, sin leer contrato
            return to_base_units(amount, NATIVE_DECIMALS, AmountScaling.EXPONENT)

        # errores de lectura suben tal cual (sin reintento)
        decimals = self.w3s.token_decimals(token_address)
        if self.scaling is AmountScaling.LEGACY_MULTIPLIER:
            logger.warning(
                f"Escalado legacy: {amount} x {decimals} (no 10**{decimals}). "
                "Revisa AMOUNT_SCALING si no es intencionado."
            )
        return to_base_units(amount, decimals, self.scaling)
