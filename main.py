# main.py
from __future__ import annotations
import signal
import sys

from dotenv import load_dotenv

# ---- .env antes de importar módulos que leen el entorno ----
load_dotenv()

from enums.error_kind import ErrorKind
from models.trade_config import TradeConfig
from orchestrators.trade_session import TradeSession
from utils.config import load_config
from utils.errors import ConfigurationError
from utils.logger import logger_manager

logger = logger_manager.setup_logger(__name__)

EXIT_OK = 0
EXIT_TRADE_FAILED = 1
EXIT_BAD_CONFIG = 2


def build_session() -> TradeSession:
    """Lee YAML + entorno y valida todo antes de tocar la red."""
    settings = load_config()
    config = TradeConfig.from_operator_input(**settings)
    logger.info(
        f"Sesión: {config.token_in} -> {config.token_out} | cantidad={config.amount} "
        f"| nativo={config.native_input} | gas={config.gas_price_gwei} gwei | holder={config.holder}"
    )
    return TradeSession(config)


def main() -> int:
    try:
        session = build_session()
    except ConfigurationError as e:
        logger.error(f"Configuración inválida: {e.message}")
        return EXIT_BAD_CONFIG

    def shutdown(*_):
        logger.info("🛑 Señal de apagado recibida, cancelando sesión...")
        session.stop()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    logger.info("🚀 Iniciando sniper...")
    outcome = session.run()
    if outcome.ok:
        logger.info(f"✅ Swap confirmado {outcome.tx_hash}; saldo final {outcome.result.amount_out}")
        return EXIT_OK
    logger.error(f"❌ Sesión fallida [{outcome.error_kind.value}]: {outcome.reason}")
    if outcome.error_kind is ErrorKind.CONFIGURATION:
        return EXIT_BAD_CONFIG
    return EXIT_TRADE_FAILED


if __name__ == "__main__":
    sys.exit(main())
