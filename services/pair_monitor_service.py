from __future__ import annotations
import threading
from typing import Optional

from enums.monitor_state import MonitorState
from utils.errors import PollTimeoutError, SessionCancelled
from utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class PairMonitorService:
    """
    Vigila la factory hasta que exista el par y el par tenga saldo del token de
    entrada.

    Por defecto reintenta inmediatamente (``poll_interval_secs=0``): la prioridad
    es detectar la liquidez lo antes posible. ``stop_event`` permite cancelar y
    ``max_pool_polls`` / ``max_liquidity_polls`` acotar la espera.
    """

    def __init__(
        self,
        web3_service,
        factory_address: str,
        poll_interval_secs: float = 0.0,
        max_pool_polls: Optional[int] = None,
        max_liquidity_polls: Optional[int] = None,
    ) -> None:
        self.w3s = web3_service
        self.factory_address = factory_address
        self.poll_interval_secs = poll_interval_secs
        self.max_pool_polls = max_pool_polls
        self.max_liquidity_polls = max_liquidity_polls
        self.state = MonitorState.SEARCHING_POOL
        self.pair_address: Optional[str] = None

    # ---------- lecturas ----------
    def locate_pair(self, token_in: str, token_out: str) -> Optional[str]:
        """``None`` mientras la factory devuelva la dirección cero."""
        return self.w3s.get_pair(self.factory_address, token_in, token_out)

    def current_input_balance(self, token_in: str, pair_address: str) -> int:
        # nunca se cachea: es la señal de liquidez
        return self.w3s.balance_of(token_in, pair_address)

    # ---------- bucles ----------
    def _tick(self, stop_event: threading.Event) -> None:
        # wait(0) vuelve al instante: sin retardo salvo que se configure
        if stop_event.wait(self.poll_interval_secs):
            raise SessionCancelled(f"monitor cancelado en estado {self.state.value}")

    def wait_for_pool(self, token_in: str, token_out: str,
                      stop_event: Optional[threading.Event] = None) -> str:
        if stop_event is None:
            stop_event = threading.Event()
        self.state = MonitorState.SEARCHING_POOL
        polls = 0
        while True:
            if stop_event.is_set():
                raise SessionCancelled("monitor cancelado antes de encontrar el pool")
            pair = self.locate_pair(token_in, token_out)
            polls += 1
            if pair is not None:
                self.pair_address = pair
                self.state = MonitorState.POOL_FOUND
                logger.info(f"Dirección del pool: {pair}")
                return pair

            logger.info("pool no creado todavía")
            if self.max_pool_polls is not None and polls >= self.max_pool_polls:
                raise PollTimeoutError(f"pool no creado tras {polls} consultas")
            self._tick(stop_event)

    def wait_for_liquidity(self, token_in: str, pair_address: str,
                           stop_event: Optional[threading.Event] = None) -> int:
        if stop_event is None:
            stop_event = threading.Event()
        self.state = MonitorState.WAITING_FOR_LIQUIDITY
        polls = 0
        while True:
            if stop_event.is_set():
                raise SessionCancelled("monitor cancelado esperando liquidez")
            balance = self.current_input_balance(token_in, pair_address)
            polls += 1
            if balance > 0:
                self.state = MonitorState.LIQUIDITY_DETECTED
                logger.info(f"Liquidez detectada en {pair_address}: {balance}")
                return balance

            logger.info("el pool sigue vacío")
            if self.max_liquidity_polls is not None and polls >= self.max_liquidity_polls:
                raise PollTimeoutError(f"pool sin liquidez tras {polls} consultas")
            self._tick(stop_event)

    @log_function
    def watch(self, token_in: str, token_out: str,
              stop_event: Optional[threading.Event] = None) -> tuple[str, int]:
        """SEARCHING_POOL -> POOL_FOUND -> WAITING_FOR_LIQUIDITY -> LIQUIDITY_DETECTED."""
        pair = self.wait_for_pool(token_in, token_out, stop_event)
        balance = self.wait_for_liquidity(token_in, pair, stop_event)
        return pair, balance
