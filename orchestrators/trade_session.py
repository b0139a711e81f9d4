# orchestrators/trade_session.py
from __future__ import annotations
import threading
from typing import Optional

from eth_account import Account

from models.swap import FeeParams
from models.trade_config import TradeConfig
from models.trade_result import TradeResult
from schemas.trade_schema import TradeOutcome
from services.amount_service import AmountService, to_human
from services.confirmation_service import ConfirmationService
from services.pair_monitor_service import PairMonitorService
from services.swap_service import SwapService
from services.web3_service import Web3Service
from utils.errors import ConfigurationError, OnChainError, SniperError
from utils.logger import logger_manager, log_function
from utils.web3_utils import gwei_to_wei

logger = logger_manager.setup_logger(__name__)


class TradeSession:
    """
    Flujo completo de una sesión:
      pool -> liquidez -> nonce -> cantidad -> swap -> receipt -> saldo final.

    Se ejecuta una sola vez; el primer error la termina y se devuelve como
    ``TradeOutcome`` (nunca se mata el proceso ni se reintenta la sesión).
    ``run()`` es síncrono; ``start()``/``stop()`` lo lanzan en un hilo.
    """

    def __init__(
        self,
        config: TradeConfig,
        web3_service: Optional[Web3Service] = None,
        monitor: Optional[PairMonitorService] = None,
        amounts: Optional[AmountService] = None,
        swaps: Optional[SwapService] = None,
        confirmations: Optional[ConfirmationService] = None,
    ) -> None:
        self.config = config
        self.w3s = web3_service
        self.monitor = monitor
        self.amounts = amounts
        self.swaps = swaps
        self.confirmations = confirmations

        self.outcome: Optional[TradeOutcome] = None
        self._stop_evt = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ---------- hilo ----------
    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_evt.clear()
        self._thread = threading.Thread(target=self.run, name="TradeSession", daemon=True)
        self._thread.start()
        logger.info("TradeSession iniciada.")

    def stop(self) -> None:
        self._stop_evt.set()
        logger.info("TradeSession detenida (orden enviada).")

    def join(self, timeout: Optional[float] = None) -> Optional[TradeOutcome]:
        if self._thread:
            self._thread.join(timeout)
        return self.outcome

    # ---------- wiring ----------
    def _wire(self) -> None:
        cfg = self.config
        if self.w3s is None:
            self.w3s = Web3Service(rpc_urls=cfg.rpc_urls)
        logger.info(f"Conectado; chain_id={self.w3s.chain_id()}")
        if self.monitor is None:
            self.monitor = PairMonitorService(
                self.w3s,
                cfg.factory_address,
                poll_interval_secs=cfg.poll_interval_secs,
                max_pool_polls=cfg.max_pool_polls,
                max_liquidity_polls=cfg.max_liquidity_polls,
            )
        if self.amounts is None:
            self.amounts = AmountService(self.w3s, scaling=cfg.amount_scaling)
        if self.swaps is None:
            self.swaps = SwapService(self.w3s, cfg.router_address)
        if self.confirmations is None:
            self.confirmations = ConfirmationService(
                self.w3s,
                poll_interval_secs=cfg.receipt_poll_interval_secs,
                timeout_secs=cfg.confirmation_timeout_secs,
            )

    def _resolve_account(self):
        try:
            return Account.from_key(self.config.private_key.get_secret_value())
        except (ValueError, TypeError):
            raise ConfigurationError("clave privada inválida") from None

    def _check_allowance(self, holder: str, amount_in: int) -> None:
        cfg = self.config
        allowance = self.w3s.allowance(cfg.token_in, holder, cfg.router_address)
        if allowance < amount_in:
            raise OnChainError(
                f"allowance insuficiente: {allowance} < {amount_in}; "
                f"aprueba el router {cfg.router_address} antes de lanzar la sesión"
            )

    # ---------- flujo ----------
    @log_function
    def run(self) -> TradeOutcome:
        cfg = self.config
        pair: Optional[str] = None
        tx_hash: Optional[str] = None
        status: Optional[int] = None
        try:
            # 1) identidad del holder
            account = self._resolve_account()
            holder = account.address

            # 2) conexión + espera de pool y liquidez
            self._wire()
            pair, _ = self.monitor.watch(cfg.token_in, cfg.token_out, self._stop_evt)

            # 3) nonce justo después de detectar liquidez
            nonce = self.w3s.pending_nonce(holder)

            # 4) cantidad en unidades base
            amount_in = self.amounts.normalize(cfg.amount, cfg.token_in, cfg.native_input)

            # 5) gas + swap
            if not cfg.native_input and cfg.check_allowance:
                self._check_allowance(holder, amount_in)
            fee = FeeParams(
                gas_price_wei=gwei_to_wei(cfg.gas_price_gwei),
                gas_limit=cfg.gas_limit,
                nonce=nonce,
            )
            pending = self.swaps.execute(
                account,
                cfg.path,
                recipient=holder,
                amount_in=amount_in,
                deadline=cfg.deadline,
                native_input=cfg.native_input,
                fee=fee,
                amount_out_min=cfg.amount_out_min,
            )
            tx_hash = pending.tx_hash

            # 6) receipt
            receipt = self.confirmations.await_confirmation(pending, self._stop_evt)
            status = int(receipt["status"])
            logger.info(f"Status del receipt: {status}")
            if status != 1:
                raise OnChainError(f"swap revertido on-chain ({tx_hash})")

            # 7) saldo final del token de salida
            balance_raw = self.w3s.balance_of(cfg.token_out, holder)
            decimals = self.w3s.token_decimals(cfg.token_out)
            result = TradeResult(
                token_out=cfg.token_out,
                holder=holder,
                decimals=decimals,
                balance_raw=balance_raw,
                amount_out=to_human(balance_raw, decimals),
                tx_hash=tx_hash,
                status=status,
            )
            logger.info(f"Recibes: {result.amount_out}")
            self.outcome = TradeOutcome.success(result, pair_address=pair)
        except SniperError as e:
            logger.error(f"Sesión terminada ({e.kind.value}): {e.message}")
            self.outcome = TradeOutcome.failure(e, pair_address=pair, tx_hash=tx_hash, receipt_status=status)
        return self.outcome
