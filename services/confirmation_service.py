from __future__ import annotations
import threading
import time
from typing import Any, Optional

from models.swap import PendingSwap
from utils.errors import PollTimeoutError, SessionCancelled
from utils.logger import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class ConfirmationService:
    """
    Espera el receipt de un swap enviado.

    Sin ``timeout_secs`` espera indefinidamente: una tx descartada por la red
    y una pendiente de minar son indistinguibles ("todavía sin receipt").
    """

    def __init__(self, web3_service, poll_interval_secs: float = 0.0,
                 timeout_secs: Optional[float] = None) -> None:
        self.w3s = web3_service
        self.poll_interval_secs = poll_interval_secs
        self.timeout_secs = timeout_secs

    @log_function
    def await_confirmation(self, pending: PendingSwap,
                           stop_event: Optional[threading.Event] = None) -> Any:
        if stop_event is None:
            stop_event = threading.Event()
        started = time.monotonic()
        while True:
            if stop_event.is_set():
                raise SessionCancelled(f"espera de {pending.tx_hash} cancelada")
            receipt = self.w3s.get_receipt(pending.tx_hash)
            if receipt is not None:
                logger.info(f"Receipt {pending.tx_hash}: status={receipt['status']} bloque={receipt.get('blockNumber')}")
                return receipt

            if self.timeout_secs is not None and time.monotonic() - started >= self.timeout_secs:
                raise PollTimeoutError(
                    f"sin receipt para {pending.tx_hash} tras {self.timeout_secs}s (nonce={pending.nonce})"
                )
            if stop_event.wait(self.poll_interval_secs):
                raise SessionCancelled(f"espera de {pending.tx_hash} cancelada")
