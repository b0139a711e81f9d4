# services/swap_service.py
from __future__ import annotations

from models.swap import FeeParams, PendingSwap
from utils.logger import logger_manager, log_function
from utils.web3_utils import checksum

logger = logger_manager.setup_logger(__name__)


class SwapService:
    """
    Construye, firma y envía el swap en el router V2.

    Ruta fija ``[token_in, token_out]`` (sin rutas intermedias) y
    ``amount_out_min`` 0 salvo que el llamante fije un suelo. En la variante
    token->token el holder debe haber aprobado antes el router por al menos
    ``amount_in``: aquí no se envía ningún ``approve``.
    """

    def __init__(self, web3_service, router_address: str) -> None:
        self.w3s = web3_service
        self.router_address = checksum(router_address)

    def _swap_call(self, path: list[str], recipient: str, amount_in: int, amount_out_min: int,
                   deadline: int, native_input: bool):
        router = self.w3s.load_router(self.router_address)
        if native_input:
            # el importe viaja como value, no como argumento
            return router.functions.swapExactETHForTokens(amount_out_min, path, recipient, deadline), amount_in
        return router.functions.swapExactTokensForTokens(amount_in, amount_out_min, path, recipient, deadline), 0

    @log_function
    def execute(
        self,
        account,
        path: list[str],
        recipient: str,
        amount_in: int,
        deadline: int,
        native_input: bool,
        fee: FeeParams,
        amount_out_min: int = 0,
    ) -> PendingSwap:
        path = [checksum(t) for t in path]
        recipient = checksum(recipient)
        fn, value = self._swap_call(path, recipient, int(amount_in), int(amount_out_min), int(deadline), native_input)

        tx = self.w3s.build_transaction(fn, {
            "from": account.address,
            "value": int(value),
            "gas": int(fee.gas_limit),
            "gasPrice": int(fee.gas_price_wei),
            "nonce": int(fee.nonce),
            "chainId": self.w3s.chain_id(),
        })

        tx_hash, raw = self.w3s.sign_and_send(tx, account)
        logger.info(
            f"Swap enviado {tx_hash} (nonce={fee.nonce}, value={value}, "
            f"amount_in={amount_in}, gasPrice={fee.gas_price_wei})"
        )
        return PendingSwap(
            tx_hash=tx_hash,
            to=self.router_address,
            value=int(value),
            gas=int(fee.gas_limit),
            gas_price=int(fee.gas_price_wei),
            nonce=int(fee.nonce),
            raw_transaction=raw,
            native_input=native_input,
            amount_in=int(amount_in),
            amount_out_min=int(amount_out_min),
        )
