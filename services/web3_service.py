from __future__ import annotations
import os
from typing import Any, Callable, List, Optional

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware
from web3.types import TxReceipt
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    TransactionNotFound,
    Web3Exception,
    Web3RPCError,
)

from utils.errors import ConnectivityError, OnChainError
from utils.load_abi import load_erc20_abi, load_pancake_factory_abi, load_pancake_router_abi
from utils.logger import logger_manager, log_function
from utils.web3_utils import checksum, is_zero_address

logger = logger_manager.setup_logger(__name__)

# ---------- ENV ----------
REQUEST_TIMEOUT_SECS = float(os.getenv("RPC_TIMEOUT_SECS", "30"))
# 1 = sin reintentos: un fallo de lectura aborta la sesión
RETRY_RPC_TIMES      = int(os.getenv("RPC_RETRIES", "1"))


class Web3Service:
    """
    Acceso de lectura/escritura a la cadena.

    Todas las llamadas pasan por ``_rpc_call``, que traduce las excepciones de
    web3/transporte a ``ConnectivityError`` u ``OnChainError``.
    """

    def __init__(self, rpc_urls: Optional[List[str]] = None, w3: Optional[Web3] = None,
                 timeout_secs: float = REQUEST_TIMEOUT_SECS) -> None:
        self._rpc_urls: List[str] = list(rpc_urls or [])
        self._timeout_secs = timeout_secs
        self._current_rpc_idx = -1

        if w3 is not None:
            self._w3 = w3
        else:
            if not self._rpc_urls:
                raise ConnectivityError("Sin RPCs configurados.")
            self._connect_first_ok()

        self._erc20_abi = load_erc20_abi()
        self._router_abi = load_pancake_router_abi()
        self._factory_abi = load_pancake_factory_abi()
        self._contracts: dict[tuple[str, str], Any] = {}
        self._chain_id: Optional[int] = None

    # ---------- conexión / failover ----------
    def _connect(self, url: str) -> Web3:
        w3 = Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": self._timeout_secs}))
        # BSC estilo PoA (aunque no lo necesite en mainnet, no molesta)
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        if not w3.is_connected():
            raise ConnectivityError(f"No conectado al nodo: {url}")
        return w3

    def _connect_first_ok(self) -> None:
        last_err: Optional[Exception] = None
        for idx, url in enumerate(self._rpc_urls):
            try:
                self._w3 = self._connect(url)
            except (ConnectivityError, OSError, Web3Exception) as e:
                last_err = e
                logger.warning(f"RPC fallida {url}: {e}")
                continue
            self._current_rpc_idx = idx
            logger.info(f"Conexión establecida con {url}")
            return
        raise ConnectivityError(f"No disponible ningún RPC: {last_err}")

    def _rotate_and_reconnect(self) -> None:
        if len(self._rpc_urls) < 2:
            return
        self._current_rpc_idx = (self._current_rpc_idx + 1) % len(self._rpc_urls)
        url = self._rpc_urls[self._current_rpc_idx]
        logger.info(f"Cambiando a RPC: {url}")
        self._w3 = self._connect(url)

    def _rpc_call(self, label: str, fn: Callable[[], Any], submission: bool = False,
                  retries: int = RETRY_RPC_TIMES) -> Any:
        """
        Ejecuta una llamada RPC y clasifica el error.

        Reverts y salidas no decodificables -> OnChainError. En envíos
        (``submission=True``) cualquier rechazo del nodo también es OnChainError
        y nunca se reintenta. El resto (transporte, timeouts) -> ConnectivityError.
        """
        attempts = 1 if submission else max(1, retries)
        last_exc: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                return fn()
            except (ContractLogicError, BadFunctionCallOutput) as e:
                raise OnChainError(f"[{label}] {e}") from e
            except Web3RPCError as e:
                if submission:
                    raise OnChainError(f"[{label}] rechazada por el nodo: {e}") from e
                last_exc = e
            except (Web3Exception, ValueError) as e:
                if submission:
                    raise OnChainError(f"[{label}] {e}") from e
                last_exc = e
            except OSError as e:
                last_exc = e
            if attempt < attempts:
                logger.warning(f"[RPC:{label}] intento {attempt}/{attempts} falló: {last_exc}")
                self._rotate_and_reconnect()
        raise ConnectivityError(f"[{label}] {last_exc}") from last_exc

    # ---------- util ----------
    def _contract(self, kind: str, address: str, abi: list):
        key = (kind, address)
        if key not in self._contracts:
            self._contracts[key] = self._w3.eth.contract(address=checksum(address), abi=abi)
        return self._contracts[key]

    def load_erc20(self, address: str):
        return self._contract("erc20", address, self._erc20_abi)

    def load_router(self, address: str):
        return self._contract("router", address, self._router_abi)

    def load_factory(self, address: str):
        return self._contract("factory", address, self._factory_abi)

    @log_function
    def chain_id(self) -> int:
        # se cachea: no cambia durante la sesión y evita una llamada al enviar
        if self._chain_id is None:
            self._chain_id = int(self._rpc_call("chain_id", lambda: self._w3.eth.chain_id))
        return self._chain_id

    # ---------- lecturas ----------
    def get_pair(self, factory_address: str, token_a: str, token_b: str) -> Optional[str]:
        """Dirección del par en la factory, o ``None`` si aún no existe."""
        factory = self.load_factory(factory_address)
        pair = self._rpc_call(
            "factory.getPair",
            lambda: factory.functions.getPair(checksum(token_a), checksum(token_b)).call()
        )
        if is_zero_address(pair):
            return None
        return checksum(pair)

    @log_function
    def token_decimals(self, token_address: str) -> int:
        erc20 = self.load_erc20(token_address)
        return int(self._rpc_call("decimals", lambda: erc20.functions.decimals().call()))

    def balance_of(self, token_address: str, owner: str) -> int:
        erc20 = self.load_erc20(token_address)
        return int(self._rpc_call("balanceOf", lambda: erc20.functions.balanceOf(checksum(owner)).call()))

    @log_function
    def allowance(self, token_address: str, owner: str, spender: str) -> int:
        erc20 = self.load_erc20(token_address)
        return int(self._rpc_call(
            "allowance",
            lambda: erc20.functions.allowance(checksum(owner), checksum(spender)).call()
        ))

    @log_function
    def pending_nonce(self, address: str) -> int:
        return int(self._rpc_call(
            "get_transaction_count",
            lambda: self._w3.eth.get_transaction_count(checksum(address), "pending")
        ))

    def get_receipt(self, tx_hash: str) -> Optional[TxReceipt]:
        """Receipt de ``tx_hash`` o ``None`` si todavía no está minada."""
        def _fetch():
            try:
                return self._w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                return None
        return self._rpc_call("get_receipt", _fetch)

    # ---------- envío ----------
    @log_function
    def build_transaction(self, contract_fn, params: dict) -> dict:
        """
        ``params`` debe traer gas, gasPrice, nonce, chainId y from para que
        web3 no consulte nada al nodo (sin estimate_gas ni gas_price).
        """
        return self._rpc_call("build_transaction", lambda: contract_fn.build_transaction(params), submission=True)

    @log_function
    def sign_and_send(self, tx: dict, account) -> tuple[str, str]:
        """Firma en local y difunde. Devuelve ``(tx_hash, raw_tx)`` en hex."""
        try:
            signed = account.sign_transaction(tx)
        except (TypeError, ValueError) as e:
            raise OnChainError(f"[sign] transacción no firmable: {e}") from e
        raw = signed.raw_transaction
        tx_hash = self._rpc_call("send_raw_tx", lambda: self._w3.eth.send_raw_transaction(raw), submission=True)
        return Web3.to_hex(tx_hash), Web3.to_hex(raw)
