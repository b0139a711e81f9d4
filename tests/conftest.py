"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest
from eth_account import Account
from web3 import Web3

# Cuenta #0 de Hardhat: clave pública y conocida, solo para tests
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
HOLDER = Web3.to_checksum_address("0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266")

WBNB = Web3.to_checksum_address("0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c")
BUSD = Web3.to_checksum_address("0xe9e7cea3dedca5984780bafc599bd69add087d56")
CAKE = Web3.to_checksum_address("0x0e09fabb73bd3ade0a17ecc321fd13a19e81ce82")
ROUTER = Web3.to_checksum_address("0x10ed43c718714eb63d5aa57b78b54704e256024e")
FACTORY = Web3.to_checksum_address("0xca143ce32fe78f1f7019d7d551a6402fc5350c73")
PAIR = Web3.to_checksum_address("0x58f876857a02d6762e0101bb5c46a8c1ed44dc16")

TX_HASH = "0x" + "ab" * 32


class FakeWeb3Service:
    """
    In-memory stand-in for ``Web3Service``.

    Sequences (pair lookups, balances, receipts) are consumed one value per
    call and the last value repeats forever. Exceptions in a sequence are
    raised instead of returned. Every call is appended to ``calls`` in order.
    """

    def __init__(
        self,
        pairs: Iterable[Any] = (None,),
        balances: Optional[Dict[Tuple[str, str], Iterable[Any]]] = None,
        decimals: Optional[Dict[str, Any]] = None,
        receipts: Iterable[Any] = ({"status": 1, "blockNumber": 1},),
        nonce: int = 7,
        allowance: int = 0,
        chain_id: int = 56,
    ) -> None:
        self._pairs = list(pairs)
        self._balances = {k: list(v) for k, v in (balances or {}).items()}
        self._decimals = dict(decimals or {})
        self._receipts = list(receipts)
        self._nonce = nonce
        self._allowance = allowance
        self._chain_id = chain_id

        self.calls: List[Tuple[str, tuple]] = []
        self.router = MagicMock(name="router")
        self.built: List[dict] = []
        self.sent: List[dict] = []
        self.send_error: Optional[Exception] = None

    @staticmethod
    def _next(seq: List[Any]) -> Any:
        value = seq.pop(0) if len(seq) > 1 else seq[0]
        if isinstance(value, Exception):
            raise value
        return value

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    # ---- lecturas ----
    def chain_id(self) -> int:
        self.calls.append(("chain_id", ()))
        return self._chain_id

    def get_pair(self, factory_address: str, token_a: str, token_b: str):
        self.calls.append(("get_pair", (factory_address, token_a, token_b)))
        return self._next(self._pairs)

    def balance_of(self, token_address: str, owner: str) -> int:
        self.calls.append(("balance_of", (token_address, owner)))
        return self._next(self._balances[(token_address, owner)])

    def token_decimals(self, token_address: str) -> int:
        self.calls.append(("token_decimals", (token_address,)))
        value = self._decimals[token_address]
        if isinstance(value, Exception):
            raise value
        return value

    def allowance(self, token_address: str, owner: str, spender: str) -> int:
        self.calls.append(("allowance", (token_address, owner, spender)))
        return self._allowance

    def pending_nonce(self, address: str) -> int:
        self.calls.append(("pending_nonce", (address,)))
        return self._nonce

    def get_receipt(self, tx_hash: str):
        self.calls.append(("get_receipt", (tx_hash,)))
        return self._next(self._receipts)

    # ---- envío ----
    def load_router(self, address: str):
        self.calls.append(("load_router", (address,)))
        return self.router

    def build_transaction(self, contract_fn, params: dict) -> dict:
        self.calls.append(("build_transaction", (params,)))
        tx = dict(params, to=ROUTER, data="0x")
        self.built.append(tx)
        return tx

    def sign_and_send(self, tx: dict, account) -> Tuple[str, str]:
        self.calls.append(("sign_and_send", (tx,)))
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(tx)
        return TX_HASH, "0xf86c"


@pytest.fixture
def account():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def raw_config() -> Dict[str, Any]:
    """Operator input as it arrives from ``.env``: all strings."""
    return {
        "rpc_urls": "http://127.0.0.1:8545",
        "private_key": TEST_PRIVATE_KEY,
        "token_in": WBNB.lower(),
        "token_out": BUSD.lower(),
        "router_address": ROUTER,
        "factory_address": FACTORY,
        "amount": "0.001",
        "gas_price_gwei": "5",
        "native_input": "true",
    }


@pytest.fixture
def make_config(raw_config):
    from models.trade_config import TradeConfig

    def _make(**overrides):
        data = dict(raw_config)
        data.update(overrides)
        return TradeConfig.from_operator_input(**data)

    return _make
