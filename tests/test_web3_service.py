from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from web3.exceptions import ContractLogicError, TransactionNotFound, Web3RPCError

from conftest import BUSD, FACTORY, HOLDER, PAIR, WBNB
from services.web3_service import Web3Service
from utils.errors import ConnectivityError, OnChainError
from utils.web3_utils import ZERO_ADDRESS, gwei_to_wei


@pytest.fixture
def w3():
    return MagicMock(name="w3")


@pytest.fixture
def contract(w3):
    c = MagicMock(name="contract")
    w3.eth.contract.return_value = c
    return c


def test_zero_address_pair_is_none(w3, contract):
    contract.functions.getPair.return_value.call.return_value = ZERO_ADDRESS
    assert Web3Service(w3=w3).get_pair(FACTORY, WBNB, BUSD) is None
    contract.functions.getPair.assert_called_once_with(WBNB, BUSD)


def test_existing_pair_is_checksummed(w3, contract):
    contract.functions.getPair.return_value.call.return_value = PAIR.lower()
    assert Web3Service(w3=w3).get_pair(FACTORY, WBNB, BUSD) == PAIR


def test_contracts_are_built_once_per_address(w3, contract):
    contract.functions.balanceOf.return_value.call.return_value = 5
    service = Web3Service(w3=w3)
    service.balance_of(WBNB, PAIR)
    service.balance_of(WBNB, PAIR)
    assert w3.eth.contract.call_count == 1


def test_revert_on_read_is_on_chain_error(w3, contract):
    contract.functions.decimals.return_value.call.side_effect = ContractLogicError("execution reverted")
    with pytest.raises(OnChainError):
        Web3Service(w3=w3).token_decimals(BUSD)


def test_transport_failure_is_connectivity_error_and_not_retried(w3, contract):
    call = contract.functions.balanceOf.return_value.call
    call.side_effect = ConnectionError("connection reset by peer")
    with pytest.raises(ConnectivityError):
        Web3Service(w3=w3).balance_of(WBNB, PAIR)
    assert call.call_count == 1


def test_rpc_error_on_read_is_connectivity_error(w3):
    w3.eth.get_transaction_count.side_effect = Web3RPCError("limit exceeded")
    with pytest.raises(ConnectivityError):
        Web3Service(w3=w3).pending_nonce(HOLDER)


def test_pending_nonce_counts_pending_transactions(w3):
    w3.eth.get_transaction_count.return_value = 12
    assert Web3Service(w3=w3).pending_nonce(HOLDER) == 12
    w3.eth.get_transaction_count.assert_called_once_with(HOLDER, "pending")


def test_missing_receipt_is_none(w3):
    w3.eth.get_transaction_receipt.side_effect = TransactionNotFound("not found")
    assert Web3Service(w3=w3).get_receipt("0x" + "ab" * 32) is None


def test_chain_id_is_read_once(w3):
    w3.eth.chain_id = 56
    service = Web3Service(w3=w3)
    assert service.chain_id() == 56
    w3.eth.chain_id = 1
    assert service.chain_id() == 56


def _legacy_tx():
    return {
        "to": PAIR,
        "value": 1,
        "gas": 21_000,
        "gasPrice": 5_000_000_000,
        "nonce": 0,
        "chainId": 56,
        "data": "0x",
    }


def test_sign_and_send_returns_hex_hash(w3, account):
    w3.eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)
    tx_hash, raw = Web3Service(w3=w3).sign_and_send(_legacy_tx(), account)
    assert tx_hash == "0x" + "ab" * 32
    assert raw.startswith("0x")
    w3.eth.send_raw_transaction.assert_called_once()


def test_node_rejection_on_submission_is_on_chain_error(w3, account):
    w3.eth.send_raw_transaction.side_effect = Web3RPCError("insufficient funds for gas * price + value")
    with pytest.raises(OnChainError):
        Web3Service(w3=w3).sign_and_send(_legacy_tx(), account)
    assert w3.eth.send_raw_transaction.call_count == 1


def test_no_rpc_urls_is_connectivity_error():
    with pytest.raises(ConnectivityError):
        Web3Service(rpc_urls=[])


def test_gas_price_conversion_keeps_every_digit():
    assert gwei_to_wei(Decimal("5")) == 5_000_000_000
    assert gwei_to_wei(Decimal("1.5")) == 1_500_000_000
    assert gwei_to_wei(Decimal("12345678901234567890123456789.5")) == 12_345_678_901_234_567_890_123_456_789_500_000_000
