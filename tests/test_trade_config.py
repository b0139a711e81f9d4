from decimal import Decimal

import pytest

from conftest import BUSD, HOLDER, TEST_PRIVATE_KEY, WBNB
from enums.amount_scaling import AmountScaling
from utils.errors import ConfigurationError


def test_operator_strings_are_parsed_and_checksummed(make_config):
    config = make_config()
    assert config.token_in == WBNB
    assert config.token_out == BUSD
    assert config.amount == Decimal("0.001")
    assert config.gas_price_gwei == Decimal("5")
    assert config.native_input is True
    assert config.holder == HOLDER
    assert config.path == [WBNB, BUSD]


def test_defaults_for_optional_settings(make_config):
    config = make_config()
    assert config.gas_limit == 3_000_000
    assert config.deadline == 99_999_999_999
    assert config.amount_out_min == 0
    assert config.amount_scaling is AmountScaling.EXPONENT
    assert config.poll_interval_secs == 0.0
    assert config.max_pool_polls is None
    assert config.confirmation_timeout_secs is None


def test_private_key_prefix_is_optional_and_never_printed(make_config):
    config = make_config(private_key=TEST_PRIVATE_KEY[2:])
    assert config.holder == HOLDER
    assert TEST_PRIVATE_KEY[2:] not in repr(config)
    assert TEST_PRIVATE_KEY[2:] not in str(config.model_dump())


def test_comma_separated_rpc_urls(make_config):
    config = make_config(rpc_urls="https://a.example/ , https://b.example")
    assert config.rpc_urls == ["https://a.example", "https://b.example"]


def test_config_is_immutable(make_config):
    config = make_config()
    with pytest.raises(Exception):
        config.amount = Decimal("1")


@pytest.mark.parametrize(
    "field, value",
    [
        ("token_out", "0x1234"),
        ("router_address", "not-an-address"),
        ("amount", "0"),
        ("amount", "-1"),
        ("amount", "abc"),
        ("gas_price_gwei", "-0.1"),
        ("private_key", "0x1234"),
        ("private_key", "zz" * 32),
        ("token_out", WBNB),
    ],
)
def test_malformed_operator_input_is_a_configuration_error(make_config, field, value):
    with pytest.raises(ConfigurationError) as exc:
        make_config(**{field: value})
    assert exc.value.kind.value == "configuration"
    assert TEST_PRIVATE_KEY[2:] not in str(exc.value)


def test_missing_required_field_is_a_configuration_error(raw_config):
    from models.trade_config import TradeConfig

    raw_config.pop("token_out")
    with pytest.raises(ConfigurationError, match="token_out"):
        TradeConfig.from_operator_input(**raw_config)
