"""
Configuration loading for the sniper.

Settings come from an optional YAML file (``config.yaml`` next to ``main.py``
or the path in ``SNIPER_CONFIG``) overlaid with environment variables, so a
``.env`` loaded by ``main.py`` always wins over the file. The result is a flat
dictionary keyed by ``TradeConfig`` field names, ready for
``TradeConfig.from_operator_input``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml  # type: ignore

from utils.errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# PancakeSwap V2 en BSC mainnet
DEFAULT_ROUTER_ADDRESS = "0x10ED43C718714eb63d5aA57B78B54704E256024E"
DEFAULT_FACTORY_ADDRESS = "0xcA143Ce32Fe78f1f7019d7d551a6402fC5350c73"
DEFAULT_WBNB_ADDRESS = "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c"
DEFAULT_RPC_URL = "https://bsc-dataseed.binance.org"

# variable de entorno -> campo de TradeConfig
ENV_KEYS = {
    "RPC_URLS": "rpc_urls",
    "PRIVATE_KEY": "private_key",
    "TOKEN_IN": "token_in",
    "TOKEN_OUT": "token_out",
    "ROUTER_ADDRESS": "router_address",
    "FACTORY_ADDRESS": "factory_address",
    "AMOUNT_IN": "amount",
    "GAS_PRICE_GWEI": "gas_price_gwei",
    "NATIVE_INPUT": "native_input",
    "GAS_LIMIT": "gas_limit",
    "DEADLINE": "deadline",
    "AMOUNT_OUT_MIN": "amount_out_min",
    "AMOUNT_SCALING": "amount_scaling",
    "CHECK_ALLOWANCE": "check_allowance",
    "POLL_INTERVAL_SECS": "poll_interval_secs",
    "MAX_POOL_POLLS": "max_pool_polls",
    "MAX_LIQUIDITY_POLLS": "max_liquidity_polls",
    "RECEIPT_POLL_INTERVAL_SECS": "receipt_poll_interval_secs",
    "CONFIRMATION_TIMEOUT_SECS": "confirmation_timeout_secs",
}


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"YAML inválido en {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} debe contener un mapa clave: valor")
    return data


def load_config(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Load the session settings from YAML plus environment.

    :param path: YAML file; defaults to ``SNIPER_CONFIG`` or ``config.yaml``
        in the project root. A missing file quietly yields no values.
    :param environ: mapping used instead of ``os.environ`` (tests).
    :returns: dictionary keyed by ``TradeConfig`` field names.
    """
    env = os.environ if environ is None else environ
    yaml_path = Path(path or env.get("SNIPER_CONFIG") or PROJECT_ROOT / "config.yaml")

    settings: Dict[str, Any] = {
        "rpc_urls": DEFAULT_RPC_URL,
        "router_address": DEFAULT_ROUTER_ADDRESS,
        "factory_address": DEFAULT_FACTORY_ADDRESS,
    }
    # YAML admite tanto nombres de campo (token_in) como de entorno (TOKEN_IN)
    for key, value in _read_yaml(yaml_path).items():
        settings[ENV_KEYS.get(str(key).upper(), str(key).lower())] = value
    for env_key, field in ENV_KEYS.items():
        value = env.get(env_key)
        if value not in (None, ""):
            settings[field] = value

    yaml_wbnb = settings.pop("wbnb_address", None)
    wbnb = env.get("WBNB_ADDRESS") or yaml_wbnb or DEFAULT_WBNB_ADDRESS
    if settings.get("native_input") in (None, "") and settings.get("token_in"):
        # si el token de entrada es WBNB se paga en BNB nativo
        settings["native_input"] = str(settings["token_in"]).lower() == str(wbnb).lower()
    return settings
