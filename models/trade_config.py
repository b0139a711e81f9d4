"""
Immutable description of one sniping session.

Built once from operator input (``.env``, YAML, a form) and never mutated.
Addresses are stored checksummed; the private key is kept as a
``SecretStr`` so it never shows up in reprs or logs.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from eth_account import Account
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from enums.amount_scaling import AmountScaling
from utils.errors import ConfigurationError
from utils.web3_utils import checksum

DEFAULT_GAS_LIMIT = 3_000_000
# Deadline "infinito" (segundos unix)
DEFAULT_DEADLINE = 99_999_999_999


class TradeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    rpc_urls: list[str] = Field(min_length=1)
    private_key: SecretStr
    token_in: str
    token_out: str
    router_address: str
    factory_address: str
    amount: Decimal = Field(gt=0)
    gas_price_gwei: Decimal = Field(ge=0)
    native_input: bool = False

    gas_limit: int = Field(default=DEFAULT_GAS_LIMIT, gt=0)
    deadline: int = Field(default=DEFAULT_DEADLINE, gt=0)
    amount_out_min: int = Field(default=0, ge=0)
    amount_scaling: AmountScaling = AmountScaling.EXPONENT
    check_allowance: bool = True

    poll_interval_secs: float = Field(default=0.0, ge=0)
    max_pool_polls: Optional[int] = Field(default=None, gt=0)
    max_liquidity_polls: Optional[int] = Field(default=None, gt=0)
    receipt_poll_interval_secs: float = Field(default=0.0, ge=0)
    confirmation_timeout_secs: Optional[float] = Field(default=None, gt=0)

    @field_validator("rpc_urls", mode="before")
    @classmethod
    def _split_rpc_urls(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, (list, tuple)):
            return [str(u).strip().rstrip("/") for u in v if str(u).strip()]
        return v

    @field_validator("private_key", mode="before")
    @classmethod
    def _check_private_key(cls, v: Any) -> Any:
        raw = v.get_secret_value() if isinstance(v, SecretStr) else str(v or "")
        raw = raw.strip()
        if raw.startswith(("0x", "0X")):
            raw = raw[2:]
        if len(raw) != 64:
            raise ValueError("la clave privada debe tener 32 bytes en hex")
        try:
            Account.from_key(raw)
        except Exception:
            # sin eco del valor: acabaría en los logs
            raise ValueError("clave privada inválida") from None
        return raw

    @field_validator("token_in", "token_out", "router_address", "factory_address")
    @classmethod
    def _check_address(cls, v: str) -> str:
        return checksum(v)

    @field_validator("token_out")
    @classmethod
    def _distinct_tokens(cls, v: str, info) -> str:
        if info.data.get("token_in") == v:
            raise ValueError("token_in y token_out deben ser distintos")
        return v

    @property
    def holder(self) -> str:
        """Checksummed address controlled by ``private_key``."""
        return Account.from_key(self.private_key.get_secret_value()).address

    @property
    def path(self) -> list[str]:
        return [self.token_in, self.token_out]

    @classmethod
    def from_operator_input(cls, **raw: Any) -> "TradeConfig":
        """Validate raw operator strings; any problem becomes a ``ConfigurationError``."""
        cleaned = {k: v for k, v in raw.items() if v is not None and v != ""}
        try:
            return cls(**cleaned)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"configuración inválida: {problems}") from None
