import json
from functools import lru_cache
from pathlib import Path

ABI_DIR = Path(__file__).resolve().parents[1] / "abis"

@lru_cache(maxsize=None)
def _load_abi(name: str) -> list:
    path = ABI_DIR / name
    if not path.is_file():
        raise FileNotFoundError(f"ABI no encontrado: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)

def load_erc20_abi() -> list:
    return _load_abi("erc20_abi.json")

def load_pancake_router_abi() -> list:
    return _load_abi("pancake_router_abi.json")

def load_pancake_factory_abi() -> list:
    return _load_abi("pancake_factory_abi.json")
