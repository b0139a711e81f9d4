from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
import os, functools, time
from pathlib import Path

from pydantic import SecretStr

from utils.errors import SniperError

_DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "1048576"))
_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))

class _LoggerManager:
    def __init__(self) -> None:
        self._configured = False
        self._module_handlers: dict[str, logging.Handler] = {}
        # LOG_DIR vacío => solo consola
        self._log_dir = os.getenv("LOG_DIR", "./logs")

    def _ensure(self) -> None:
        if self._configured:
            return

        level = getattr(logging, _DEFAULT_LEVEL, logging.INFO)
        fmt = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        root = logging.getLogger()
        root.setLevel(level)
        if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
            sh = logging.StreamHandler()
            sh.setLevel(level); sh.setFormatter(fmt)
            root.addHandler(sh)

        if self._log_dir:
            Path(self._log_dir).mkdir(parents=True, exist_ok=True)
        self._configured = True

    def setup_logger(self, name: str) -> logging.Logger:
        self._ensure()
        logger = logging.getLogger(name)

        if self._log_dir and name not in self._module_handlers:
            safe_name = name.replace(".", "_").replace("/", "_")
            file_path = os.path.join(self._log_dir, f"{safe_name}.log")
            try:
                fh = RotatingFileHandler(file_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8")
            except OSError as e:
                logger.warning(f"No se pudo abrir el log {file_path}: {e}")
            else:
                fh.setLevel(getattr(logging, _DEFAULT_LEVEL, logging.INFO))
                fh.setFormatter(logging.Formatter(
                    fmt="%(asctime)s | %(levelname)s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S"
                ))
                self._module_handlers[name] = fh
                logger.addHandler(fh)
                logger.propagate = True  # conserva salida a consola

        return logger

logger_manager = _LoggerManager()


def _redact(value):
    """Keep signing material out of the traces written by ``log_function``."""
    if isinstance(value, SecretStr):
        return "**********"
    # LocalAccount de eth_account: solo mostramos la dirección
    if hasattr(value, "key") and hasattr(value, "address"):
        return f"<account {value.address}>"
    return value


def log_function(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logger_manager.setup_logger(func.__module__)
        if logger.isEnabledFor(logging.DEBUG):
            safe_args = tuple(_redact(a) for a in args)
            safe_kwargs = {k: _redact(v) for k, v in kwargs.items()}
            logger.debug(f"→ {func.__name__} args={safe_args} kwargs={safe_kwargs}")
        t0 = time.time()
        try:
            result = func(*args, **kwargs)
            logger.debug(f"← {func.__name__} ({(time.time()-t0)*1000:.1f} ms)")
            return result
        except SniperError as e:
            # fallo esperado: la traza completa no aporta
            logger.warning(f"✗ {func.__name__} [{e.kind.value}]: {e}")
            raise
        except Exception as e:
            logger.exception(f"✗ {func.__name__}: {e}")
            raise
    return wrapper
