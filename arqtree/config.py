from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Dict

LOGGER_ROOT = "arqtree"

_SUPPORTED_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_FLAG_WORDS = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def _flag(raw: str | None, *, default: bool) -> bool:
    if raw is None:
        return default
    return _FLAG_WORDS.get(raw.strip().lower(), default)


def _optional_int(raw: str | None, *, variable: str) -> int | None:
    text = "" if raw is None else raw.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError as exc:
        raise ValueError(f"{variable} must be an integer, got '{raw}'.") from exc


def _parse_block_size(raw: str | None) -> int | None:
    block_size = _optional_int(raw, variable="ARQTREE_MO_BLOCK_SIZE")
    if block_size is not None and block_size < 1:
        raise ValueError(f"Mo block size must be positive, got {block_size}.")
    return block_size


def _normalise_log_level(value: str | None) -> str:
    if value is None:
        return "INFO"
    value = value.strip().upper()
    if value not in _SUPPORTED_LOG_LEVELS:
        raise ValueError(
            f"Unsupported log level '{value}'. Expected one of {sorted(_SUPPORTED_LOG_LEVELS)}."
        )
    return value


@dataclass(frozen=True)
class RuntimeConfig:
    log_level: str
    mo_block_size: int | None
    mo_alternate: bool
    seed: int | None

    def describe(self) -> Dict[str, Any]:
        return asdict(self)


def _configure_logging(level: str) -> None:
    logger = logging.getLogger(LOGGER_ROOT)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)


@lru_cache(maxsize=None)
def runtime_config() -> RuntimeConfig:
    log_level = _normalise_log_level(os.getenv("ARQTREE_LOG_LEVEL"))
    mo_block_size = _parse_block_size(os.getenv("ARQTREE_MO_BLOCK_SIZE"))
    mo_alternate = _flag(os.getenv("ARQTREE_MO_ALTERNATE"), default=True)
    seed = _optional_int(os.getenv("ARQTREE_SEED"), variable="ARQTREE_SEED")

    config = RuntimeConfig(
        log_level=log_level,
        mo_block_size=mo_block_size,
        mo_alternate=mo_alternate,
        seed=seed,
    )
    _configure_logging(config.log_level)
    return config


def reset_runtime_config_cache() -> None:
    runtime_config.cache_clear()
