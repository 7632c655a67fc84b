"""
Job builder configuration.

Defaults come from the environment; an optional JSON file overrides them:

    {
      "network": "testnet",
      "extranonce1_size": 4,
      "extranonce2_size": 4,
      "payouts": [{"address": "tb1q...", "percent": 100}]
    }
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .address import NETWORK_HRPS
from .errors import ConfigError
from .template import PayoutAddress, parse_payouts

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "STRATUM_JOB_CONFIG_PATH"
DEFAULT_NETWORK = "bitcoin"
DEFAULT_EXTRANONCE1_SIZE = 4
DEFAULT_EXTRANONCE2_SIZE = 4
DEFAULT_COINBASE_VERSION = 2


@dataclass
class JobBuilderConfig:
    network: str = DEFAULT_NETWORK
    extranonce1_size: int = DEFAULT_EXTRANONCE1_SIZE
    extranonce2_size: int = DEFAULT_EXTRANONCE2_SIZE
    coinbase_version: int = DEFAULT_COINBASE_VERSION
    payouts: list[PayoutAddress] = field(default_factory=list)

    @property
    def hrp(self) -> str:
        try:
            return NETWORK_HRPS[self.network]
        except KeyError:
            raise ConfigError(
                f"unknown network {self.network!r} (expected one of {sorted(NETWORK_HRPS)})"
            ) from None

    @property
    def extranonce_size(self) -> int:
        return self.extranonce1_size + self.extranonce2_size

    def extranonce_placeholder(self) -> bytes:
        return b"\x00" * self.extranonce_size


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("Negative %s=%r; using %s", name, raw, default)
        return default
    return value


def _normalize_network(value: Any) -> str:
    network = str(value or "").strip().lower()
    if network not in NETWORK_HRPS:
        logger.warning("Unknown network %r; forcing %s", value, DEFAULT_NETWORK)
        return DEFAULT_NETWORK
    return network


def _apply_overrides(cfg: JobBuilderConfig, payload: dict[str, Any]) -> JobBuilderConfig:
    if payload.get("network"):
        cfg.network = _normalize_network(payload["network"])

    for key in ("extranonce1_size", "extranonce2_size", "coinbase_version"):
        if key not in payload:
            continue
        try:
            value = int(payload[key])
        except (TypeError, ValueError):
            logger.warning("Invalid %s override: %s", key, payload.get(key))
            continue
        if value < 0:
            logger.warning("Negative %s override ignored: %s", key, value)
            continue
        setattr(cfg, key, value)

    if "payouts" in payload:
        cfg.payouts = parse_payouts(payload["payouts"] or [])

    return cfg


def load_config(path: str | Path | None = None) -> JobBuilderConfig:
    """Environment defaults, then the JSON file at `path` or $STRATUM_JOB_CONFIG_PATH."""
    cfg = JobBuilderConfig(
        network=_normalize_network(os.getenv("STRATUM_NETWORK", DEFAULT_NETWORK)),
        extranonce1_size=_env_int("STRATUM_EXTRANONCE1_SIZE", DEFAULT_EXTRANONCE1_SIZE),
        extranonce2_size=_env_int("STRATUM_EXTRANONCE2_SIZE", DEFAULT_EXTRANONCE2_SIZE),
    )

    config_path = path or os.getenv(CONFIG_PATH_ENV)
    if not config_path:
        return cfg

    config_path = Path(config_path)
    if not config_path.exists():
        logger.warning("Job builder config %s not found; using environment defaults", config_path)
        return cfg

    with open(config_path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if not isinstance(payload, dict):
        logger.warning("Job builder config %s is not a JSON object; ignoring it", config_path)
        return cfg

    return _apply_overrides(cfg, payload)
