"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError
from .models import TokenInfo

logger = logging.getLogger(__name__)

RAYDIUM = "raydium"
ORCA = "orca"

DEFAULT_TICK_SPACING = 64

# ---------------------------------------------------------------------------
# Collector configs (tagged by ``protocol``)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollectorConfig:
    """Fields shared by every collector entry.

    Entries for protocols without a collector are kept in this base form and
    ignored by every collector.
    """

    config_id: str
    protocol: str
    pair: str = ""
    enabled: bool = True


@dataclass(frozen=True)
class RaydiumCollectorConfig(CollectorConfig):
    protocol: str = RAYDIUM
    pool_id: str = ""


@dataclass(frozen=True)
class OrcaCollectorConfig(CollectorConfig):
    protocol: str = ORCA
    mint_one: str = ""
    mint_two: str = ""
    tick_spacing: int = DEFAULT_TICK_SPACING


# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30


@dataclass(frozen=True)
class RaydiumApiConfig:
    api_url: str = "https://api-v3.raydium.io"
    timeout: int = 30


@dataclass(frozen=True)
class CoinGeckoConfig:
    base_url: str = "https://api.coingecko.com/api/v3"
    min_request_interval: float = 1.1
    timeout: int = 30


@dataclass(frozen=True)
class PriceFeedConfig:
    provider: str = "coingecko"
    coingecko: CoinGeckoConfig = field(default_factory=CoinGeckoConfig)
    cache_ttl_seconds: float = 300.0


@dataclass(frozen=True)
class AppConfig:
    collectors: tuple[CollectorConfig, ...] = ()
    chains: dict[str, ChainConfig] = field(default_factory=dict)
    raydium: RaydiumApiConfig = field(default_factory=RaydiumApiConfig)
    price_feed: PriceFeedConfig = field(default_factory=PriceFeedConfig)
    tokens: tuple[TokenInfo, ...] = ()


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _as_bool(value: Any) -> bool:
    # "${FLAG}" interpolation leaves strings behind
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def build_collector_config(raw: dict[str, Any]) -> CollectorConfig:
    """Build the collector config variant matching ``raw["protocol"]``."""
    protocol = str(raw.get("protocol", "")).strip().lower()
    common = {
        "config_id": str(raw.get("config_id", "")),
        "pair": str(raw.get("pair", "")),
        "enabled": _as_bool(raw.get("enabled", True)),
    }

    if protocol == RAYDIUM:
        return RaydiumCollectorConfig(pool_id=str(raw.get("pool_id", "")), **common)
    if protocol == ORCA:
        return OrcaCollectorConfig(
            mint_one=str(raw.get("mint_one", "")),
            mint_two=str(raw.get("mint_two", "")),
            tick_spacing=int(raw.get("tick_spacing", DEFAULT_TICK_SPACING)),
            **common,
        )
    return CollectorConfig(protocol=protocol, **common)


def _build_collectors(raw: list[dict[str, Any]]) -> tuple[CollectorConfig, ...]:
    return tuple(build_collector_config(entry) for entry in raw)


def _build_chains(raw: dict[str, Any]) -> dict[str, ChainConfig]:
    chains: dict[str, ChainConfig] = {}
    for name, cfg in raw.items():
        chains[name] = ChainConfig(
            # Unset ${VAR} endpoints interpolate to ""
            rpc_endpoints=tuple(e for e in cfg.get("rpc_endpoints", []) if e),
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
        )
    return chains


def _build_raydium(raw: dict[str, Any]) -> RaydiumApiConfig:
    return RaydiumApiConfig(
        api_url=raw.get("api_url", RaydiumApiConfig.api_url),
        timeout=int(raw.get("timeout", 30)),
    )


def _build_price_feed(raw: dict[str, Any]) -> PriceFeedConfig:
    cg_raw = raw.get("coingecko", {})
    return PriceFeedConfig(
        provider=raw.get("provider", "coingecko"),
        coingecko=CoinGeckoConfig(
            base_url=cg_raw.get("base_url", CoinGeckoConfig.base_url),
            min_request_interval=float(cg_raw.get("min_request_interval", 1.1)),
            timeout=int(cg_raw.get("timeout", 30)),
        ),
        cache_ttl_seconds=float(raw.get("cache_ttl_seconds", 300.0)),
    )


def _build_tokens(raw: list[dict[str, Any]]) -> tuple[TokenInfo, ...]:
    return tuple(
        TokenInfo(
            symbol=t.get("symbol", ""),
            address=t.get("address", ""),
            decimals=int(t.get("decimals", 0)),
            price_id=t.get("price_id") or None,
        )
        for t in raw
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        collectors=_build_collectors(raw.get("collectors", [])),
        chains=_build_chains(raw.get("chains", {})),
        raydium=_build_raydium(raw.get("raydium", {})),
        price_feed=_build_price_feed(raw.get("price_feed", {})),
        tokens=_build_tokens(raw.get("tokens", [])),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.collectors:
        raise ConfigurationError("At least one collector must be configured")

    seen: set[str] = set()
    for entry in cfg.collectors:
        if not entry.config_id:
            raise ConfigurationError(f"Collector entry for '{entry.protocol}' has no config_id")
        if entry.config_id in seen:
            raise ConfigurationError(f"Duplicate collector config_id '{entry.config_id}'")
        seen.add(entry.config_id)

        if isinstance(entry, RaydiumCollectorConfig) and not entry.pool_id:
            raise ConfigurationError(f"Raydium collector '{entry.config_id}' has no pool_id")

        if isinstance(entry, OrcaCollectorConfig):
            if not entry.mint_one or not entry.mint_two:
                raise ConfigurationError(
                    f"Orca collector '{entry.config_id}' needs mint_one and mint_two"
                )
            if entry.tick_spacing <= 0:
                raise ConfigurationError(
                    f"Orca collector '{entry.config_id}' has invalid tick_spacing"
                )
            if entry.enabled:
                solana = cfg.chains.get("solana")
                if solana is None or not solana.rpc_endpoints:
                    raise ConfigurationError(
                        f"Orca collector '{entry.config_id}' requires "
                        "chains.solana.rpc_endpoints"
                    )

    for token in cfg.tokens:
        if not token.symbol or not token.address:
            raise ConfigurationError("Token entries need both symbol and address")
