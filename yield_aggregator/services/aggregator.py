"""Compose the protocol collectors from configuration and merge their output."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping

from ..config import AppConfig, CollectorConfig, ORCA, RAYDIUM
from ..errors import ConfigurationError
from ..interfaces.collector import YieldCollector
from ..models import TokenInfo, YieldOpportunity
from ..oracles import CoinGeckoProvider
from ..protocols import OrcaCollector, RaydiumCollector
from ..tokens import BUILTIN_TOKENS, build_registry
from .price_service import PriceService

logger = logging.getLogger(__name__)

CollectorFactory = Callable[
    [AppConfig, tuple[CollectorConfig, ...], PriceService, Mapping[str, TokenInfo]],
    YieldCollector,
]

# Registry of collector factories keyed by protocol tag.
_COLLECTOR_FACTORIES: dict[str, CollectorFactory] = {
    RAYDIUM: lambda cfg, entries, prices, registry: RaydiumCollector(
        entries, cfg.raydium
    ),
    ORCA: lambda cfg, entries, prices, registry: OrcaCollector(
        entries,
        price_service=prices,
        chain_config=cfg.chains.get("solana"),
        registry=registry,
    ),
}


def build_token_registry(config: AppConfig) -> Mapping[str, TokenInfo]:
    """Built-in tokens plus any declared in config (config entries win)."""
    return build_registry((*BUILTIN_TOKENS, *config.tokens))


def build_price_service(
    config: AppConfig, registry: Mapping[str, TokenInfo]
) -> PriceService:
    feed = config.price_feed
    if feed.provider != "coingecko":
        raise ConfigurationError(f"Unsupported price feed provider '{feed.provider}'")
    provider = CoinGeckoProvider(feed.coingecko, registry=registry)
    return PriceService(provider, cache_ttl=feed.cache_ttl_seconds)


class YieldAggregator:
    """Build one collector per protocol with enabled configs and run them together."""

    def __init__(
        self,
        config: AppConfig,
        price_service: PriceService | None = None,
        protocols: Iterable[str] | None = None,
    ) -> None:
        self._config = config
        self._registry = build_token_registry(config)
        self._price_service = price_service or build_price_service(
            config, self._registry
        )

        wanted = set(protocols) if protocols is not None else None
        self._collectors: list[YieldCollector] = []
        for tag, factory in _COLLECTOR_FACTORIES.items():
            if wanted is not None and tag not in wanted:
                continue
            entries = tuple(
                c for c in config.collectors if c.protocol == tag and c.enabled
            )
            if not entries:
                logger.debug("No enabled %s collectors configured", tag)
                continue
            self._collectors.append(
                factory(config, entries, self._price_service, self._registry)
            )

        unknown = {
            c.protocol for c in config.collectors if c.protocol not in _COLLECTOR_FACTORIES
        }
        for tag in sorted(unknown):
            logger.warning("No collector for protocol '%s'", tag)

    @property
    def collectors(self) -> list[YieldCollector]:
        return list(self._collectors)

    async def collect_all(self, min_tvl: float = 0.0) -> list[YieldOpportunity]:
        """Run every collector concurrently; merge sorted by total APY, highest first."""
        results = await asyncio.gather(
            *(c.collect() for c in self._collectors), return_exceptions=True
        )

        merged: list[YieldOpportunity] = []
        for collector, result in zip(self._collectors, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error("%s collector failed: %s", collector.protocol_name, result)
                continue
            merged.extend(result)

        merged = [o for o in merged if o.tvl_usd >= min_tvl]
        merged.sort(key=lambda o: o.total_apy, reverse=True)
        return merged
