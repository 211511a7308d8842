"""Raydium collector: one batched call to the Raydium v3 pool info API."""
from __future__ import annotations

import logging
import ssl
from collections.abc import Iterable
from typing import Any

import aiohttp
import certifi

from ...config import CollectorConfig, RaydiumApiConfig, RaydiumCollectorConfig
from ...errors import DataIntegrityError, TransportError
from ...models import YieldOpportunity
from ..base import BaseCollector
from . import parser

logger = logging.getLogger(__name__)


class RaydiumCollector(BaseCollector[RaydiumCollectorConfig]):
    """Collect yield opportunities for configured Raydium pools."""

    protocol_tag = parser.PROTOCOL_TAG
    config_type = RaydiumCollectorConfig
    display_name = parser.PROTOCOL_NAME

    def __init__(
        self,
        configs: Iterable[CollectorConfig],
        api_config: RaydiumApiConfig | None = None,
    ) -> None:
        super().__init__(configs)
        api_config = api_config or RaydiumApiConfig()
        self.api_url = api_config.api_url.rstrip("/")
        self.timeout = api_config.timeout

    async def _fetch_pools(self, pool_ids: list[str]) -> dict[str, Any]:
        """GET pool info for all ids in a single request."""
        url = f"{self.api_url}/pools/info/ids"
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url,
                    params={"ids": ",".join(pool_ids)},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise TransportError(
                            f"Raydium API error: HTTP {response.status}"
                        )
                    return await response.json()
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Raydium API request failed: {e}") from e

    async def collect(self) -> list[YieldOpportunity]:
        """Fetch and normalize every configured pool.

        Returns an empty list when the batch request itself fails.
        """
        pool_ids = [c.pool_id for c in self._configs]
        logger.info("Collecting %d Raydium pools", len(pool_ids))

        try:
            raw = await self._fetch_pools(pool_ids)
        except TransportError as e:
            logger.error("Failed to fetch Raydium pool data: %s", e)
            return []

        return self._process_pool_data(raw)

    def _process_pool_data(self, raw: Any) -> list[YieldOpportunity]:
        if not isinstance(raw, dict) or not raw.get("success") or not isinstance(
            raw.get("data"), list
        ):
            logger.error("Invalid Raydium API response format")
            return []

        opportunities: list[YieldOpportunity] = []
        for pool in raw["data"]:
            # Unknown ids come back as null entries
            if not isinstance(pool, dict):
                continue
            try:
                opportunities.append(parser.parse_pool(pool))
            except DataIntegrityError as e:
                logger.warning("Skipping Raydium pool: %s", e)
            except Exception as e:
                logger.error("Error parsing Raydium pool %s: %s", pool.get("id"), e)

        logger.info("Raydium: %d opportunities", len(opportunities))
        return opportunities
