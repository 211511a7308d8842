"""Orca collector: reads Whirlpool accounts on-chain and prices them."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping

from ...chains.solana import SolanaClient
from ...chains.solana.whirlpool import (
    WHIRLPOOL_PROGRAM_ID,
    WHIRLPOOLS_CONFIG,
    WhirlpoolState,
    decode_whirlpool,
    derive_whirlpool_address,
    price_from_sqrt_price,
)
from ...config import ChainConfig, CollectorConfig, OrcaCollectorConfig
from ...errors import DataIntegrityError
from ...interfaces.chain import ChainClient
from ...models import TokenInfo, YieldOpportunity
from ...services.price_service import PriceService
from ...tokens import TOKENS, decimals_for, symbol_for
from ..base import BaseCollector
from . import parser

logger = logging.getLogger(__name__)

DEFAULT_RPC_ENDPOINT = "https://api.mainnet-beta.solana.com"
HISTORY_DAYS = 30


class OrcaCollector(BaseCollector[OrcaCollectorConfig]):
    """Collect yield opportunities for configured Orca Whirlpools."""

    protocol_tag = parser.PROTOCOL_TAG
    config_type = OrcaCollectorConfig
    display_name = parser.PROTOCOL_NAME

    def __init__(
        self,
        configs: Iterable[CollectorConfig],
        price_service: PriceService | None = None,
        chain_client: ChainClient | None = None,
        chain_config: ChainConfig | None = None,
        registry: Mapping[str, TokenInfo] = TOKENS,
        program_id: str = WHIRLPOOL_PROGRAM_ID,
        whirlpools_config: str = WHIRLPOOLS_CONFIG,
        history_days: int = HISTORY_DAYS,
    ) -> None:
        super().__init__(configs)
        self._price_service = price_service or PriceService()
        if chain_client is None:
            chain_client = SolanaClient(
                chain_config or ChainConfig(rpc_endpoints=(DEFAULT_RPC_ENDPOINT,))
            )
        self._client = chain_client
        self._registry = registry
        self._program_id = program_id
        self._whirlpools_config = whirlpools_config
        self._history_days = history_days

    async def collect(self) -> list[YieldOpportunity]:
        """Process every configured pool concurrently, keeping the successes."""
        logger.info("Collecting %d Orca whirlpools", len(self._configs))
        try:
            opportunities = await self._collect_successes(
                [c.config_id for c in self._configs],
                [self._collect_pool(c) for c in self._configs],
            )
        except Exception as e:
            logger.error("Failed to fetch Orca whirlpool data: %s", e)
            return []

        logger.info("Orca: %d opportunities", len(opportunities))
        return opportunities

    async def _collect_pool(self, config: OrcaCollectorConfig) -> YieldOpportunity:
        address = derive_whirlpool_address(
            config.mint_one,
            config.mint_two,
            config.tick_spacing,
            program_id=self._program_id,
            whirlpools_config=self._whirlpools_config,
        )
        logger.debug("Whirlpool %s → %s", config.config_id, address)

        data = await self._client.get_account_info(address)
        if data is None:
            raise DataIntegrityError(f"Whirlpool {address} not found")

        return await self._parse_whirlpool(decode_whirlpool(data), address)

    async def _parse_whirlpool(
        self, state: WhirlpoolState, address: str
    ) -> YieldOpportunity:
        mint_a, mint_b = state.token_mint_a, state.token_mint_b
        symbol_a = symbol_for(mint_a, self._registry)
        symbol_b = symbol_for(mint_b, self._registry)
        decimals_a = decimals_for(mint_a, self._registry)
        decimals_b = decimals_for(mint_b, self._registry)

        raw_a, raw_b = await asyncio.gather(
            self._client.get_token_account_balance(state.token_vault_a),
            self._client.get_token_account_balance(state.token_vault_b),
        )
        amount_a = parser.to_ui_amount(raw_a, decimals_a)
        amount_b = parser.to_ui_amount(raw_b, decimals_b)

        price_a, price_b = await asyncio.gather(
            self._price_service.get_price(mint_a),
            self._price_service.get_price(mint_b),
        )
        tvl = parser.calc_tvl(amount_a, price_a, amount_b, price_b)
        if tvl <= 0:
            raise DataIntegrityError(f"Whirlpool {address} has no priced liquidity")

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Whirlpool %s %s/%s spot %.6f, TVL $%.2f",
                address, symbol_a, symbol_b,
                price_from_sqrt_price(state.sqrt_price, decimals_a, decimals_b), tvl,
            )

        fee_apy = parser.calc_fee_apy(state.fee_rate_decimal, tvl)

        rewards = parser.active_rewards(state.reward_infos)
        reward_prices = await asyncio.gather(
            *(self._price_service.get_price(r.mint) for r in rewards)
        )
        reward_apy = parser.calc_reward_apy(
            [
                parser.annual_reward_value(r.emissions_per_second_x64, price)
                for r, price in zip(rewards, reward_prices)
            ],
            tvl,
        )

        history_a, history_b = await asyncio.gather(
            self._price_service.get_historical_prices(mint_a, self._history_days),
            self._price_service.get_historical_prices(mint_b, self._history_days),
        )
        il_risk = parser.impermanent_loss_risk(history_a, history_b)

        return parser.build_opportunity(
            pool_address=address,
            symbol_a=symbol_a,
            symbol_b=symbol_b,
            tvl=tvl,
            fee_apy=fee_apy,
            reward_apy=reward_apy,
            impermanent_loss_risk=il_risk,
            rewards=parser.reward_symbols(rewards, self._registry),
        )
