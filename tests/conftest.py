"""Shared test fixtures and sample data."""
from __future__ import annotations

import struct
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from solders.pubkey import Pubkey

from yield_aggregator.chains.solana.whirlpool import (
    WHIRLPOOL_ACCOUNT_SIZE,
    WHIRLPOOLS_CONFIG,
)
from yield_aggregator.config import (
    AppConfig,
    ChainConfig,
    CollectorConfig,
    OrcaCollectorConfig,
    RaydiumCollectorConfig,
)
from yield_aggregator.errors import PriceUnavailable
from yield_aggregator.models import YieldOpportunity
from yield_aggregator.services.price_service import PriceService

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
ORCA_MINT = "orcaEKTdK7LKz57vaAYr9QeNsVEPfiu6QeMU1kektZE"

VAULT_A = str(Pubkey.from_bytes(bytes([7]) * 32))
VAULT_B = str(Pubkey.from_bytes(bytes([8]) * 32))


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakePriceProvider:
    """In-memory price feed that records every call."""

    def __init__(
        self,
        prices: dict[str, float] | None = None,
        history: dict[str, list[float]] | None = None,
    ) -> None:
        self.prices = dict(prices or {})
        self.history = dict(history or {})
        self.price_calls: list[tuple[str, str]] = []
        self.history_calls: list[tuple[str, int]] = []

    async def get_price(self, token_id: str, quote_currency: str = "usd") -> float:
        self.price_calls.append((token_id, quote_currency))
        if token_id not in self.prices:
            raise PriceUnavailable(token_id, "not in fake feed")
        return self.prices[token_id]

    async def get_historical_prices(self, token_id: str, days: int) -> list[float]:
        self.history_calls.append((token_id, days))
        if token_id not in self.history:
            raise PriceUnavailable(token_id, "no history in fake feed")
        return list(self.history[token_id])


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_whirlpool_account(
    mint_a: str = SOL_MINT,
    mint_b: str = USDC_MINT,
    vault_a: str = VAULT_A,
    vault_b: str = VAULT_B,
    fee_rate: int = 3000,
    tick_spacing: int = 64,
    liquidity: int = 10**12,
    sqrt_price: int = 2**64,
    rewards: tuple[tuple[str, int], ...] = (),
) -> bytes:
    """Serialize a Whirlpool account with the given fields (others zeroed)."""
    buf = bytearray(WHIRLPOOL_ACCOUNT_SIZE)
    buf[8:40] = bytes(Pubkey.from_string(WHIRLPOOLS_CONFIG))
    struct.pack_into("<H", buf, 41, tick_spacing)
    struct.pack_into("<H", buf, 45, fee_rate)
    buf[49:65] = liquidity.to_bytes(16, "little")
    buf[65:81] = sqrt_price.to_bytes(16, "little")
    buf[101:133] = bytes(Pubkey.from_string(mint_a))
    buf[133:165] = bytes(Pubkey.from_string(vault_a))
    buf[181:213] = bytes(Pubkey.from_string(mint_b))
    buf[213:245] = bytes(Pubkey.from_string(vault_b))
    for i, (mint, emissions_x64) in enumerate(rewards):
        base = 269 + i * 128
        buf[base:base + 32] = bytes(Pubkey.from_string(mint))
        buf[base + 96:base + 112] = emissions_x64.to_bytes(16, "little")
    return bytes(buf)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def raydium_config() -> RaydiumCollectorConfig:
    return RaydiumCollectorConfig(
        config_id="raydium-sol-usdc",
        pair="SOL/USDC",
        pool_id="58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2",
    )


@pytest.fixture()
def orca_config() -> OrcaCollectorConfig:
    return OrcaCollectorConfig(
        config_id="orca-sol-usdc",
        pair="SOL/USDC",
        mint_one=SOL_MINT,
        mint_two=USDC_MINT,
    )


@pytest.fixture()
def mixed_configs(
    raydium_config: RaydiumCollectorConfig, orca_config: OrcaCollectorConfig
) -> list[CollectorConfig]:
    return [
        raydium_config,
        RaydiumCollectorConfig(
            config_id="raydium-disabled", pair="RAY/USDC", enabled=False, pool_id="disabled"
        ),
        orca_config,
        OrcaCollectorConfig(
            config_id="orca-disabled",
            pair="ORCA/USDC",
            enabled=False,
            mint_one=ORCA_MINT,
            mint_two=USDC_MINT,
        ),
        CollectorConfig(config_id="marinade-msol", protocol="marinade", pair="mSOL"),
    ]


@pytest.fixture()
def sample_app_config(mixed_configs: list[CollectorConfig]) -> AppConfig:
    return AppConfig(
        collectors=tuple(mixed_configs),
        chains={"solana": ChainConfig(rpc_endpoints=("https://rpc.example.com",))},
    )


# ---------------------------------------------------------------------------
# Price fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_prices() -> dict[str, float]:
    return {SOL_MINT: 150.0, USDC_MINT: 1.0, ORCA_MINT: 0.5, "SOL": 150.0, "USDC": 1.0}


@pytest.fixture()
def fake_provider(sample_prices: dict[str, float]) -> FakePriceProvider:
    return FakePriceProvider(prices=sample_prices)


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def price_service(fake_provider: FakePriceProvider, fake_clock: FakeClock) -> PriceService:
    return PriceService(fake_provider, clock=fake_clock)


# ---------------------------------------------------------------------------
# Raw data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def whirlpool_account() -> Callable[..., bytes]:
    return build_whirlpool_account


@pytest.fixture()
def raw_raydium_pool() -> dict:
    return {
        "type": "Standard",
        "id": "58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2",
        "mintA": {"symbol": "WSOL", "decimals": 9, "address": SOL_MINT},
        "mintB": {"symbol": "USDC", "decimals": 6, "address": USDC_MINT},
        "tvl": 12_000_000,
        "day": {"apr": 30.0, "feeApr": 25.0, "priceMin": 140.0, "priceMax": 150.0},
        "week": {"apr": 20.0, "feeApr": 15.0, "priceMin": 130.0, "priceMax": 155.0},
        "month": {"apr": 15.0, "feeApr": 10.0, "priceMin": 120.0, "priceMax": 160.0},
        "rewardDefaultInfos": [
            {"mint": {"symbol": "RAY"}, "perSecond": "1000"},
        ],
    }


@pytest.fixture()
def sample_opportunity() -> YieldOpportunity:
    return YieldOpportunity(
        id="raydium-sol-usdc",
        protocol="Raydium",
        asset="SOL/USDC",
        pool_id="pool1",
        total_apy=0.15,
        fee_apy=0.10,
        reward_apy=0.05,
        tvl_usd=12_000_000.0,
        risk_score=3,
        impermanent_loss_risk=0.57,
        rewards=("RAY",),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    collectors:
      - config_id: raydium-sol-usdc
        protocol: raydium
        pair: SOL/USDC
        enabled: true
        pool_id: 58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2
      - config_id: orca-sol-usdc
        protocol: orca
        pair: SOL/USDC
        enabled: true
        mint_one: So11111111111111111111111111111111111111112
        mint_two: EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v
        tick_spacing: 8
      - config_id: marinade-msol
        protocol: marinade
        pair: mSOL
        enabled: false
    chains:
      solana:
        rpc_endpoints: ["https://rpc.example.com"]
        rpc_timeout: 10
    raydium:
      api_url: https://raydium.example.com
    price_feed:
      provider: coingecko
      cache_ttl_seconds: 60
      coingecko:
        base_url: https://coingecko.example.com/api/v3
        min_request_interval: 2.0
    tokens:
      - symbol: JUP
        address: JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKkSLzhJc2i
        decimals: 6
        price_id: jupiter-exchange-solana
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


@pytest.fixture()
def make_provider() -> type[FakePriceProvider]:
    return FakePriceProvider
