"""Pure derivation functions for Orca Whirlpool pools (no I/O)."""
from __future__ import annotations

from collections.abc import Mapping, Sequence

from ... import metrics
from ...chains.solana.whirlpool import WhirlpoolRewardInfo
from ...models import TokenInfo, YieldOpportunity
from ...tokens import NULL_MINT, TOKENS, symbol_for

PROTOCOL_TAG = "orca"
PROTOCOL_NAME = "Orca"

# Share of TVL assumed to trade each day when estimating fee APY
ASSUMED_DAILY_VOLUME_SHARE = 0.1


def to_ui_amount(raw_amount: int, decimals: int) -> float:
    """Scale a raw integer token amount by its decimal precision."""
    return raw_amount / 10**decimals


def calc_tvl(amount_a: float, price_a: float, amount_b: float, price_b: float) -> float:
    return amount_a * price_a + amount_b * price_b


def calc_fee_apy(fee_rate: float, tvl: float) -> float:
    """fee_rate * (10% of TVL traded daily) * 365 / TVL."""
    return metrics.fee_apy_from_volume_share(fee_rate, tvl, ASSUMED_DAILY_VOLUME_SHARE)


def active_rewards(
    reward_infos: Sequence[WhirlpoolRewardInfo],
) -> list[WhirlpoolRewardInfo]:
    """Drop unused reward slots (mint set to the null address)."""
    return [r for r in reward_infos if r.mint and r.mint != NULL_MINT]


def annual_reward_value(emissions_per_second_x64: int, reward_price: float) -> float:
    """USD value of one reward stream over a year."""
    return metrics.annualize_emissions_x64(emissions_per_second_x64) * reward_price


def calc_reward_apy(annual_reward_values: Sequence[float], tvl: float) -> float:
    if tvl <= 0:
        return 0.0
    return sum(annual_reward_values) / tvl


def risk_score(tvl: float) -> int:
    """5 below 1M TVL, 2 above 50M, 3 otherwise."""
    if tvl < 1_000_000:
        score = 5
    elif tvl > 50_000_000:
        score = 2
    else:
        score = 3
    return metrics.clamp_risk_score(score)


def impermanent_loss_risk(
    prices_a: Sequence[float], prices_b: Sequence[float]
) -> float:
    """Annualized volatility of the price ratio, bounded to [0, 1].

    Raises:
        DataIntegrityError: the series lengths differ.
    """
    return metrics.clamp(metrics.price_ratio_volatility(prices_a, prices_b), 0.0, 1.0)


def reward_symbols(
    rewards: Sequence[WhirlpoolRewardInfo],
    registry: Mapping[str, TokenInfo] = TOKENS,
) -> tuple[str, ...]:
    return tuple(symbol_for(r.mint, registry) for r in rewards)


def build_opportunity(
    *,
    pool_address: str,
    symbol_a: str,
    symbol_b: str,
    tvl: float,
    fee_apy: float,
    reward_apy: float,
    impermanent_loss_risk: float,
    rewards: tuple[str, ...],
) -> YieldOpportunity:
    return YieldOpportunity(
        id=metrics.make_opportunity_id(PROTOCOL_TAG, symbol_a, symbol_b),
        protocol=PROTOCOL_NAME,
        asset=f"{symbol_a}/{symbol_b}",
        pool_id=pool_address,
        total_apy=fee_apy + reward_apy,
        fee_apy=fee_apy,
        reward_apy=reward_apy,
        tvl_usd=tvl,
        risk_score=risk_score(tvl),
        impermanent_loss_risk=impermanent_loss_risk,
        rewards=rewards,
    )
