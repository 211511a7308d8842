"""Pure APY / risk / impermanent-loss helpers shared by the collectors (no I/O)."""
from __future__ import annotations

import math
from collections.abc import Sequence

from .errors import DataIntegrityError

RISK_SCORE_MIN = 1
RISK_SCORE_MAX = 10

SECONDS_PER_YEAR = 31_536_000
DAYS_PER_YEAR = 365
Q64 = 2**64


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def clamp_risk_score(score: int) -> int:
    return int(clamp(score, RISK_SCORE_MIN, RISK_SCORE_MAX))


def make_opportunity_id(protocol_tag: str, symbol_a: str, symbol_b: str) -> str:
    """Build a stable id from the protocol and the alphabetically sorted pair.

    Examples:
        ("raydium", "SOL", "USDC") → "raydium-sol-usdc"
        ("orca", "USDC", "SOL")    → "orca-sol-usdc"
    """
    first, second = sorted((symbol_a.lower(), symbol_b.lower()))
    return f"{protocol_tag}-{first}-{second}"


def range_volatility(price_min: float | None, price_max: float | None) -> float:
    """Relative width of a price range: (max - min) / midpoint.

    Returns 0 when either bound is missing or zero.
    """
    if not price_min or not price_max:
        return 0.0
    midpoint = (price_max + price_min) / 2
    if midpoint <= 0:
        return 0.0
    return (price_max - price_min) / midpoint


def log_returns(series: Sequence[float]) -> list[float]:
    """Natural-log returns between successive points of a series."""
    return [math.log(series[i] / series[i - 1]) for i in range(1, len(series))]


def sample_std(values: Sequence[float]) -> float:
    """Sample standard deviation (N-1 denominator); 0 for fewer than two values."""
    n = len(values)
    if n < 2:
        return 0.0
    mean = sum(values) / n
    variance = sum((v - mean) ** 2 for v in values) / (n - 1)
    return math.sqrt(variance)


def price_ratio_volatility(
    prices_a: Sequence[float], prices_b: Sequence[float]
) -> float:
    """Annualized volatility of the A/B price ratio, capped at 1.0.

    ratio_i = a_i / b_i, returns are log(ratio_i / ratio_{i-1}); the sample
    standard deviation of those returns is scaled by sqrt(365).

    Raises:
        DataIntegrityError: the two series differ in length, or contain
            non-positive prices.
    """
    if len(prices_a) != len(prices_b):
        raise DataIntegrityError(
            "Mismatch in historical price data lengths: "
            f"{len(prices_a)} != {len(prices_b)}"
        )
    if any(p <= 0 for p in prices_a) or any(p <= 0 for p in prices_b):
        raise DataIntegrityError("Historical price series contains non-positive prices")

    ratios = [a / b for a, b in zip(prices_a, prices_b)]
    volatility = sample_std(log_returns(ratios)) * math.sqrt(DAYS_PER_YEAR)
    return min(volatility, 1.0)


def annualize_emissions_x64(emissions_per_second_x64: int) -> float:
    """Convert a Q64.64 per-second emission rate to tokens per year."""
    return emissions_per_second_x64 / Q64 * SECONDS_PER_YEAR


def fee_apy_from_volume_share(
    fee_rate: float, tvl: float, daily_volume_share: float = 0.1
) -> float:
    """Fee APY assuming ``daily_volume_share`` of TVL trades every day.

    fee_apy = fee_rate * (share * tvl) * 365 / tvl
    """
    if tvl <= 0:
        return 0.0
    assumed_daily_volume = tvl * daily_volume_share
    return fee_rate * assumed_daily_volume * DAYS_PER_YEAR / tvl
