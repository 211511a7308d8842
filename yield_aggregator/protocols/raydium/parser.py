"""Pure parsing functions for Raydium v3 API pool records (no I/O)."""
from __future__ import annotations

from typing import Any

from ... import metrics
from ...errors import DataIntegrityError
from ...models import YieldOpportunity

PROTOCOL_TAG = "raydium"
PROTOCOL_NAME = "Raydium"

# Earlier windows win
APY_WINDOWS = ("month", "week", "day")

IL_RISK_FLOOR = 0.1
IL_RISK_CAP = 0.9


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _window(pool: dict[str, Any], name: str) -> dict[str, Any]:
    # Anything other than an object counts as an absent window
    period = pool.get(name)
    return period if isinstance(period, dict) else {}


def _first_window_value(pool: dict[str, Any], key: str) -> float:
    for window in APY_WINDOWS:
        period = _window(pool, window)
        if _is_number(period.get(key)):
            return float(period[key])
    return 0.0


def extract_apy(pool: dict[str, Any]) -> tuple[float, float]:
    """Return (total_apy, fee_apy) as fractions.

    Each value comes from the first of month, week, day whose ``apr`` /
    ``feeApr`` is numeric; the API reports percentages.
    """
    total_apy = _first_window_value(pool, "apr") / 100
    fee_apy = _first_window_value(pool, "feeApr") / 100
    return total_apy, fee_apy


def price_volatility(pool: dict[str, Any]) -> float:
    """Monthly price range relative to its midpoint; 0 when unavailable."""
    month = _window(pool, "month")
    return metrics.range_volatility(month.get("priceMin"), month.get("priceMax"))


def impermanent_loss_risk(volatility: float) -> float:
    return metrics.clamp(volatility * 2, IL_RISK_FLOOR, IL_RISK_CAP)


def risk_score(tvl: float, volatility: float) -> int:
    """Score from 3, adjusted for pool depth and monthly price range.

    TVL < 1M: +2, < 5M: +1, > 50M: -1.
    Volatility > 0.5: +2, > 0.3: +1.
    """
    score = 3
    if tvl < 1_000_000:
        score += 2
    elif tvl < 5_000_000:
        score += 1
    elif tvl > 50_000_000:
        score -= 1

    if volatility > 0.5:
        score += 2
    elif volatility > 0.3:
        score += 1

    return metrics.clamp_risk_score(score)


def extract_reward_symbols(pool: dict[str, Any]) -> tuple[str, ...]:
    rewards = pool.get("rewardDefaultInfos")
    if not isinstance(rewards, list):
        return ()

    symbols = []
    for reward in rewards:
        mint = reward.get("mint") if isinstance(reward, dict) else None
        if isinstance(mint, dict) and mint.get("symbol"):
            symbols.append(str(mint["symbol"]))
    return tuple(symbols)


def _symbol(mint: Any, side: str) -> str:
    if not isinstance(mint, dict) or not mint.get("symbol"):
        raise DataIntegrityError(f"Pool token {side} has no symbol")
    return str(mint["symbol"])


def parse_pool(pool: dict[str, Any]) -> YieldOpportunity:
    """Normalize one raw Raydium pool record.

    Raises:
        DataIntegrityError: id, either mint, or TVL is missing, zero or invalid.
    """
    pool_id = pool.get("id")
    mint_a = pool.get("mintA")
    mint_b = pool.get("mintB")
    tvl = pool.get("tvl")

    if not pool_id or not mint_a or not mint_b or not tvl:
        raise DataIntegrityError(f"Pool {pool_id or '<no id>'} is missing required fields")
    if not _is_number(tvl) or tvl < 0:
        raise DataIntegrityError(f"Pool {pool_id} has invalid TVL: {tvl!r}")

    symbol_a = _symbol(mint_a, "A")
    symbol_b = _symbol(mint_b, "B")

    total_apy, fee_apy = extract_apy(pool)
    volatility = price_volatility(pool)

    return YieldOpportunity(
        id=metrics.make_opportunity_id(PROTOCOL_TAG, symbol_a, symbol_b),
        protocol=PROTOCOL_NAME,
        asset=f"{symbol_a}/{symbol_b}",
        pool_id=str(pool_id),
        total_apy=total_apy,
        fee_apy=fee_apy,
        # May go negative on inconsistent upstream data; left as reported
        reward_apy=total_apy - fee_apy,
        tvl_usd=float(tvl),
        risk_score=risk_score(float(tvl), volatility),
        impermanent_loss_risk=impermanent_loss_risk(volatility),
        rewards=extract_reward_symbols(pool),
    )
