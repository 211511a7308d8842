"""Unit tests for shared APY / risk helpers (pure functions)."""
from __future__ import annotations

import math
import statistics

import pytest

from yield_aggregator.errors import DataIntegrityError
from yield_aggregator.metrics import (
    annualize_emissions_x64,
    clamp,
    clamp_risk_score,
    fee_apy_from_volume_share,
    log_returns,
    make_opportunity_id,
    price_ratio_volatility,
    range_volatility,
    sample_std,
)


class TestClamp:
    def test_within_bounds(self) -> None:
        assert clamp(0.5, 0.1, 0.9) == 0.5

    def test_below_and_above(self) -> None:
        assert clamp(-1.0, 0.1, 0.9) == 0.1
        assert clamp(5.0, 0.1, 0.9) == 0.9

    def test_risk_score_bounds(self) -> None:
        assert clamp_risk_score(0) == 1
        assert clamp_risk_score(-3) == 1
        assert clamp_risk_score(11) == 10
        assert clamp_risk_score(7) == 7


class TestMakeOpportunityId:
    def test_lowercases_symbols(self) -> None:
        assert make_opportunity_id("raydium", "SOL", "USDC") == "raydium-sol-usdc"

    def test_pair_order_does_not_matter(self) -> None:
        assert make_opportunity_id("orca", "USDC", "SOL") == make_opportunity_id(
            "orca", "SOL", "USDC"
        )


class TestRangeVolatility:
    def test_basic(self) -> None:
        # (40 - 20) / 30
        assert range_volatility(20.0, 40.0) == pytest.approx(0.6667, abs=1e-4)

    def test_missing_bounds(self) -> None:
        assert range_volatility(None, 40.0) == 0.0
        assert range_volatility(20.0, None) == 0.0
        assert range_volatility(0, 40.0) == 0.0

    def test_flat_range(self) -> None:
        assert range_volatility(10.0, 10.0) == 0.0


class TestLogReturnsAndStd:
    def test_log_returns(self) -> None:
        returns = log_returns([1.0, 2.0, 1.0])
        assert returns == pytest.approx([math.log(2), -math.log(2)])

    def test_single_point_has_no_returns(self) -> None:
        assert log_returns([5.0]) == []

    def test_sample_std_matches_statistics(self) -> None:
        values = [0.01, -0.02, 0.015, 0.0, -0.005]
        assert sample_std(values) == pytest.approx(statistics.stdev(values))

    def test_sample_std_short_series(self) -> None:
        assert sample_std([]) == 0.0
        assert sample_std([0.3]) == 0.0


class TestPriceRatioVolatility:
    def test_flat_series_is_zero(self) -> None:
        assert price_ratio_volatility([1.0] * 30, [1.0] * 30) == 0.0

    def test_matches_annualized_sample_std(self) -> None:
        prices_a = [100.0, 101.0, 100.0, 101.0, 100.5]
        prices_b = [1.0] * 5
        ratios = [a / b for a, b in zip(prices_a, prices_b)]
        returns = [math.log(ratios[i] / ratios[i - 1]) for i in range(1, len(ratios))]
        expected = statistics.stdev(returns) * math.sqrt(365)

        assert expected < 1.0
        assert price_ratio_volatility(prices_a, prices_b) == pytest.approx(expected)

    def test_capped_at_one(self) -> None:
        assert price_ratio_volatility([1.0, 2.0, 1.0, 2.0], [1.0] * 4) == 1.0

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(DataIntegrityError, match="Mismatch"):
            price_ratio_volatility([1.0] * 30, [1.0] * 29)

    def test_non_positive_price_raises(self) -> None:
        with pytest.raises(DataIntegrityError):
            price_ratio_volatility([1.0, 0.0], [1.0, 1.0])


class TestEmissionsAndFees:
    def test_one_token_per_second(self) -> None:
        assert annualize_emissions_x64(2**64) == pytest.approx(31_536_000)

    def test_zero_emissions(self) -> None:
        assert annualize_emissions_x64(0) == 0.0

    def test_fee_apy_is_independent_of_tvl(self) -> None:
        # 0.3% fee, 10% of TVL traded daily
        assert fee_apy_from_volume_share(0.003, 1_000.0) == pytest.approx(0.1095)
        assert fee_apy_from_volume_share(0.003, 1e9) == pytest.approx(0.1095)

    def test_fee_apy_zero_tvl(self) -> None:
        assert fee_apy_from_volume_share(0.003, 0.0) == 0.0
