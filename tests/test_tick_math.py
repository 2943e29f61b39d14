"""
Tests for tick <-> sqrt price conversion.
"""
import math

import pytest

from dynamic_fee.core.tick_math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
)
from dynamic_fee.errors import OutOfRangeError


class TestGetSqrtRatioAtTick:

    def test_tick_zero_is_exactly_one(self):
        assert get_sqrt_ratio_at_tick(0) == 1 << 96

    def test_bounds_match_canonical_values(self):
        assert get_sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO
        assert get_sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO

    @pytest.mark.parametrize("tick", [MIN_TICK - 1, MAX_TICK + 1, 10**7, -10**7])
    def test_out_of_range_tick_raises(self, tick):
        with pytest.raises(OutOfRangeError):
            get_sqrt_ratio_at_tick(tick)

    @pytest.mark.parametrize("tick", [1.5, "10", None, True])
    def test_non_integer_tick_raises(self, tick):
        with pytest.raises(OutOfRangeError):
            get_sqrt_ratio_at_tick(tick)

    @pytest.mark.parametrize("tick", [1, -1, 10, -60, 100, 1000, -5000, 50000, -250000, 500000])
    def test_matches_floating_point_estimate(self, tick):
        expected = math.sqrt(1.0001 ** tick) * Q96
        actual = get_sqrt_ratio_at_tick(tick)
        assert abs(actual - expected) / expected < 1e-9

    def test_positive_ticks_above_one_negative_below(self):
        assert get_sqrt_ratio_at_tick(1) > Q96
        assert get_sqrt_ratio_at_tick(-1) < Q96

    def test_strictly_increasing(self):
        ticks = [MIN_TICK, -500000, -1000, -2, -1, 0, 1, 2, 1000, 500000, MAX_TICK]
        ratios = [get_sqrt_ratio_at_tick(t) for t in ticks]
        assert ratios == sorted(ratios)
        assert len(set(ratios)) == len(ratios)

    @pytest.mark.parametrize("tick", [1, 100, 20000, 400000])
    def test_symmetric_ticks_are_reciprocal(self, tick):
        product = get_sqrt_ratio_at_tick(tick) * get_sqrt_ratio_at_tick(-tick)
        assert abs(product - Q96 * Q96) / (Q96 * Q96) < 1e-12


class TestGetTickAtSqrtRatio:

    @pytest.mark.parametrize("tick", [MIN_TICK, -100000, -1, 0, 1, 60, 12345, MAX_TICK - 1])
    def test_inverts_get_sqrt_ratio_at_tick(self, tick):
        assert get_tick_at_sqrt_ratio(get_sqrt_ratio_at_tick(tick)) == tick

    def test_rounds_down_between_ticks(self):
        ratio = get_sqrt_ratio_at_tick(100)
        assert get_tick_at_sqrt_ratio(ratio + 1) == 100
        assert get_tick_at_sqrt_ratio(ratio - 1) == 99

    def test_one_is_tick_zero(self):
        assert get_tick_at_sqrt_ratio(Q96) == 0

    def test_just_below_max(self):
        assert get_tick_at_sqrt_ratio(MAX_SQRT_RATIO - 1) == MAX_TICK - 1

    @pytest.mark.parametrize("ratio", [0, MIN_SQRT_RATIO - 1, MAX_SQRT_RATIO, MAX_SQRT_RATIO + 1])
    def test_out_of_range_ratio_raises(self, ratio):
        with pytest.raises(OutOfRangeError):
            get_tick_at_sqrt_ratio(ratio)
