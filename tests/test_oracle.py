"""
Tests for TWAP derivation and keeper calibration.
"""
import pytest

from dynamic_fee.core.oracle import arithmetic_mean_tick, calibrate_from_observations
from dynamic_fee.core.pool import SwapParams
from dynamic_fee.core.store import CalibrationStore
from dynamic_fee.core.tick_math import MAX_TICK, Q96, get_sqrt_ratio_at_tick
from dynamic_fee.errors import OutOfRangeError, UnauthorizedCallerError

from .conftest import DEPTH, KEEPER, POOL_MANAGER, STRANGER, UNIT


class TestArithmeticMeanTick:

    def test_positive_mean(self):
        assert arithmetic_mean_tick([100, 160], 60) == 1

    def test_exact_negative_mean(self):
        assert arithmetic_mean_tick([0, -120], 60) == -2

    def test_negative_mean_rounds_toward_negative_infinity(self):
        assert arithmetic_mean_tick([0, -7], 2) == -4

    def test_positive_mean_rounds_down(self):
        assert arithmetic_mean_tick([0, 7], 2) == 3

    @pytest.mark.parametrize("seconds_ago", [0, -60])
    def test_empty_window(self, seconds_ago):
        with pytest.raises(ValueError):
            arithmetic_mean_tick([0, 0], seconds_ago)

    def test_wrong_observation_count(self):
        with pytest.raises(ValueError):
            arithmetic_mean_tick([0, 1, 2], 60)


class TestCalibrateFromObservations:

    def test_writes_prices_and_depth(self, store, pool_key):
        calibration = calibrate_from_observations(
            store, pool_key, tick_cumulatives=[0, 0], seconds_ago=1800, current_tick=100, depth=DEPTH
        )
        assert calibration.reference_sqrt_price_x96 == Q96
        assert calibration.current_sqrt_price_x96 == get_sqrt_ratio_at_tick(100)
        assert calibration.depth_denominator == DEPTH
        assert store.get(pool_key) == calibration

    def test_keeps_depth_when_not_given(self, calibrated_store, pool_key):
        calibration = calibrate_from_observations(calibrated_store, pool_key, [0, 1800], 1800, 0)
        assert calibration.depth_denominator == DEPTH
        assert calibration.reference_sqrt_price_x96 == get_sqrt_ratio_at_tick(1)

    def test_out_of_range_tick(self, store, pool_key):
        with pytest.raises(OutOfRangeError):
            calibrate_from_observations(store, pool_key, [0, 0], 60, MAX_TICK + 1)

    def test_respects_keeper(self, pool_key):
        store = CalibrationStore(keeper=KEEPER)
        with pytest.raises(UnauthorizedCallerError):
            calibrate_from_observations(store, pool_key, [0, 0], 60, 100, caller=STRANGER)
        calibrate_from_observations(store, pool_key, [0, 0], 60, 100, caller=KEEPER)
        assert pool_key in store

    def test_feeds_engine_decision(self, engine, store, pool_key):
        # price 100 ticks above a flat TWAP: pushing it further up is taxed
        calibrate_from_observations(store, pool_key, [0, 0], 1800, 100, depth=DEPTH)
        engine.store = store

        up = engine.decide(POOL_MANAGER, pool_key, SwapParams(False, -3 * UNIT))
        down = engine.decide(POOL_MANAGER, pool_key, SwapParams(True, -3 * UNIT))
        assert up.override_active and up.fee == 4000
        assert not down.override_active
