"""
Tests for the fee policies.
"""
import pytest

from dynamic_fee.core.models import (
    MultiplicativeFeeModel,
    PiecewiseFeeModel,
    build_fee_model,
)
from dynamic_fee.core.pool import OVERRIDE_FEE_FLAG, FeeDecision
from dynamic_fee.errors import ConfigError

from .conftest import BASE_FEE


class TestPiecewiseFeeModel:

    @pytest.fixture
    def model(self):
        return PiecewiseFeeModel()

    def test_default_parameters(self, model):
        assert model.impact_threshold_bps == 50
        assert model.deviation_threshold_bps == 50
        assert model.slope_per_ten_bps_over == 1
        assert model.fee_units_per_bp == 100
        assert model.max_fee == 20000

    def test_impact_at_threshold_without_deviation_is_inactive(self, model):
        decision = model.decide(50, 0, BASE_FEE)
        assert decision == FeeDecision.inactive()
        assert decision.fee == 0

    @pytest.mark.parametrize("impact,deviation", [
        (49, 10**6),
        (10**6, 49),
        (0, 0),
        (10**9, 0),
        (0, 10**9),
    ])
    def test_both_gates_required(self, model, impact, deviation):
        assert not model.decide(impact, deviation, BASE_FEE).override_active

    def test_both_at_threshold_keeps_base_fee_as_override(self, model):
        decision = model.decide(50, 50, BASE_FEE)
        assert decision.override_active
        assert decision.fee == BASE_FEE

    def test_150_bps_impact_adds_10_bps(self, model):
        decision = model.decide(150, 100, BASE_FEE)
        assert decision.override_active
        assert decision.fee == BASE_FEE + 10 * 100
        assert decision.fee > BASE_FEE

    def test_steps_every_ten_bps(self, model):
        assert model.decide(59, 50, BASE_FEE).fee == BASE_FEE
        assert model.decide(60, 50, BASE_FEE).fee == BASE_FEE + 100
        assert model.decide(69, 50, BASE_FEE).fee == BASE_FEE + 100
        assert model.decide(70, 50, BASE_FEE).fee == BASE_FEE + 200

    @pytest.mark.parametrize("impact", [1_750, 10_000, 10**6, 10**30])
    def test_fee_is_capped(self, model, impact):
        decision = model.decide(impact, 10_000, BASE_FEE)
        assert decision.override_active
        assert decision.fee == model.max_fee

    def test_fee_non_decreasing_in_impact(self, model):
        fees = [model.decide(impact, 100, BASE_FEE).fee for impact in range(50, 2500, 7)]
        assert fees == sorted(fees)
        assert max(fees) <= model.max_fee

    def test_custom_slope(self):
        model = PiecewiseFeeModel(slope_per_ten_bps_over=3)
        assert model.decide(150, 100, BASE_FEE).fee == BASE_FEE + 30 * 100

    @pytest.mark.parametrize("params", [
        {'impact_threshold_bps': -1},
        {'max_fee': -5},
        {'slope_per_ten_bps_over': 1.5},
    ])
    def test_invalid_parameters(self, params):
        with pytest.raises(ConfigError):
            PiecewiseFeeModel(**params)

    def test_dict_round_trip(self):
        model = PiecewiseFeeModel(impact_threshold_bps=70, max_fee=15000)
        restored = PiecewiseFeeModel.from_dict(model.to_dict())
        assert restored.to_dict() == model.to_dict()
        assert model.to_dict()['policy'] == 'piecewise'


class TestMultiplicativeFeeModel:

    @pytest.fixture
    def model(self):
        return MultiplicativeFeeModel()

    def test_default_parameters(self, model):
        assert model.impact_threshold_bps == 100
        assert model.multiplier == 4
        assert not model.uses_deviation

    def test_150_bps_quadruples_base_fee(self, model):
        decision = model.decide(150, 0, BASE_FEE)
        assert decision.override_active
        assert decision.fee == BASE_FEE * 4

    def test_50_bps_is_inactive(self, model):
        assert model.decide(50, 10**6, BASE_FEE) == FeeDecision.inactive()

    def test_threshold_is_inclusive(self, model):
        assert model.decide(100, 0, BASE_FEE).override_active
        assert not model.decide(99, 0, BASE_FEE).override_active

    def test_no_cap(self, model):
        assert model.decide(10**6, 0, 10_000).fee == 40_000


class TestBuildFeeModel:

    def test_builds_by_name(self):
        assert isinstance(build_fee_model("piecewise"), PiecewiseFeeModel)
        assert isinstance(build_fee_model("multiplicative"), MultiplicativeFeeModel)

    def test_overrides(self):
        model = build_fee_model("multiplicative", multiplier=2)
        assert model.multiplier == 2

    def test_unknown_policy(self):
        with pytest.raises(ConfigError):
            build_fee_model("quadratic")


class TestFeeDecision:

    def test_inactive_has_no_override_field(self):
        decision = FeeDecision.inactive()
        assert decision.lp_fee_override == 0
        assert decision.effective_fee(BASE_FEE) == BASE_FEE

    def test_active_sets_override_flag(self):
        decision = FeeDecision(override_active=True, fee=4000)
        assert decision.lp_fee_override == 4000 | OVERRIDE_FEE_FLAG
        assert decision.lp_fee_override & ~OVERRIDE_FEE_FLAG == 4000
        assert decision.effective_fee(BASE_FEE) == 4000
