from typing import Dict, Any, Type

from .pool import FeeDecision
from ..errors import ConfigError
from ..config import (
    IMPACT_THRESHOLD_BPS,
    DEVIATION_THRESHOLD_BPS,
    SLOPE_PER_TEN_BPS_OVER,
    FEE_UNITS_PER_BP,
    MAX_FEE,
    MULTIPLICATIVE_IMPACT_THRESHOLD_BPS,
    FEE_MULTIPLIER
)


def _check_non_negative(**params: int) -> None:
    for name, value in params.items():
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigError(f"Fee model parameter '{name}' must be a non-negative integer, got: {value!r}")


class PiecewiseFeeModel:
    """
    Gated, capped piecewise-linear fee model.

    An override fires only when both the impact and the away-deviation reach
    their thresholds. The fee then grows linearly with the impact above its
    threshold:

    add_bps = floor((impact_bps - impact_threshold) / 10) * slope
    fee = min(base_fee + add_bps * fee_units_per_bp, max_fee)

    Attributes:
        impact_threshold_bps (int): Minimum impact for an override
        deviation_threshold_bps (int): Minimum away-deviation for an override
        slope_per_ten_bps_over (int): Fee bps added per 10 impact bps over threshold
        fee_units_per_bp (int): Fee units in one basis point
        max_fee (int): Fee cap in fee units
    """

    name = "piecewise"
    uses_deviation = True

    def __init__(self,
                 impact_threshold_bps: int = IMPACT_THRESHOLD_BPS,
                 deviation_threshold_bps: int = DEVIATION_THRESHOLD_BPS,
                 slope_per_ten_bps_over: int = SLOPE_PER_TEN_BPS_OVER,
                 fee_units_per_bp: int = FEE_UNITS_PER_BP,
                 max_fee: int = MAX_FEE):
        _check_non_negative(
            impact_threshold_bps=impact_threshold_bps,
            deviation_threshold_bps=deviation_threshold_bps,
            slope_per_ten_bps_over=slope_per_ten_bps_over,
            fee_units_per_bp=fee_units_per_bp,
            max_fee=max_fee
        )
        self.impact_threshold_bps = impact_threshold_bps
        self.deviation_threshold_bps = deviation_threshold_bps
        self.slope_per_ten_bps_over = slope_per_ten_bps_over
        self.fee_units_per_bp = fee_units_per_bp
        self.max_fee = max_fee

    def is_gated_open(self, impact_bps: int, deviation_away_bps: int) -> bool:
        return (impact_bps >= self.impact_threshold_bps
                and deviation_away_bps >= self.deviation_threshold_bps)

    def decide(self, impact_bps: int, deviation_away_bps: int, base_fee: int) -> FeeDecision:
        """
        Decide the fee override for one swap.

        Args:
            impact_bps: Estimated price impact in basis points
            deviation_away_bps: Deviation from the reference when moving away, else 0
            base_fee: The pool's own fee in fee units

        Returns:
            Active decision with the new fee, or an inactive decision
        """
        if not self.is_gated_open(impact_bps, deviation_away_bps):
            return FeeDecision.inactive()

        over = impact_bps - self.impact_threshold_bps
        add_bps = (over // 10) * self.slope_per_ten_bps_over
        fee = min(base_fee + add_bps * self.fee_units_per_bp, self.max_fee)
        return FeeDecision(override_active=True, fee=fee)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model parameters to dictionary.

        Returns:
            Dictionary with model parameters
        """
        return {
            'policy': self.name,
            'impact_threshold_bps': self.impact_threshold_bps,
            'deviation_threshold_bps': self.deviation_threshold_bps,
            'slope_per_ten_bps_over': self.slope_per_ten_bps_over,
            'fee_units_per_bp': self.fee_units_per_bp,
            'max_fee': self.max_fee
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PiecewiseFeeModel':
        """
        Create a model instance from dictionary.

        Args:
            data: Dictionary with model parameters

        Returns:
            New PiecewiseFeeModel instance
        """
        return cls(
            impact_threshold_bps=data.get('impact_threshold_bps', IMPACT_THRESHOLD_BPS),
            deviation_threshold_bps=data.get('deviation_threshold_bps', DEVIATION_THRESHOLD_BPS),
            slope_per_ten_bps_over=data.get('slope_per_ten_bps_over', SLOPE_PER_TEN_BPS_OVER),
            fee_units_per_bp=data.get('fee_units_per_bp', FEE_UNITS_PER_BP),
            max_fee=data.get('max_fee', MAX_FEE)
        )


class MultiplicativeFeeModel:
    """
    Impact-only fee model: fee = base_fee * multiplier once the impact
    reaches its threshold. No deviation gate and no cap.
    """

    name = "multiplicative"
    uses_deviation = False

    def __init__(self,
                 impact_threshold_bps: int = MULTIPLICATIVE_IMPACT_THRESHOLD_BPS,
                 multiplier: int = FEE_MULTIPLIER):
        _check_non_negative(impact_threshold_bps=impact_threshold_bps, multiplier=multiplier)
        self.impact_threshold_bps = impact_threshold_bps
        self.multiplier = multiplier

    def decide(self, impact_bps: int, deviation_away_bps: int, base_fee: int) -> FeeDecision:
        # deviation_away_bps is accepted for interface parity and ignored
        if impact_bps < self.impact_threshold_bps:
            return FeeDecision.inactive()
        return FeeDecision(override_active=True, fee=base_fee * self.multiplier)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'policy': self.name,
            'impact_threshold_bps': self.impact_threshold_bps,
            'multiplier': self.multiplier
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MultiplicativeFeeModel':
        return cls(
            impact_threshold_bps=data.get('impact_threshold_bps', MULTIPLICATIVE_IMPACT_THRESHOLD_BPS),
            multiplier=data.get('multiplier', FEE_MULTIPLIER)
        )


FEE_MODELS: Dict[str, Type] = {
    PiecewiseFeeModel.name: PiecewiseFeeModel,
    MultiplicativeFeeModel.name: MultiplicativeFeeModel,
}


def build_fee_model(name: str, **overrides: Any):
    """
    Create a fee model by policy name.

    Args:
        name: "piecewise" or "multiplicative"
        **overrides: Parameters replacing the configured defaults

    Returns:
        Fee model instance

    Raises:
        ConfigError: If the policy name is unknown
    """
    try:
        model_cls = FEE_MODELS[name]
    except KeyError:
        raise ConfigError(f"Unknown fee policy: {name!r} (expected one of {sorted(FEE_MODELS)})")
    return model_cls.from_dict(overrides)
