from .engine import DynamicFeeEngine
from .models import PiecewiseFeeModel, MultiplicativeFeeModel, build_fee_model
from .oracle import arithmetic_mean_tick, calibrate_from_observations
from .pool import (
    PoolKey,
    SwapDirection,
    SwapParams,
    Calibration,
    FeeDecision,
    HookResponse
)
from .signals import estimate_impact_bps, evaluate_deviation_away_bps
from .store import CalibrationStore
from .tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from .utils import (
    DataIO,
    JSONHandler,
    Visualizer
)

__all__ = [
    'DynamicFeeEngine',
    'PiecewiseFeeModel',
    'MultiplicativeFeeModel',
    'build_fee_model',
    'arithmetic_mean_tick',
    'calibrate_from_observations',
    'PoolKey',
    'SwapDirection',
    'SwapParams',
    'Calibration',
    'FeeDecision',
    'HookResponse',
    'estimate_impact_bps',
    'evaluate_deviation_away_bps',
    'CalibrationStore',
    'get_sqrt_ratio_at_tick',
    'get_tick_at_sqrt_ratio',
    'DataIO',
    'JSONHandler',
    'Visualizer'
]
