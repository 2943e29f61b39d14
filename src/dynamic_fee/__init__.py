"""
Dynamic fee decision engine for AMM pools.
"""

from .core import (
    DynamicFeeEngine,
    PiecewiseFeeModel,
    MultiplicativeFeeModel,
    build_fee_model,
    CalibrationStore,
    PoolKey,
    SwapDirection,
    SwapParams,
    Calibration,
    FeeDecision,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio
)
from .errors import DynamicFeeError, UnauthorizedCallerError, OutOfRangeError, ConfigError

__version__ = "0.1.0"

__all__ = [
    'DynamicFeeEngine',
    'PiecewiseFeeModel',
    'MultiplicativeFeeModel',
    'build_fee_model',
    'CalibrationStore',
    'PoolKey',
    'SwapDirection',
    'SwapParams',
    'Calibration',
    'FeeDecision',
    'get_sqrt_ratio_at_tick',
    'get_tick_at_sqrt_ratio',
    'DynamicFeeError',
    'UnauthorizedCallerError',
    'OutOfRangeError',
    'ConfigError',
]
