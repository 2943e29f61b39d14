"""
Keeper-side helpers turning oracle observations into calibration.

The oracle itself is external: it reports cumulative tick accumulators at
requested look-back offsets. These helpers derive the time-weighted tick and
push the resulting sqrt prices into the calibration store.
"""

import logging
from typing import Optional, Sequence

from .pool import Calibration
from .store import CalibrationStore, PoolRef
from .tick_math import get_sqrt_ratio_at_tick

logger = logging.getLogger(__name__)


def arithmetic_mean_tick(tick_cumulatives: Sequence[int], seconds_ago: int) -> int:
    """
    Time-weighted average tick over a look-back window.

    Args:
        tick_cumulatives: Cumulative ticks observed at [seconds_ago, 0]
        seconds_ago: Length of the window in seconds

    Returns:
        Mean tick, rounded toward negative infinity

    Raises:
        ValueError: If the window is empty or the observations are malformed
    """
    if seconds_ago <= 0:
        raise ValueError(f"seconds_ago must be positive, got: {seconds_ago}")
    if len(tick_cumulatives) != 2:
        raise ValueError(f"Expected 2 tick cumulatives, got: {len(tick_cumulatives)}")

    delta = int(tick_cumulatives[1]) - int(tick_cumulatives[0])
    return delta // seconds_ago


def calibrate_from_observations(store: CalibrationStore,
                                pool: PoolRef,
                                tick_cumulatives: Sequence[int],
                                seconds_ago: int,
                                current_tick: int,
                                depth: Optional[int] = None,
                                caller: Optional[str] = None) -> Calibration:
    """
    Write reference and current sqrt prices (and optionally depth) for a pool.

    Args:
        store: Calibration store to update
        pool: PoolKey or pool id
        tick_cumulatives: Cumulative ticks observed at [seconds_ago, 0]
        seconds_ago: Length of the TWAP window in seconds
        current_tick: The pool's current tick
        depth: Liquidity depth proxy, left untouched when None
        caller: Address of the writer, checked against the store keeper

    Returns:
        The updated Calibration
    """
    twap_tick = arithmetic_mean_tick(tick_cumulatives, seconds_ago)
    reference = get_sqrt_ratio_at_tick(twap_tick)
    current = get_sqrt_ratio_at_tick(current_tick)

    calibration = store.set_prices(pool, reference, current, caller=caller)
    if depth is not None:
        calibration = store.set_depth(pool, depth, caller=caller)

    logger.info(f"Calibrated pool: twap_tick={twap_tick} current_tick={current_tick} depth={depth}")
    return calibration
