"""
Tick <-> sqrt price conversion in Q64.96 fixed point.

Key concepts:
- sqrtPriceX96: Square root of price in Q96 fixed-point format (96 fractional bits)
- Tick: logarithmic price representation where price = 1.0001^tick
- Valid ticks lie in [MIN_TICK, MAX_TICK]; the matching sqrt prices lie in
  [MIN_SQRT_RATIO, MAX_SQRT_RATIO]

The conversion uses integer arithmetic only, so results are identical to the
on-chain TickMath library on every platform.
"""

from typing import Tuple

from ..errors import OutOfRangeError

# Q96 constants
Q96 = 2**96
Q128 = 2**128
MAX_UINT256 = 2**256 - 1

MIN_TICK = -887272
MAX_TICK = 887272

MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

# 1 / sqrt(1.0001)^(2^k) in Q128, one entry per bit k of |tick|
_BIT_RATIOS: Tuple[int, ...] = (
    0xFFFCB933BD6FAD37AA2D162D1A594001,
    0xFFF97272373D413259A46990580E213A,
    0xFFF2E50F5F656932EF12357CF3C7FDCC,
    0xFFE5CACA7E10E4E61C3624EAA0941CD0,
    0xFFCB9843D60F6159C9DB58835C926644,
    0xFF973B41FA98C081472E6896DFB254C0,
    0xFF2EA16466C96A3843EC78B326B52861,
    0xFE5DEE046A99A2A811C461F1969C3053,
    0xFCBE86C7900A88AEDCFFC83B479AA3A4,
    0xF987A7253AC413176F2B074CF7815E54,
    0xF3392B0822B70005940C7A398E4B70F3,
    0xE7159475A2C29B7443B29C7FA6E889D9,
    0xD097F3BDFD2022B8845AD8F792AA5825,
    0xA9F746462D870FDF8A65DC1F90E061E5,
    0x70D869A156D2A1B890BB3DF62BAF32F7,
    0x31BE135F97D08FD981231505542FCFA6,
    0x9AA508B5B7A84E1C677DE54F3E99BC9,
    0x5D6AF8DEDB81196699C329225EE604,
    0x2216E584F5FA1EA926041BEDFE98,
    0x48A170391F7DC42444E8FA2,
)


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """
    Calculate sqrtPriceX96 from tick.

    Args:
        tick: The tick value, within [MIN_TICK, MAX_TICK]

    Returns:
        sqrtPriceX96, i.e. sqrt(1.0001^tick) * 2^96 rounded up

    Raises:
        OutOfRangeError: If the tick is not an integer within the tick bounds
    """
    if isinstance(tick, bool) or not isinstance(tick, int):
        raise OutOfRangeError(f"Tick must be an integer, got: {tick!r}")
    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        raise OutOfRangeError(f"Tick {tick} outside [{MIN_TICK}, {MAX_TICK}]")

    ratio = Q128
    for bit, bit_ratio in enumerate(_BIT_RATIOS):
        if abs_tick & (1 << bit):
            ratio = (ratio * bit_ratio) >> 128

    # The table holds reciprocals, so positive ticks are inverted
    if tick > 0:
        ratio = MAX_UINT256 // ratio

    # Q128 -> Q96, rounding up so that get_tick_at_sqrt_ratio stays consistent
    sqrt_price_x96 = ratio >> 32
    if ratio % (1 << 32):
        sqrt_price_x96 += 1
    return sqrt_price_x96


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """
    Calculate the greatest tick whose sqrt ratio is <= sqrt_price_x96.

    Args:
        sqrt_price_x96: Sqrt price in Q96 format, within [MIN_SQRT_RATIO, MAX_SQRT_RATIO)

    Returns:
        The tick value

    Raises:
        OutOfRangeError: If the sqrt price is outside the representable range
    """
    if isinstance(sqrt_price_x96, bool) or not isinstance(sqrt_price_x96, int):
        raise OutOfRangeError(f"Sqrt price must be an integer, got: {sqrt_price_x96!r}")
    if not MIN_SQRT_RATIO <= sqrt_price_x96 < MAX_SQRT_RATIO:
        raise OutOfRangeError(
            f"Sqrt price {sqrt_price_x96} outside [{MIN_SQRT_RATIO}, {MAX_SQRT_RATIO})"
        )

    low, high = MIN_TICK, MAX_TICK
    while low < high:
        mid = (low + high + 1) // 2
        if get_sqrt_ratio_at_tick(mid) <= sqrt_price_x96:
            low = mid
        else:
            high = mid - 1
    return low
