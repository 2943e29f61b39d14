"""
Per-swap signals feeding the fee policies.

Both estimators are pure functions over integers. Uncalibrated inputs
(zero depth, zero prices) yield a zero signal instead of an error so that
the engine falls back to the pool's own fee.
"""

from .pool import SwapDirection

BPS = 10_000
Q64 = 1 << 64


def estimate_impact_bps(amount_specified: int, depth_denominator: int) -> int:
    """
    Estimate the price impact of a swap in basis points.

    Only exact-input swaps (negative amount_specified) are scored; output
    amounts are not comparable to the depth proxy. Division truncates, so the
    estimate never rounds up.

    Args:
        amount_specified: Signed swap amount (negative = exact-input)
        depth_denominator: Liquidity depth proxy in token-in units (0 = unset)

    Returns:
        Impact estimate in basis points
    """
    if amount_specified >= 0 or depth_denominator <= 0:
        return 0
    amount_in = -amount_specified
    return amount_in * BPS // depth_denominator


def price_ratio_q64(reference_sqrt_price_x96: int, current_sqrt_price_x96: int) -> int:
    """
    Price ratio current / reference in Q64.64, from two sqrt prices.

    Squaring the sqrt-price ratio turns it into a price ratio.
    """
    r = (current_sqrt_price_x96 << 64) // reference_sqrt_price_x96
    return (r * r) >> 64


def deviation_bps(reference_sqrt_price_x96: int, current_sqrt_price_x96: int) -> int:
    """
    Absolute deviation of the current price from the reference, in basis points.

    Returns 0 when either price is unset.
    """
    if reference_sqrt_price_x96 == 0 or current_sqrt_price_x96 == 0:
        return 0
    r2 = price_ratio_q64(reference_sqrt_price_x96, current_sqrt_price_x96)
    return abs(r2 - Q64) * BPS // Q64


def is_away_from_reference(reference_sqrt_price_x96: int,
                           current_sqrt_price_x96: int,
                           direction: SwapDirection) -> bool:
    """
    True if the swap pushes the price further from the reference.

    A price sitting at or below the reference counts as "below", so at
    parity the downward direction is the away one.
    """
    r = (current_sqrt_price_x96 << 64) // reference_sqrt_price_x96
    current_above = r > Q64
    return current_above == direction.moves_price_up


def evaluate_deviation_away_bps(reference_sqrt_price_x96: int,
                                current_sqrt_price_x96: int,
                                direction: SwapDirection) -> int:
    """
    Deviation in basis points if the swap moves away from the reference, else 0.

    The direction check is a hard gate: swaps toward the reference never
    contribute, whatever the size of the deviation.

    Args:
        reference_sqrt_price_x96: Reference (TWAP) sqrt price in Q96 format (0 = unset)
        current_sqrt_price_x96: Current sqrt price in Q96 format (0 = unset)
        direction: Swap direction

    Returns:
        Deviation in basis points, or 0
    """
    if reference_sqrt_price_x96 == 0 or current_sqrt_price_x96 == 0:
        return 0
    if not is_away_from_reference(reference_sqrt_price_x96, current_sqrt_price_x96, direction):
        return 0
    return deviation_bps(reference_sqrt_price_x96, current_sqrt_price_x96)
