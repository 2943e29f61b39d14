"""
Decision entry point invoked by the pool manager before every swap.

The engine reads calibration, derives the impact and away-deviation
signals and hands them to a fee model. It never writes state; calibration
is maintained separately by a keeper through CalibrationStore.
"""

import logging
from typing import Optional, Tuple

from .models import PiecewiseFeeModel
from .pool import (
    BEFORE_SWAP_SELECTOR,
    ZERO_ADDRESS,
    ZERO_DELTA,
    FeeDecision,
    HookResponse,
    PoolKey,
    SwapParams,
    normalize_address
)
from .signals import estimate_impact_bps, evaluate_deviation_away_bps
from .store import CalibrationStore
from ..config import DEFAULT_BASE_FEE
from ..errors import UnauthorizedCallerError

logger = logging.getLogger(__name__)


class DynamicFeeEngine:
    """
    Per-swap dynamic fee engine.

    Attributes:
        pool_manager (str): The only address allowed to invoke the engine
        store (CalibrationStore): Calibration state read on each swap
        model: Fee model exposing decide(impact_bps, deviation_away_bps, base_fee)
        address (str): This engine's own address, bound into pool keys as hooks
        default_base_fee (int): Base fee for pools with a dynamic fee tier
    """

    def __init__(self,
                 pool_manager: str,
                 store: Optional[CalibrationStore] = None,
                 model=None,
                 address: str = ZERO_ADDRESS,
                 default_base_fee: int = DEFAULT_BASE_FEE):
        self.pool_manager = normalize_address(pool_manager)
        self.store = store if store is not None else CalibrationStore()
        self.model = model if model is not None else PiecewiseFeeModel()
        self.address = normalize_address(address)
        self.default_base_fee = default_base_fee

    def pool_key(self, currency0: str, currency1: str, fee: int, tick_spacing: int) -> PoolKey:
        """Build a pool key bound to this engine."""
        return PoolKey(currency0, currency1, fee, tick_spacing, hooks=self.address)

    def base_fee_for(self, key: PoolKey) -> int:
        """Fee the pool charges when no override is returned."""
        return self.default_base_fee if key.is_dynamic_fee else key.fee

    def _check_caller(self, caller: str) -> None:
        try:
            normalized = normalize_address(caller)
        except ValueError:
            raise UnauthorizedCallerError(str(caller), self.pool_manager)
        if normalized != self.pool_manager:
            raise UnauthorizedCallerError(normalized, self.pool_manager)

    def signals(self, key: PoolKey, params: SwapParams) -> Tuple[int, int]:
        """
        Impact and away-deviation of a swap against the pool's calibration.

        The deviation is reported as 0 for models that do not use it.

        Returns:
            (impact_bps, deviation_away_bps)
        """
        calibration = self.store.get(key)
        impact_bps = estimate_impact_bps(params.amount_specified, calibration.depth_denominator)
        deviation_away_bps = 0
        if self.model.uses_deviation:
            deviation_away_bps = evaluate_deviation_away_bps(
                calibration.reference_sqrt_price_x96,
                calibration.current_sqrt_price_x96,
                params.direction
            )
        return impact_bps, deviation_away_bps

    def decide(self, caller: str, key: PoolKey, params: SwapParams) -> FeeDecision:
        """
        Compute the fee decision for a proposed swap.

        Args:
            caller: Address invoking the engine
            key: Pool key of the swap
            params: Swap parameters

        Returns:
            FeeDecision for this swap

        Raises:
            UnauthorizedCallerError: If caller is not the pool manager
        """
        self._check_caller(caller)
        impact_bps, deviation_away_bps = self.signals(key, params)

        decision = self.model.decide(impact_bps, deviation_away_bps, self.base_fee_for(key))
        logger.debug(
            f"pool={key.pool_id} direction={params.direction.value} impact={impact_bps}bps "
            f"deviation_away={deviation_away_bps}bps override={decision.override_active} fee={decision.fee}"
        )
        return decision

    def before_swap(self,
                    caller: str,
                    sender: str,
                    key: PoolKey,
                    params: SwapParams,
                    hook_data: bytes = b"") -> HookResponse:
        """
        Pool manager callback run before a swap executes.

        Args:
            caller: Address invoking the engine (must be the pool manager)
            sender: Address that initiated the swap (unused)
            key: Pool key of the swap
            params: Swap parameters
            hook_data: Opaque data forwarded by the router (unused)

        Returns:
            HookResponse carrying the selector, a zero delta and the fee override field
        """
        decision = self.decide(caller, key, params)
        return HookResponse(
            selector=BEFORE_SWAP_SELECTOR,
            before_swap_delta=ZERO_DELTA,
            lp_fee_override=decision.lp_fee_override
        )
