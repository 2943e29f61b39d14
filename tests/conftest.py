import pytest

from dynamic_fee.core.engine import DynamicFeeEngine
from dynamic_fee.core.models import MultiplicativeFeeModel, PiecewiseFeeModel
from dynamic_fee.core.pool import PoolKey
from dynamic_fee.core.store import CalibrationStore
from dynamic_fee.core.tick_math import Q96

UNIT = 10**18
DEPTH = 200 * UNIT
BASE_FEE = 3000

USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
POOL_MANAGER = "0x000000000004444c5dc75cb358380d2e3de08a90"
ENGINE_ADDRESS = "0x00000000000000000000000000000000000000c0"
KEEPER = "0x00000000000000000000000000000000000000aa"
STRANGER = "0x00000000000000000000000000000000000000bb"

REFERENCE_PRICE = Q96
# sqrt price 0.5% above the reference: price about 1.0% above
CURRENT_PRICE_ABOVE = Q96 * 201 // 200


@pytest.fixture
def pool_key():
    return PoolKey(USDC, WETH, BASE_FEE, 60, hooks=ENGINE_ADDRESS)


@pytest.fixture
def store():
    return CalibrationStore()


@pytest.fixture
def calibrated_store(store, pool_key):
    store.set_depth(pool_key, DEPTH)
    store.set_prices(pool_key, REFERENCE_PRICE, CURRENT_PRICE_ABOVE)
    return store


@pytest.fixture
def engine(calibrated_store):
    return DynamicFeeEngine(
        pool_manager=POOL_MANAGER,
        store=calibrated_store,
        model=PiecewiseFeeModel(),
        address=ENGINE_ADDRESS
    )


@pytest.fixture
def multiplicative_engine(calibrated_store):
    return DynamicFeeEngine(
        pool_manager=POOL_MANAGER,
        store=calibrated_store,
        model=MultiplicativeFeeModel(),
        address=ENGINE_ADDRESS
    )
