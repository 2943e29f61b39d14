from typing import Dict, Any, NamedTuple
from dataclasses import dataclass
from enum import Enum

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, is_address, keccak, to_checksum_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Fee tier flag marking a pool whose LP fee is set per swap
DYNAMIC_FEE_FLAG = 0x800000
# Flag set on a returned fee to tell the pool manager to use it for this swap
OVERRIDE_FEE_FLAG = 0x400000
MAX_LP_FEE = 1_000_000

BEFORE_SWAP_SIGNATURE = (
    "beforeSwap(address,(address,address,uint24,int24,address),(bool,int256,uint160),bytes)"
)
BEFORE_SWAP_SELECTOR = function_signature_to_4byte_selector(BEFORE_SWAP_SIGNATURE)

# Packed (specified, unspecified) delta of zero: no extra token transfer
ZERO_DELTA = 0


def normalize_address(address: str) -> str:
    """
    Normalize an address to its checksummed form.

    Raises:
        ValueError: If the value is not a 20-byte hex address
    """
    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


class PoolKey:
    """
    Immutable descriptor of a pool, hashed into its pool id.
    """
    def __init__(self,
                 currency0: str,
                 currency1: str,
                 fee: int,
                 tick_spacing: int,
                 hooks: str = ZERO_ADDRESS):
        """
        Initialize a pool key.

        Args:
            currency0: Address of the first currency
            currency1: Address of the second currency
            fee: Static fee tier up to MAX_LP_FEE, or exactly DYNAMIC_FEE_FLAG
            tick_spacing: Tick spacing (int24)
            hooks: Address of the fee engine attached to the pool
        """
        if isinstance(fee, bool) or not isinstance(fee, int):
            raise ValueError(f"Fee tier must be an integer, got: {fee!r}")
        if not (0 <= fee <= MAX_LP_FEE or fee == DYNAMIC_FEE_FLAG):
            raise ValueError(f"Fee tier must be at most {MAX_LP_FEE} or the dynamic fee flag, got: {fee}")
        if isinstance(tick_spacing, bool) or not isinstance(tick_spacing, int):
            raise ValueError(f"Tick spacing must be an integer, got: {tick_spacing!r}")
        if not -2**23 <= tick_spacing < 2**23:
            raise ValueError(f"Tick spacing must fit in int24, got: {tick_spacing}")
        self.currency0 = normalize_address(currency0)
        self.currency1 = normalize_address(currency1)
        self.fee = fee
        self.tick_spacing = tick_spacing
        self.hooks = normalize_address(hooks)

    @property
    def is_dynamic_fee(self) -> bool:
        """True if the fee tier carries the dynamic-fee flag."""
        return self.fee == DYNAMIC_FEE_FLAG

    @property
    def pool_id(self) -> str:
        """
        keccak256 of the ABI-encoded key, as a 0x-prefixed hex string.
        """
        encoded = encode(
            ['address', 'address', 'uint24', 'int24', 'address'],
            [self.currency0, self.currency1, self.fee, self.tick_spacing, self.hooks]
        )
        return '0x' + keccak(encoded).hex()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PoolKey):
            return False
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(self.pool_id)

    def __repr__(self) -> str:
        return (f"PoolKey({self.currency0}, {self.currency1}, fee={self.fee}, "
                f"tick_spacing={self.tick_spacing}, hooks={self.hooks})")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert pool key to dictionary.

        Returns:
            Dictionary representation of the pool key
        """
        return {
            'currency0': self.currency0,
            'currency1': self.currency1,
            'fee': self.fee,
            'tick_spacing': self.tick_spacing,
            'hooks': self.hooks
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PoolKey':
        """
        Create pool key from dictionary.

        Args:
            data: Dictionary with pool key data

        Returns:
            New PoolKey instance
        """
        return cls(
            currency0=data['currency0'],
            currency1=data['currency1'],
            fee=int(data['fee']),
            tick_spacing=int(data['tick_spacing']),
            hooks=data.get('hooks', ZERO_ADDRESS)
        )


class SwapDirection(Enum):
    """Direction of a swap and the way it moves the pool price"""
    ZERO_FOR_ONE = "zero_for_one"  # price moves down
    ONE_FOR_ZERO = "one_for_zero"  # price moves up

    @property
    def moves_price_up(self) -> bool:
        return self is SwapDirection.ONE_FOR_ZERO


class SwapParams:
    """
    A proposed swap as seen by the fee engine.
    """
    def __init__(self, zero_for_one: bool, amount_specified: int, sqrt_price_limit_x96: int = 0):
        """
        Initialize swap parameters.

        Args:
            zero_for_one: True if currency0 is swapped for currency1
            amount_specified: Negative for exact-input, positive for exact-output
            sqrt_price_limit_x96: Price limit in Q96 format (not used by the engine)
        """
        if isinstance(amount_specified, bool) or not isinstance(amount_specified, int):
            raise ValueError(f"amount_specified must be an integer, got: {amount_specified!r}")
        self.zero_for_one = bool(zero_for_one)
        self.amount_specified = amount_specified
        self.sqrt_price_limit_x96 = sqrt_price_limit_x96

    @property
    def direction(self) -> SwapDirection:
        return SwapDirection.ZERO_FOR_ONE if self.zero_for_one else SwapDirection.ONE_FOR_ZERO

    @property
    def is_exact_input(self) -> bool:
        return self.amount_specified < 0

    def __repr__(self) -> str:
        return (f"SwapParams(zero_for_one={self.zero_for_one}, "
                f"amount_specified={self.amount_specified})")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'zero_for_one': self.zero_for_one,
            'amount_specified': self.amount_specified,
            'sqrt_price_limit_x96': self.sqrt_price_limit_x96
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SwapParams':
        return cls(
            zero_for_one=bool(data['zero_for_one']),
            amount_specified=int(data['amount_specified']),
            sqrt_price_limit_x96=int(data.get('sqrt_price_limit_x96', 0))
        )


@dataclass(frozen=True)
class Calibration:
    """
    Per-pool calibration inputs. Zero in any field means "unset".

    Attributes:
        depth_denominator: Liquidity depth proxy in token-in units
        reference_sqrt_price_x96: Reference (TWAP) sqrt price in Q96 format
        current_sqrt_price_x96: Current sqrt price in Q96 format
    """
    depth_denominator: int = 0
    reference_sqrt_price_x96: int = 0
    current_sqrt_price_x96: int = 0

    FIELDS = ('depth_denominator', 'reference_sqrt_price_x96', 'current_sqrt_price_x96')

    @property
    def is_empty(self) -> bool:
        return not any(self.to_dict().values())

    def to_dict(self) -> Dict[str, int]:
        return {field: getattr(self, field) for field in self.FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Calibration':
        return cls(**{field: int(data.get(field, 0)) for field in cls.FIELDS})


@dataclass(frozen=True)
class FeeDecision:
    """
    Outcome of a fee policy for one swap.

    An inactive decision means "keep the pool's own fee", never "charge zero".
    """
    override_active: bool = False
    fee: int = 0

    @classmethod
    def inactive(cls) -> 'FeeDecision':
        return cls(override_active=False, fee=0)

    @property
    def lp_fee_override(self) -> int:
        """Fee field returned to the pool manager."""
        if not self.override_active:
            return 0
        return self.fee | OVERRIDE_FEE_FLAG

    def effective_fee(self, base_fee: int) -> int:
        """Fee actually charged given the pool's own fee."""
        return self.fee if self.override_active else base_fee


class HookResponse(NamedTuple):
    """Return value of before_swap: (selector, delta, fee override)."""
    selector: bytes
    before_swap_delta: int
    lp_fee_override: int
