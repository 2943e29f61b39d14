import logging
from dataclasses import replace
from typing import Dict, Any, Optional, Union

from .pool import Calibration, PoolKey, normalize_address
from .utils import JSONHandler
from ..errors import UnauthorizedCallerError

logger = logging.getLogger(__name__)

PoolRef = Union[PoolKey, str]


def _pool_id(pool: PoolRef) -> str:
    if isinstance(pool, PoolKey):
        return pool.pool_id
    if not isinstance(pool, str) or not pool.startswith('0x') or len(pool) != 66:
        raise ValueError(f"Invalid pool id: {pool!r}")
    return pool.lower()


class CalibrationStore:
    """
    In-memory per-pool calibration state keyed by pool id.

    Reads of an unknown pool return the zero-state without creating an entry;
    entries are created on first write. Writes are open unless a keeper
    address is configured, in which case only the keeper may write.
    """

    def __init__(self, keeper: Optional[str] = None):
        """
        Initialize the store.

        Args:
            keeper: Address allowed to write calibration, or None for open writes
        """
        self.keeper = normalize_address(keeper) if keeper is not None else None
        self._entries: Dict[str, Calibration] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, pool: PoolRef) -> bool:
        return _pool_id(pool) in self._entries

    def get(self, pool: PoolRef) -> Calibration:
        """
        Get calibration of a pool.

        Args:
            pool: PoolKey or pool id

        Returns:
            The stored Calibration, or the zero-state if the pool is unknown
        """
        return self._entries.get(_pool_id(pool), Calibration())

    def _check_caller(self, caller: Optional[str]) -> None:
        if self.keeper is None:
            return
        try:
            normalized = normalize_address(caller)
        except ValueError:
            raise UnauthorizedCallerError(str(caller), self.keeper)
        if normalized != self.keeper:
            raise UnauthorizedCallerError(normalized, self.keeper)

    def set(self, pool: PoolRef, field: str, value: int, caller: Optional[str] = None) -> Calibration:
        """
        Set a single calibration field.

        Args:
            pool: PoolKey or pool id
            field: One of Calibration.FIELDS
            value: Non-negative integer (0 resets the field to unset)
            caller: Address of the writer, checked against the keeper

        Returns:
            The updated Calibration

        Raises:
            UnauthorizedCallerError: If a keeper is configured and caller is not it
            ValueError: If the field is unknown or the value is not a non-negative int
        """
        self._check_caller(caller)
        if field not in Calibration.FIELDS:
            raise ValueError(f"Unknown calibration field: {field!r}")
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"Calibration value for {field} must be a non-negative integer, got: {value!r}")

        pool_id = _pool_id(pool)
        updated = replace(self._entries.get(pool_id, Calibration()), **{field: value})
        self._entries[pool_id] = updated
        logger.debug(f"Calibration {pool_id} {field}={value}")
        return updated

    def set_depth(self, pool: PoolRef, amount: int, caller: Optional[str] = None) -> Calibration:
        return self.set(pool, 'depth_denominator', amount, caller=caller)

    def set_prices(self,
                   pool: PoolRef,
                   reference_sqrt_price_x96: int,
                   current_sqrt_price_x96: int,
                   caller: Optional[str] = None) -> Calibration:
        """
        Set reference and current sqrt prices together.

        Both values are validated before either is written.
        """
        self._check_caller(caller)
        for value in (reference_sqrt_price_x96, current_sqrt_price_x96):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Sqrt price must be a non-negative integer, got: {value!r}")
        self.set(pool, 'reference_sqrt_price_x96', reference_sqrt_price_x96, caller=caller)
        return self.set(pool, 'current_sqrt_price_x96', current_sqrt_price_x96, caller=caller)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert store contents to dictionary.

        Returns:
            Mapping of pool id to calibration fields
        """
        return {pool_id: calibration.to_dict() for pool_id, calibration in self._entries.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], keeper: Optional[str] = None) -> 'CalibrationStore':
        """
        Create a store from dictionary.

        Args:
            data: Mapping of pool id to calibration fields
            keeper: Optional keeper address for the new store

        Returns:
            New CalibrationStore instance
        """
        store = cls(keeper=keeper)
        for pool_id, fields in data.items():
            store._entries[_pool_id(pool_id)] = Calibration.from_dict(fields)
        return store

    def save_json(self, file_path: str) -> str:
        return JSONHandler.save_json(dict(self._entries), file_path)

    @classmethod
    def load_json(cls, file_path: str, keeper: Optional[str] = None) -> 'CalibrationStore':
        """
        Load a store snapshot, or an empty store if the file does not exist.
        """
        data = JSONHandler.load_json(file_path)
        if data is None:
            return cls(keeper=keeper)
        return cls.from_dict(data, keeper=keeper)
