import os
import logging
import pandas as pd
from typing import List, Optional

from .core.store import CalibrationStore
from .core.utils import DataIO
from .config import DATA_DIR, TRADES_FILE, CALIBRATION_FILE

logger = logging.getLogger(__name__)

# Columns holding integers that may exceed 64 bits
INT_COLUMNS = ['amount_specified']
OPTIONAL_INT_COLUMNS = ['sqrt_price_limit_x96']
REQUIRED_TRADE_COLUMNS = ['currency0', 'currency1', 'fee', 'tick_spacing', 'zero_for_one', 'amount_specified']


class TradeLoader:
    """
    Loads trade logs and calibration snapshots for offline replay.
    """

    def __init__(self, data_dir: str = DATA_DIR):
        """
        Initialize the loader.

        Args:
            data_dir: Directory used to resolve bare file names
        """
        self.data_dir = data_dir

    def _resolve(self, path: str) -> str:
        if os.path.isabs(path) or os.path.exists(path):
            return path
        return os.path.join(self.data_dir, path)

    @staticmethod
    def _read_header(file_path: str) -> List[str]:
        return list(pd.read_csv(file_path, nrows=0).columns)

    def load_trades(self, path: str = TRADES_FILE) -> pd.DataFrame:
        """
        Load a trade log CSV.

        Expected columns: currency0, currency1, fee, tick_spacing, zero_for_one,
        amount_specified, and optionally hooks, sqrt_price_limit_x96, timestamp.
        Recorded pool_id or base_fee columns are carried through the replay
        as recorded_pool_id and recorded_base_fee.

        Args:
            path: CSV path, absolute or relative to data_dir

        Returns:
            DataFrame with amounts as Python ints (empty if the file is missing)

        Raises:
            ValueError: If required columns are missing
        """
        file_path = self._resolve(path)
        if not os.path.exists(file_path):
            logger.warning(f"Trade log not found: {file_path}")
            return pd.DataFrame(columns=REQUIRED_TRADE_COLUMNS)

        header = self._read_header(file_path)
        missing = [col for col in REQUIRED_TRADE_COLUMNS if col not in header]
        if missing:
            raise ValueError(f"Trade log {file_path} is missing columns: {missing}")

        int_columns = INT_COLUMNS + [col for col in OPTIONAL_INT_COLUMNS if col in header]
        parse_dates = ['timestamp'] if 'timestamp' in header else None
        df = DataIO.load_dataframe(file_path, int_columns=int_columns, parse_dates=parse_dates)

        logger.info(f"Loaded {len(df)} trades from {file_path}")
        return df

    def load_calibration(self, path: str = CALIBRATION_FILE, keeper: Optional[str] = None) -> CalibrationStore:
        """
        Load a calibration snapshot into a store.

        Args:
            path: JSON path, absolute or relative to data_dir
            keeper: Optional keeper address for the store

        Returns:
            CalibrationStore (empty if the file is missing)
        """
        file_path = self._resolve(path)
        store = CalibrationStore.load_json(file_path, keeper=keeper)
        logger.info(f"Loaded calibration for {len(store)} pools from {file_path}")
        return store
