import os
import logging
from typing import Optional
from dotenv import load_dotenv

from .errors import ConfigError

# Load environment variables from .env file
load_dotenv()


def get_env_int(key: str, default: Optional[int] = None, required: bool = False) -> int:
    """
    Get environment variable as integer.

    Args:
        key: Environment variable name
        default: Default value if not found
        required: Whether the variable is required

    Returns:
        Integer value of the variable

    Raises:
        ConfigError: If the variable is missing (when required) or not an integer
    """
    value = os.getenv(key)
    if value is None:
        if required or default is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"Environment variable '{key}' must be an integer, got: {value}")


# Project root directory
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))

# Data Path Settings
DATA_DIR = os.getenv("DATA_DIR", os.path.join(PROJECT_ROOT, "data"))
RESULTS_DIR = os.getenv("RESULTS_DIR", os.path.join(PROJECT_ROOT, "results"))
ANALYSIS_DIR = os.path.join(RESULTS_DIR, "analysis")

# Data File Name Settings
TRADES_FILE = "trades.csv"
CALIBRATION_FILE = "calibration.json"
REPLAY_RESULTS_FILE = "replayed_decisions.csv"
REPORT_FILE = "dynamic_fee_report.md"

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Fee unit system: hundredths of a basis point (1_000_000 == 100%)
FEE_UNITS_PER_BP: int = 100

# Piecewise policy settings
IMPACT_THRESHOLD_BPS: int = get_env_int("IMPACT_THRESHOLD_BPS", 50)
DEVIATION_THRESHOLD_BPS: int = get_env_int("DEVIATION_THRESHOLD_BPS", 50)
SLOPE_PER_TEN_BPS_OVER: int = get_env_int("SLOPE_PER_TEN_BPS_OVER", 1)
MAX_FEE: int = get_env_int("MAX_FEE", 20000)  # 2.00%

# Multiplicative policy settings
MULTIPLICATIVE_IMPACT_THRESHOLD_BPS: int = get_env_int("MULTIPLICATIVE_IMPACT_THRESHOLD_BPS", 100)
FEE_MULTIPLIER: int = get_env_int("FEE_MULTIPLIER", 4)

# Base fee used for pools whose fee tier carries the dynamic-fee flag
DEFAULT_BASE_FEE: int = get_env_int("DEFAULT_BASE_FEE", 3000)  # 0.30%
DEFAULT_POLICY: str = os.getenv("DEFAULT_POLICY", "piecewise")

# Plot Settings
PLOT_DPI: int = 300
PLOT_FIGSIZE: tuple = (12, 8)
PLOT_STYLE: str = "seaborn-v0_8-darkgrid"


def setup_logging(level: Optional[str] = None) -> None:
    """Setup logging configuration."""
    level_name = (level or LOG_LEVEL).upper()
    if not hasattr(logging, level_name):
        raise ConfigError(f"Invalid log level: {level_name}")
    logging.basicConfig(
        level=getattr(logging, level_name),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
