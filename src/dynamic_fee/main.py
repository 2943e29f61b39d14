import argparse
import time
import os
from typing import Optional, List, Dict, Any

from .analysis.analyzer import DataProcessor, DecisionAnalyzer
from .analysis.visualizer import DecisionVisualizer
from .core.engine import DynamicFeeEngine
from .core.models import build_fee_model
from .core.pool import ZERO_ADDRESS
from .loader import TradeLoader
from .config import (
    ANALYSIS_DIR,
    CALIBRATION_FILE,
    DATA_DIR,
    DEFAULT_BASE_FEE,
    DEFAULT_POLICY,
    TRADES_FILE,
    setup_logging
)

# Placeholder dispatcher identity for offline replay
REPLAY_POOL_MANAGER = "0x000000000000000000000000000000000000dead"


def main(trades: str = TRADES_FILE,
         calibration: str = CALIBRATION_FILE,
         policy: str = DEFAULT_POLICY,
         output_dir: Optional[str] = None,
         engine_address: str = ZERO_ADDRESS,
         base_fee: int = DEFAULT_BASE_FEE,
         data_dir: str = DATA_DIR,
         plots: bool = True) -> Dict[str, Any]:
    """
    Replay a trade log through the dynamic fee engine and report the results.

    Args:
        trades: Trade log CSV
        calibration: Calibration snapshot JSON
        policy: Fee policy name ("piecewise" or "multiplicative")
        output_dir: Directory for results (defaults to ANALYSIS_DIR/<policy>)
        engine_address: Engine address used for trades without a hooks column
        base_fee: Base fee for pools with a dynamic fee tier
        data_dir: Directory used to resolve relative input paths
        plots: Whether to generate figures

    Returns:
        Analysis results (empty if there was nothing to replay)
    """
    start_time = time.time()
    output_dir = output_dir or os.path.join(ANALYSIS_DIR, policy)

    print(f"===== Dynamic Fee Replay ({policy}) =====")

    print("\nStep 1: Loading trades and calibration...")
    loader = TradeLoader(data_dir=data_dir)
    trades_df = loader.load_trades(trades)
    store = loader.load_calibration(calibration)
    if trades_df.empty:
        print("No trades found. Aborting replay.")
        return {}
    print(f"Loaded {len(trades_df)} trades, calibration for {len(store)} pools")

    print("\nStep 2: Replaying trades through the engine...")
    engine = DynamicFeeEngine(
        pool_manager=REPLAY_POOL_MANAGER,
        store=store,
        model=build_fee_model(policy),
        address=engine_address,
        default_base_fee=base_fee
    )
    analyzer = DecisionAnalyzer(DataProcessor.prepare_data(trades_df), engine, output_dir=output_dir)
    analysis_results = analyzer.analyze()
    if not analysis_results:
        print("Replay produced no results. Aborting.")
        return {}

    print("\nStep 3: Calculating expected revenue...")
    revenue_results = analyzer.calculate_expected_revenue()

    print("\nStep 4: Generating summary report...")
    analyzer.generate_summary_report(revenue_results)

    if plots:
        print("\nStep 5: Generating visualizations...")
        visualizer = DecisionVisualizer(analyzer.result_df, analysis_results, output_dir)
        visualizer.plot_all()

    print(f"\nReplay complete. Total time: {time.time() - start_time:.2f} seconds")
    print(f"Results are saved in the '{output_dir}' directory.")
    return analysis_results


def cli(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Replay a trade log through the dynamic fee engine."
    )
    parser.add_argument("--trades", type=str, default=TRADES_FILE, help="Trade log CSV file.")
    parser.add_argument("--calibration", type=str, default=CALIBRATION_FILE, help="Calibration snapshot JSON file.")
    parser.add_argument(
        "--policy",
        type=str,
        default=DEFAULT_POLICY,
        choices=["piecewise", "multiplicative"],
        help="Fee policy to apply.",
    )
    parser.add_argument("--output-dir", type=str, default=None, help="Directory for results.")
    parser.add_argument("--engine-address", type=str, default=ZERO_ADDRESS, help="Engine address for pool keys.")
    parser.add_argument("--base-fee", type=int, default=DEFAULT_BASE_FEE, help="Base fee for dynamic-fee pools.")
    parser.add_argument("--data-dir", type=str, default=DATA_DIR, help="Directory for relative input paths.")
    parser.add_argument("--no-plots", action="store_true", help="Skip figure generation.")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default from LOG_LEVEL).")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    main(
        trades=args.trades,
        calibration=args.calibration,
        policy=args.policy,
        output_dir=args.output_dir,
        engine_address=args.engine_address,
        base_fee=args.base_fee,
        data_dir=args.data_dir,
        plots=not args.no_plots
    )


if __name__ == "__main__":
    cli()
