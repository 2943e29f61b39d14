import os
import logging
import pandas as pd
import numpy as np
from typing import Dict, Any, Optional
from tqdm import tqdm

from ..core.engine import DynamicFeeEngine
from ..core.pool import MAX_LP_FEE, PoolKey, SwapParams
from ..core.utils import DataIO
from ..config import ANALYSIS_DIR, REPLAY_RESULTS_FILE, REPORT_FILE

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {'true', '1', 'yes', 't', 'y'}
_FALSE_STRINGS = {'false', '0', 'no', 'f', 'n'}

DECISION_COLUMNS = ['pool_id', 'impact_bps', 'deviation_away_bps', 'base_fee',
                    'override_active', 'override_fee', 'effective_fee']


def _to_bool(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean")


class DataProcessor:
    """
    Processes trade logs for replay.
    """

    @staticmethod
    def prepare_data(df: pd.DataFrame) -> pd.DataFrame:
        """
        Normalise a trade log.

        Args:
            df: Input DataFrame from TradeLoader.load_trades

        Returns:
            Processed DataFrame with boolean zero_for_one, int amounts and
            helper columns direction and is_exact_input
        """
        processed_df = df.copy()
        if processed_df.empty:
            return processed_df

        processed_df['zero_for_one'] = processed_df['zero_for_one'].apply(_to_bool)
        processed_df['amount_specified'] = processed_df['amount_specified'].apply(int).astype(object)
        processed_df['fee'] = processed_df['fee'].astype(int)
        processed_df['tick_spacing'] = processed_df['tick_spacing'].astype(int)

        if 'sqrt_price_limit_x96' not in processed_df.columns:
            processed_df['sqrt_price_limit_x96'] = 0

        processed_df['direction'] = np.where(processed_df['zero_for_one'], 'zero_for_one', 'one_for_zero')
        processed_df['is_exact_input'] = processed_df['amount_specified'].apply(lambda x: x < 0)

        return processed_df


class DecisionAnalyzer:
    """
    Replays trades through a fee engine and summarises the decisions.
    """

    def __init__(self, df: pd.DataFrame, engine: DynamicFeeEngine, output_dir: str = ANALYSIS_DIR):
        """
        Initialize the analyzer.

        Args:
            df: Prepared trade DataFrame
            engine: Fee engine to replay trades through
            output_dir: Output directory for analysis results
        """
        self.df = df
        self.engine = engine
        self.output_dir = output_dir
        self.result_df = None
        self.analysis_results = None

        DataIO.ensure_directory_exists(output_dir)

    def _pool_key(self, row: pd.Series) -> PoolKey:
        hooks = row.get('hooks') if 'hooks' in row.index else None
        if hooks is None or (isinstance(hooks, float) and np.isnan(hooks)):
            hooks = self.engine.address
        return PoolKey(row['currency0'], row['currency1'], int(row['fee']), int(row['tick_spacing']), hooks=hooks)

    def replay(self) -> pd.DataFrame:
        """
        Run every trade through the engine.

        Returns:
            DataFrame with pool_id, impact_bps, deviation_away_bps, base_fee,
            override_active, override_fee and effective_fee added
        """
        records = []
        caller = self.engine.pool_manager

        for _, row in tqdm(self.df.iterrows(), total=len(self.df), desc="Replaying trades"):
            key = self._pool_key(row)
            params = SwapParams(
                zero_for_one=row['zero_for_one'],
                amount_specified=int(row['amount_specified']),
                sqrt_price_limit_x96=int(row['sqrt_price_limit_x96'])
            )
            impact_bps, deviation_away_bps = self.engine.signals(key, params)
            decision = self.engine.decide(caller, key, params)
            base_fee = self.engine.base_fee_for(key)

            records.append({
                'pool_id': key.pool_id,
                'impact_bps': impact_bps,
                'deviation_away_bps': deviation_away_bps,
                'base_fee': base_fee,
                'override_active': decision.override_active,
                'override_fee': decision.fee,
                'effective_fee': decision.effective_fee(base_fee)
            })

        decisions_df = pd.DataFrame(records, index=self.df.index, columns=DECISION_COLUMNS)
        # Values recorded in the log are kept beside the replayed ones
        collisions = {col: f"recorded_{col}" for col in DECISION_COLUMNS if col in self.df.columns}
        self.result_df = pd.concat([self.df.rename(columns=collisions), decisions_df], axis=1)
        return self.result_df

    def analyze(self) -> Dict[str, Any]:
        """
        Replay trades and compute summary statistics.

        Returns:
            Dictionary with 'stats', 'pool_performance' and 'daily_stats'
        """
        result_df = self.replay() if self.result_df is None else self.result_df
        if result_df.empty:
            logger.warning("No trades to analyze")
            self.analysis_results = {}
            return self.analysis_results

        overrides = result_df[result_df['override_active']]
        stats = {
            'trade_count': len(result_df),
            'pool_count': result_df['pool_id'].nunique(),
            'exact_input_count': int(result_df['is_exact_input'].sum()),
            'override_count': len(overrides),
            'override_rate_percent': len(overrides) / len(result_df) * 100,
            'base_fee_mean': result_df['base_fee'].mean(),
            'effective_fee_mean': result_df['effective_fee'].mean(),
            'effective_fee_median': result_df['effective_fee'].median(),
            'effective_fee_max': int(result_df['effective_fee'].max()),
            'override_fee_mean': overrides['override_fee'].mean() if not overrides.empty else 0.0,
            'impact_bps_mean': result_df['impact_bps'].mean(),
            'impact_bps_max': int(result_df['impact_bps'].max()),
            'deviation_away_bps_mean': result_df['deviation_away_bps'].mean(),
            'model_params': self.engine.model.to_dict()
        }

        pool_performance = result_df.groupby('pool_id').agg(
            count=('override_active', 'size'),
            override_count=('override_active', 'sum'),
            base_fee=('base_fee', 'first'),
            effective_fee_mean=('effective_fee', 'mean'),
            impact_bps_mean=('impact_bps', 'mean'),
            deviation_away_bps_mean=('deviation_away_bps', 'mean')
        ).reset_index()
        pool_performance['override_rate_percent'] = (
            pool_performance['override_count'] / pool_performance['count'] * 100
        )

        daily_stats = pd.DataFrame()
        if 'timestamp' in result_df.columns:
            daily_stats = result_df.groupby(result_df['timestamp'].dt.date).agg(
                trade_count=('override_active', 'size'),
                override_count=('override_active', 'sum'),
                effective_fee_mean=('effective_fee', 'mean'),
                impact_bps_mean=('impact_bps', 'mean')
            ).reset_index()
            daily_stats['override_rate_percent'] = (
                daily_stats['override_count'] / daily_stats['trade_count'] * 100
            )

        DataIO.save_dataframe(result_df, REPLAY_RESULTS_FILE, self.output_dir)

        self.analysis_results = {
            'stats': stats,
            'pool_performance': pool_performance,
            'daily_stats': daily_stats
        }
        return self.analysis_results

    def calculate_expected_revenue(self) -> Dict[str, Any]:
        """
        Compare fees collected with and without the engine on exact-input trades.

        Fee amounts are computed in token-in units with integer arithmetic.

        Returns:
            Dictionary with revenue totals and per-pool breakdown
        """
        if self.result_df is None:
            logger.warning("No result data available. Run analyze first.")
            return {}

        exact_in = self.result_df[self.result_df['is_exact_input']].copy()
        if exact_in.empty:
            logger.warning("No exact-input trades. Cannot calculate revenue.")
            return {}

        amount_in = exact_in['amount_specified'].apply(lambda x: -int(x))
        exact_in['base_fee_amount'] = [a * int(f) // MAX_LP_FEE for a, f in zip(amount_in, exact_in['base_fee'])]
        exact_in['dynamic_fee_amount'] = [a * int(f) // MAX_LP_FEE for a, f in zip(amount_in, exact_in['effective_fee'])]
        exact_in['fee_amount_diff'] = [d - b for b, d in zip(exact_in['base_fee_amount'], exact_in['dynamic_fee_amount'])]

        total_base_fee = sum(exact_in['base_fee_amount'])
        total_dynamic_fee = sum(exact_in['dynamic_fee_amount'])
        revenue_change_percent = (total_dynamic_fee / total_base_fee - 1) * 100 if total_base_fee > 0 else 0.0

        pool_revenue = exact_in.groupby('pool_id').agg(
            base_fee_amount=('base_fee_amount', 'sum'),
            dynamic_fee_amount=('dynamic_fee_amount', 'sum'),
            fee_amount_diff=('fee_amount_diff', 'sum')
        ).reset_index()

        return {
            'total_base_fee': total_base_fee,
            'total_dynamic_fee': total_dynamic_fee,
            'total_fee_diff': total_dynamic_fee - total_base_fee,
            'revenue_change_percent': revenue_change_percent,
            'pool_revenue': pool_revenue
        }

    def generate_summary_report(self, revenue_results: Optional[Dict[str, Any]] = None) -> str:
        """
        Generate a markdown summary of the replay.

        Args:
            revenue_results: Output of calculate_expected_revenue

        Returns:
            Summary report as string
        """
        if not self.analysis_results:
            logger.warning("No analysis results available. Run analyze first.")
            return ""

        stats = self.analysis_results['stats']
        params = "\n".join(f"- {name}: {value}" for name, value in stats['model_params'].items())

        report = f"""
# Dynamic Fee Replay Report

## 1. Dataset Overview
- Total Trades: {stats['trade_count']}
- Number of Pools: {stats['pool_count']}
- Exact-Input Trades: {stats['exact_input_count']}

## 2. Fee Policy
{params}

## 3. Decisions
- Overrides: {stats['override_count']} ({stats['override_rate_percent']:.2f}%)
- Average Base Fee: {stats['base_fee_mean']:.1f} ({stats['base_fee_mean'] / 1e4:.4f}%)
- Average Effective Fee: {stats['effective_fee_mean']:.1f} ({stats['effective_fee_mean'] / 1e4:.4f}%)
- Median Effective Fee: {stats['effective_fee_median']:.1f}
- Maximum Effective Fee: {stats['effective_fee_max']}
- Average Override Fee: {stats['override_fee_mean']:.1f}

## 4. Signals
- Average Impact: {stats['impact_bps_mean']:.2f} bps (max {stats['impact_bps_max']} bps)
- Average Away-Deviation: {stats['deviation_away_bps_mean']:.2f} bps
"""

        if revenue_results:
            report += f"""
## 5. Revenue Analysis (exact-input trades, token-in units)
- Total Base Fee: {revenue_results['total_base_fee']}
- Total Dynamic Fee: {revenue_results['total_dynamic_fee']}
- Total Fee Difference: {revenue_results['total_fee_diff']}
- Revenue Change Percentage: {revenue_results['revenue_change_percent']:.2f}%
"""

        pool_performance = self.analysis_results['pool_performance']
        if not pool_performance.empty:
            report += "\n## 6. Top Pools by Trade Count\n"
            for _, row in pool_performance.nlargest(5, 'count').iterrows():
                report += f"""
### {row['pool_id']}
- Trade Count: {row['count']}
- Override Rate: {row['override_rate_percent']:.2f}%
- Base Fee: {row['base_fee']}
- Average Effective Fee: {row['effective_fee_mean']:.1f}
- Average Impact: {row['impact_bps_mean']:.2f} bps
"""

        report_path = os.path.join(self.output_dir, REPORT_FILE)
        with open(report_path, 'w', encoding='utf-8') as f:
            f.write(report)
        logger.info(f"Report saved to {report_path}")

        return report
