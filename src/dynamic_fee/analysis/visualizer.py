import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from typing import Dict, Any, List

from ..core.utils import Visualizer
from ..config import PLOT_DPI, PLOT_FIGSIZE, PLOT_STYLE


class DecisionVisualizer:
    """
    Generates visualizations for replayed fee decisions.
    """

    def __init__(self, result_df: pd.DataFrame, analysis_results: Dict[str, Any], output_dir: str):
        """
        Initialize visualizer.

        Args:
            result_df: Replay output from DecisionAnalyzer
            analysis_results: Analysis results from DecisionAnalyzer.analyze
            output_dir: Directory to save visualizations
        """
        self.result_df = result_df
        self.analysis_results = analysis_results
        self.output_dir = output_dir

        Visualizer.set_plot_style(PLOT_STYLE, PLOT_FIGSIZE, PLOT_DPI)

    def plot_impact_vs_fee(self) -> str:
        """
        Scatter plot of estimated impact against the effective fee.
        """
        df = self.result_df
        fig = plt.figure(figsize=(10, 7))
        ax = fig.add_subplot(1, 1, 1)
        sns.scatterplot(
            data=df.assign(impact_bps=df['impact_bps'].astype(float), effective_fee=df['effective_fee'].astype(float)),
            x='impact_bps', y='effective_fee', hue='override_active', style='direction',
            alpha=0.6, s=20, ax=ax
        )

        model_params = self.analysis_results.get('stats', {}).get('model_params', {})
        if 'impact_threshold_bps' in model_params:
            ax.axvline(x=model_params['impact_threshold_bps'], color='r', linestyle='--', label='Impact threshold')
        if 'max_fee' in model_params:
            ax.axhline(y=model_params['max_fee'], color='k', linestyle=':', label='Fee cap')

        ax.set_xlabel('Estimated Impact (bps)')
        ax.set_ylabel('Effective Fee (fee units)')
        ax.set_title('Impact vs Effective Fee')
        ax.legend()
        ax.grid(True, alpha=0.3)

        return Visualizer.save_figure(fig, 'impact_vs_fee.png', PLOT_DPI, self.output_dir)

    def plot_deviation_distribution(self) -> str:
        """
        Histogram of away-deviation for trades with a nonzero deviation.
        """
        away = self.result_df[self.result_df['deviation_away_bps'] > 0]
        fig = plt.figure(figsize=(10, 6))
        ax = fig.add_subplot(1, 1, 1)
        if not away.empty:
            sns.histplot(away['deviation_away_bps'].astype(float), bins=50, ax=ax)

        threshold = self.analysis_results.get('stats', {}).get('model_params', {}).get('deviation_threshold_bps')
        if threshold is not None:
            ax.axvline(x=threshold, color='r', linestyle='--', label='Deviation threshold')
            ax.legend()

        ax.set_xlabel('Away-Deviation (bps)')
        ax.set_ylabel('Frequency')
        ax.set_title('Deviation Away From Reference')
        ax.grid(True, alpha=0.3)

        return Visualizer.save_figure(fig, 'deviation_distribution.png', PLOT_DPI, self.output_dir)

    def plot_override_rate(self) -> str:
        """
        Daily override rate and average effective fee.
        """
        daily_stats = self.analysis_results['daily_stats']

        fig = plt.figure(figsize=(12, 6))
        ax1 = fig.add_subplot(1, 1, 1)
        ax1.plot(daily_stats['timestamp'], daily_stats['override_rate_percent'], 'b-', label='Override rate (%)')
        ax1.set_xlabel('Date')
        ax1.set_ylabel('Override Rate (%)')

        ax2 = ax1.twinx()
        ax2.plot(daily_stats['timestamp'], daily_stats['effective_fee_mean'], 'g--', label='Avg effective fee')
        ax2.set_ylabel('Average Effective Fee (fee units)')

        ax1.set_title('Daily Override Rate')
        ax1.grid(True, alpha=0.3)
        fig.autofmt_xdate()

        return Visualizer.save_figure(fig, 'override_rate_time_series.png', PLOT_DPI, self.output_dir)

    def plot_all(self) -> List[str]:
        """
        Generate all visualizations.

        Returns:
            Paths of the saved figures
        """
        if self.result_df is None or self.result_df.empty:
            return []

        paths = [
            self.plot_impact_vs_fee(),
            self.plot_deviation_distribution()
        ]
        daily_stats = self.analysis_results.get('daily_stats')
        if daily_stats is not None and not daily_stats.empty:
            paths.append(self.plot_override_rate())
        return paths
