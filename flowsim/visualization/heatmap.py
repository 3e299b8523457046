"""
Efficiency Heatmap Visualization

This module generates 2D heatmaps of a sweep metric as a function of
window size and lost frame, one panel per protocol.
"""

import os
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

from ..config import PLOTS_DIR
from ..simulation.parameter_sweep import ParameterSweep


METRIC_LABELS = {
    'efficiency': "Efficiency (frames / sends)",
    'retransmissions': "Retransmissions",
    'frames_sent': "Data frames sent",
    'timeouts': "Timeouts",
}


class RetransmissionHeatmap:
    """
    Generates heatmaps of metric(W, lost frame) for each protocol.

    Attributes:
        results: Sweep results, one row per run
    """

    def __init__(
        self,
        results: Optional[Union[List[Dict], pd.DataFrame]] = None,
        csv_file: Optional[str] = None
    ):
        """
        Initialize heatmap generator.

        Args:
            results: Result rows or DataFrame
            csv_file: Path to CSV file with results
        """
        if results is not None:
            self.results = pd.DataFrame(results)
        elif csv_file:
            self.results = ParameterSweep.load_results(csv_file)
        else:
            self.results = pd.DataFrame()

        if self.results.empty:
            self.protocols, self.window_sizes, self.loss_frames = [], [], []
        else:
            self.protocols = list(dict.fromkeys(self.results['protocol']))
            self.window_sizes = sorted(self.results['window_size'].unique().tolist())
            self.loss_frames = sorted(self.results['loss_frame'].unique().tolist())

    def create_matrix(self, protocol: str, metric: str = 'efficiency') -> np.ndarray:
        """Matrix of mean metric values, rows = W, columns = lost frame."""
        matrix, _, _ = ParameterSweep.create_metric_matrix(
            self.results, protocol, metric, self.window_sizes, self.loss_frames
        )
        return matrix

    def plot(
        self,
        output_file: Optional[str] = None,
        metric: str = 'efficiency',
        title: Optional[str] = None,
        cmap: str = "viridis",
        show_values: bool = True
    ) -> str:
        """
        Generate and save heatmaps.

        Args:
            output_file: Output file path (auto-generated if None)
            metric: Result column to plot
            title: Figure title
            cmap: Colormap name
            show_values: Show values in cells

        Returns:
            Path to saved figure
        """
        if self.results.empty:
            raise ValueError("No results to plot")

        n = len(self.protocols)
        fig, axes = plt.subplots(1, n, figsize=(5 * n + 1, 5), squeeze=False)

        # Shared color scale across panels
        matrices = [self.create_matrix(p, metric) for p in self.protocols]
        vmin = np.nanmin([np.nanmin(m) for m in matrices])
        vmax = np.nanmax([np.nanmax(m) for m in matrices])

        loss_labels = [str(l) if l else "none" for l in self.loss_frames]

        for ax, protocol, matrix in zip(axes[0], self.protocols, matrices):
            # Larger W at top
            sns.heatmap(
                np.flipud(matrix),
                annot=show_values,
                fmt='.2f',
                cmap=cmap,
                vmin=vmin,
                vmax=vmax,
                xticklabels=loss_labels,
                yticklabels=list(reversed(self.window_sizes)),
                ax=ax,
                cbar_kws={'label': METRIC_LABELS.get(metric, metric)}
            )
            ax.set_xlabel('Lost frame', fontsize=11)
            ax.set_ylabel('Window Size', fontsize=11)
            ax.set_title(protocol.replace('_', ' ').title(), fontsize=12)

        fig.suptitle(
            title or f"{METRIC_LABELS.get(metric, metric)} vs Window Size and Lost Frame",
            fontsize=14, fontweight='bold'
        )
        plt.tight_layout()

        if output_file is None:
            os.makedirs(PLOTS_DIR, exist_ok=True)
            output_file = os.path.join(PLOTS_DIR, f'{metric}_heatmap.png')

        plt.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

        print(f"Heatmap saved to: {output_file}")
        return output_file


def plot_sweep(
    results: Union[List[Dict], pd.DataFrame],
    output_dir: str = PLOTS_DIR,
    metrics: Tuple[str, ...] = ('efficiency', 'retransmissions')
) -> List[str]:
    """Write one heatmap per metric into output_dir."""
    os.makedirs(output_dir, exist_ok=True)
    heatmap = RetransmissionHeatmap(results=results)
    return [
        heatmap.plot(os.path.join(output_dir, f'{metric}_heatmap.png'), metric=metric)
        for metric in metrics
    ]


if __name__ == "__main__":
    print("=" * 60)
    print("HEATMAP GENERATOR TEST")
    print("=" * 60)

    from ..simulation.runner import BatchRunner

    runner = BatchRunner(sweep=ParameterSweep(window_sizes=[1, 2, 4], loss_frames=[0, 2, 5],
                                              frame_count=6))
    runner.run_sequential()

    output = RetransmissionHeatmap(results=runner.results).plot(title="Test Efficiency Heatmap")
    print(f"Test complete: {output}")
