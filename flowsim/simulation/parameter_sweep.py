"""
Parameter Sweep Configuration

This module defines the parameter space for comparing the protocols
and provides utilities for analysing sweep results.
"""

from typing import List, Dict, Tuple, Optional
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..config import PROTOCOLS, WINDOW_SIZES, LOSS_FRAMES, SWEEP_FRAME_COUNT
from ..config import calculate_gbn_worst_case_resend, calculate_window_cycles


@dataclass
class ParameterPoint:
    """A single point in the parameter space."""
    protocol: str
    window_size: int
    loss_frame: int

    @property
    def key(self) -> Tuple[str, int, int]:
        return (self.protocol, self.window_size, self.loss_frame)


class ParameterSweep:
    """
    Parameter sweep configuration and analysis.

    Defines the parameter space:
    - protocol in {stop_and_wait, sliding_window, go_back_n, selective_repeat}
    - W in {1, 2, 4, 8, 16}
    - lost frame in {0 (none), 1, 4, 8, 12, 16}
    - Total = 4 x 5 x 6 = 120 simulations

    The engines are deterministic, so a single run per point suffices.
    """

    def __init__(
        self,
        protocols: List[str] = None,
        window_sizes: List[int] = None,
        loss_frames: List[int] = None,
        frame_count: int = SWEEP_FRAME_COUNT
    ):
        """
        Initialize parameter sweep.

        Args:
            protocols: Protocol identifiers
            window_sizes: List of window sizes
            loss_frames: List of lost frames (0 = lossless)
            frame_count: Frames per run
        """
        self.protocols = protocols or PROTOCOLS
        self.window_sizes = window_sizes or WINDOW_SIZES
        self.loss_frames = loss_frames if loss_frames is not None else LOSS_FRAMES
        self.frame_count = frame_count

    @property
    def total_simulations(self) -> int:
        """Total number of simulation runs."""
        return len(self.protocols) * len(self.window_sizes) * len(self.loss_frames)

    def get_all_points(self) -> List[ParameterPoint]:
        """Get all parameter points."""
        points = []
        for p in self.protocols:
            for w in self.window_sizes:
                for l in self.loss_frames:
                    points.append(ParameterPoint(p, w, l))
        return points

    def analyze_tradeoffs(self) -> Dict:
        """
        Document the theoretical trade-offs for analysis.

        Returns:
            Dictionary with trade-off documentation
        """
        return {
            'window_size_tradeoff': {
                'description': (
                    "Large windows keep more frames in flight, but under "
                    "Go-Back-N one loss costs up to a whole window of resends"
                ),
                'large_window_pros': [
                    "Fewer send cycles per transfer",
                    "Sender rarely idles waiting for ACKs"
                ],
                'large_window_cons': [
                    "Go-Back-N resends every frame after a loss",
                    "Selective Repeat receiver must buffer up to W frames"
                ],
                'analysis': (
                    "Stop-and-Wait needs one cycle per frame. Go-Back-N "
                    "amortizes ACKs over W frames but discards everything "
                    "behind a gap. Selective Repeat keeps the frames behind a "
                    "gap and resends only the missing one."
                )
            },
            'loss_position_tradeoff': {
                'description': (
                    "The later a loss falls in a window, the fewer frames "
                    "Go-Back-N has to send again"
                ),
                'analysis': (
                    "A loss at the start of a window invalidates the rest of "
                    "that window for Go-Back-N; a loss at its end costs only "
                    "the lost frame itself."
                )
            }
        }

    def expected_cycles(self, window_size: int) -> int:
        """Send cycles a lossless window-at-a-time transfer needs."""
        return calculate_window_cycles(self.frame_count, window_size)

    def gbn_resend_bound(self, window_size: int, loss_frame: int) -> int:
        """Upper bound on Go-Back-N extra frames for one loss."""
        return calculate_gbn_worst_case_resend(self.frame_count, window_size, loss_frame)

    @staticmethod
    def load_results(filepath: str) -> pd.DataFrame:
        """
        Load results from CSV file.

        Args:
            filepath: Path to CSV file

        Returns:
            DataFrame with one row per run
        """
        return pd.read_csv(filepath)

    @staticmethod
    def create_metric_matrix(
        results: pd.DataFrame,
        protocol: str,
        metric: str = 'efficiency',
        window_sizes: Optional[List[int]] = None,
        loss_frames: Optional[List[int]] = None
    ) -> Tuple[np.ndarray, List[int], List[int]]:
        """
        Create a (window size x loss frame) matrix of mean metric values.

        Args:
            results: DataFrame of sweep results
            protocol: Protocol to extract
            metric: Column to average
            window_sizes: Row labels (default: values present)
            loss_frames: Column labels (default: values present)

        Returns:
            (matrix, window_sizes, loss_frames); missing cells are NaN
        """
        df = results[results['protocol'] == protocol]
        if 'error' in df.columns:
            df = df[df['error'].isna()]

        window_sizes = window_sizes or sorted(df['window_size'].unique().tolist())
        loss_frames = loss_frames or sorted(df['loss_frame'].unique().tolist())

        means = df.groupby(['window_size', 'loss_frame'])[metric].mean()

        matrix = np.full((len(window_sizes), len(loss_frames)), np.nan)
        for i, w in enumerate(window_sizes):
            for j, l in enumerate(loss_frames):
                if (w, l) in means.index:
                    matrix[i, j] = means.loc[(w, l)]

        return matrix, window_sizes, loss_frames


if __name__ == "__main__":
    print("=" * 60)
    print("PARAMETER SWEEP CONFIGURATION")
    print("=" * 60)

    sweep = ParameterSweep()

    print(f"\nParameter Space:")
    print(f"  Protocols: {sweep.protocols}")
    print(f"  Window Sizes (W): {sweep.window_sizes}")
    print(f"  Loss Frames: {sweep.loss_frames}")
    print(f"  Frames per run: {sweep.frame_count}")
    print(f"  Total simulations: {sweep.total_simulations}")

    print("\n" + "=" * 60)
    print("TRADE-OFF ANALYSIS")
    print("=" * 60)

    for key, analysis in sweep.analyze_tradeoffs().items():
        print(f"\n{key.upper()}:")
        print(f"  {analysis['description']}")
        for pro in analysis.get('large_window_pros', []):
            print(f"    + {pro}")
        for con in analysis.get('large_window_cons', []):
            print(f"    - {con}")
        print(f"\n  Analysis: {analysis['analysis']}")

    print("\n" + "=" * 60)
    print("THEORETICAL CALCULATIONS")
    print("=" * 60)

    for w in sweep.window_sizes:
        bounds = [sweep.gbn_resend_bound(w, l) for l in sweep.loss_frames]
        print(f"  W={w:2d}: {sweep.expected_cycles(w)} cycles, GBN resend bounds {bounds}")
