"""
Batch Runner for Parameter Sweep Simulations

This module implements the batch runner that executes every
(protocol, window size, loss frame) combination of a ParameterSweep.
"""

import os
import csv
import time
from typing import Optional, Callable, List, Dict
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed
import multiprocessing

import pandas as pd
from tqdm import tqdm

from ..config import RESULTS_CSV, SWEEP_FRAME_COUNT
from ..utils.logger import LogLevel, SimulationLogger
from .parameter_sweep import ParameterSweep
from .simulator import Simulator, SimulatorConfig


@dataclass
class RunConfig:
    """Configuration for a single simulation run."""
    protocol: str
    window_size: int
    loss_frame: int
    frame_count: int
    run_id: int = 0


def run_single_simulation(run_config: RunConfig) -> Dict:
    """
    Run a single simulation with given configuration.

    This function is designed to be called in a separate process.

    Args:
        run_config: Configuration for this run

    Returns:
        Dictionary with results
    """
    try:
        config = SimulatorConfig(
            protocol=run_config.protocol,
            frame_count=run_config.frame_count,
            window_size=run_config.window_size,
            loss_frame=run_config.loss_frame,
            log_level=LogLevel.ERROR  # Minimal logging for batch runs
        )

        logger = SimulationLogger(name=run_config.protocol, level=LogLevel.ERROR)
        result = Simulator(config, logger=logger).run()
        metrics = result.metrics

        return {
            'protocol': run_config.protocol,
            'window_size': run_config.window_size,
            'loss_frame': run_config.loss_frame,
            'frame_count': run_config.frame_count,
            'run_id': run_config.run_id,
            'frames_sent': metrics['frames_sent'],
            'retransmissions': metrics['retransmissions'],
            'retransmission_rate': metrics['retransmission_rate'],
            'frames_lost': metrics['frames_lost'],
            'frames_discarded': metrics['frames_discarded'],
            'frames_buffered': metrics['frames_buffered'],
            'acks_sent': metrics['acks_sent'],
            'timeouts': metrics['timeouts'],
            'iterations': result.iterations,
            'events': len(result.events),
            'efficiency': metrics['efficiency'],
            'complete': result.complete,
            'error': None
        }

    except Exception as e:
        return {
            'protocol': run_config.protocol,
            'window_size': run_config.window_size,
            'loss_frame': run_config.loss_frame,
            'frame_count': run_config.frame_count,
            'run_id': run_config.run_id,
            'efficiency': 0.0,
            'complete': False,
            'error': str(e)
        }


class BatchRunner:
    """
    Batch Runner for parameter sweep simulations.

    Executes every point of a ParameterSweep once.

    Attributes:
        sweep: Parameter space to cover
        output_file: Default CSV destination
    """

    def __init__(
        self,
        sweep: Optional[ParameterSweep] = None,
        output_file: str = RESULTS_CSV,
        on_progress: Optional[Callable[[int, int, dict], None]] = None,
        show_progress: bool = True
    ):
        """
        Initialize batch runner.

        Args:
            sweep: Parameter space (default grid from config)
            output_file: Path to output CSV file
            on_progress: Callback for progress updates
            show_progress: Show a tqdm progress bar
        """
        self.sweep = sweep or ParameterSweep(frame_count=SWEEP_FRAME_COUNT)
        self.output_file = output_file
        self.on_progress = on_progress
        self.show_progress = show_progress

        # Results storage
        self.results: List[Dict] = []

        # Progress tracking
        self.total_runs = self.sweep.total_simulations
        self.completed_runs = 0
        self.start_time = 0.0

    def _generate_run_configs(self) -> List[RunConfig]:
        """Generate all run configurations."""
        return [
            RunConfig(
                protocol=point.protocol,
                window_size=point.window_size,
                loss_frame=point.loss_frame,
                frame_count=self.sweep.frame_count,
                run_id=run_id
            )
            for run_id, point in enumerate(self.sweep.get_all_points())
        ]

    def _record(self, result: Dict):
        self.results.append(result)
        self.completed_runs += 1
        if self.on_progress:
            self.on_progress(self.completed_runs, self.total_runs, result)

    def run_sequential(self) -> List[Dict]:
        """
        Run all simulations sequentially.

        Returns:
            List of result dictionaries
        """
        configs = self._generate_run_configs()
        self.results = []
        self.completed_runs = 0
        self.start_time = time.time()

        for config in tqdm(configs, desc="Simulations", disable=not self.show_progress):
            self._record(run_single_simulation(config))

        total_time = time.time() - self.start_time
        if self.show_progress:
            print(f"Completed {self.total_runs} simulations in {total_time:.1f}s")

        return self.results

    def run_parallel(self, max_workers: Optional[int] = None) -> List[Dict]:
        """
        Run simulations in parallel using multiprocessing.

        Results are sorted back into grid order afterwards.

        Args:
            max_workers: Number of parallel workers (default: CPU count)

        Returns:
            List of result dictionaries
        """
        if max_workers is None:
            max_workers = multiprocessing.cpu_count()

        configs = self._generate_run_configs()
        self.results = []
        self.completed_runs = 0
        self.start_time = time.time()

        if self.show_progress:
            print(f"Running {self.total_runs} simulations with {max_workers} workers...")

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(run_single_simulation, config): config
                for config in configs
            }

            for future in tqdm(as_completed(futures), total=len(futures),
                               desc="Simulations", disable=not self.show_progress):
                self._record(future.result())

        self.results.sort(key=lambda r: r['run_id'])

        total_time = time.time() - self.start_time
        if self.show_progress:
            print(f"Completed {self.total_runs} simulations in {total_time:.1f}s")

        return self.results

    def save_results(self, filepath: Optional[str] = None) -> Optional[str]:
        """
        Save results to CSV file.

        Args:
            filepath: Output file path (default: self.output_file)

        Returns:
            Path written, or None if there was nothing to save
        """
        filepath = filepath or self.output_file

        if not self.results:
            print("No results to save!")
            return None

        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # Union of keys; error rows carry fewer columns
        fieldnames = list(self.results[0].keys())
        for result in self.results[1:]:
            fieldnames.extend(k for k in result if k not in fieldnames)

        with open(filepath, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(self.results)

        print(f"Results saved to: {filepath}")
        return filepath

    def to_dataframe(self) -> pd.DataFrame:
        """Results as a DataFrame, one row per run."""
        return pd.DataFrame(self.results)

    def get_aggregated_results(self) -> pd.DataFrame:
        """
        Get aggregated results by (protocol, W).

        Failed runs are excluded.

        Returns:
            DataFrame with mean/min/max efficiency and mean counts
        """
        df = self.to_dataframe()
        if df.empty:
            return df
        df = df[df['error'].isna()]
        if df.empty:
            return df

        return (
            df.groupby(['protocol', 'window_size'])
            .agg(
                efficiency_mean=('efficiency', 'mean'),
                efficiency_min=('efficiency', 'min'),
                efficiency_max=('efficiency', 'max'),
                frames_sent_mean=('frames_sent', 'mean'),
                retx_mean=('retransmissions', 'mean'),
                timeouts_mean=('timeouts', 'mean'),
                runs=('efficiency', 'size')
            )
            .reset_index()
        )

    def get_best_configuration(self) -> Dict:
        """
        Find the (protocol, W) pair with the highest mean efficiency.

        Ties go to the smaller window.

        Returns:
            Dictionary with best configuration info
        """
        aggregated = self.get_aggregated_results()

        if aggregated.empty:
            return {'error': 'No results available'}

        ranked = aggregated.sort_values(
            ['efficiency_mean', 'window_size'], ascending=[False, True]
        )
        best = ranked.iloc[0]

        return {
            'protocol': best['protocol'],
            'window_size': int(best['window_size']),
            'mean_efficiency': float(best['efficiency_mean']),
            'mean_retransmissions': float(best['retx_mean']),
            'mean_timeouts': float(best['timeouts_mean'])
        }


if __name__ == "__main__":
    print("=" * 60)
    print("BATCH RUNNER TEST")
    print("=" * 60)

    runner = BatchRunner(
        sweep=ParameterSweep(window_sizes=[2, 4], loss_frames=[0, 3], frame_count=8),
    )

    print(f"\nTotal runs: {runner.total_runs}")
    runner.run_sequential()

    print("\nAggregated results:")
    print(runner.get_aggregated_results().to_string(index=False))

    best = runner.get_best_configuration()
    print(f"\nBest configuration: {best['protocol']} W={best['window_size']} "
          f"(efficiency {best['mean_efficiency']*100:.1f}%)")
