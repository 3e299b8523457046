#!/usr/bin/env python3
"""
Flow Control Protocol Simulator - Main Entry Point

This is the main CLI interface for the protocol simulator.
It provides options for:
- Single protocol runs with a narrated trace
- Side-by-side comparison of all four protocols
- Parameter sweep over protocols, window sizes and lost frames
- Visualization generation

Usage:
    flowsim --single --protocol go_back_n --frames 5 --window 2 --loss 3
    flowsim --compare --frames 10 --window 4 --loss 2
    flowsim --sweep --parallel
    flowsim --visualize --csv results.csv
"""

import argparse
import os
import sys
import time

from . import config as cfg
from .config import PLOTS_DIR, RESULTS_CSV
from .exceptions import InvalidConfiguration
from .protocols import ProtocolKind
from .simulation.simulator import Simulator, SimulatorConfig
from .utils.logger import LogLevel, SimulationLogger
from .utils.render import format_window, render_trace


def _parse_protocol(value) -> ProtocolKind:
    try:
        return ProtocolKind.parse(value)
    except ValueError:
        raise InvalidConfiguration("protocol", value, "unknown protocol") from None


def _loss_argument(args):
    if not args.loss:
        return 0
    return args.loss[0] if len(args.loss) == 1 else list(args.loss)


def _run(protocol, args, on_step=None):
    config = SimulatorConfig(
        protocol=protocol,
        frame_count=args.frames,
        window_size=args.window,
        loss_frame=_loss_argument(args),
        log_level=LogLevel.DEBUG if args.verbose else cfg.DEFAULT_LOG_LEVEL
    )
    logger = SimulationLogger(name=config.kind.label, level=config.log_level)
    return Simulator(config, logger=logger, on_step=on_step).run()


def _window_line(iteration, state):
    """Sender window after an iteration, or None once it is empty."""
    window = state.get('sender')
    if not window or window['base'] > window['upper']:
        return None
    text = format_window(window['base'], window['upper'], window.get('acked', ()))
    return f"after iteration {iteration:3d}: {text}"


def run_single_simulation(args):
    """Run one protocol and print its narrated trace."""
    kind = _parse_protocol(args.protocol)

    print("=" * 60)
    print(f"{kind.label.upper()} SIMULATOR")
    print("=" * 60)
    print(f"\nConfiguration:")
    print(f"  Frames: {args.frames}")
    print(f"  Window size: {args.window}")
    print(f"  Lost frames: {args.loss or 'none'}")

    windows = []

    def record_window(iteration, state):
        line = _window_line(iteration, state)
        if line:
            windows.append(line)

    start_time = time.time()
    result = _run(kind, args, on_step=record_window)
    elapsed = time.time() - start_time

    print("\nTrace:")
    for line in render_trace(result.events, numbered=True):
        print(f"  {line}")

    print("\nCurrent Window:")
    for line in windows or ["(empty)"]:
        print(f"  {line}")

    metrics = result.metrics
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    print(f"  Complete: {result.complete}")
    print(f"  Iterations: {result.iterations}")
    print(f"  Real Time: {elapsed * 1000:.2f} ms")
    print(f"\nFrame Statistics:")
    print(f"  Frames Sent: {metrics['frames_sent']}")
    print(f"  Retransmissions: {metrics['retransmissions']}")
    print(f"  Frames Lost: {metrics['frames_lost']}")
    print(f"  Frames Discarded: {metrics['frames_discarded']}")
    print(f"  Frames Buffered: {metrics['frames_buffered']}")
    print(f"  Timeouts: {metrics['timeouts']}")
    print(f"  Efficiency: {metrics['efficiency'] * 100:.2f}%")

    if args.timeline:
        from .visualization.timeline import TimelinePlot
        output = args.output or os.path.join(PLOTS_DIR, f"timeline_{kind.value}.png")
        directory = os.path.dirname(output)
        if directory:
            os.makedirs(directory, exist_ok=True)
        TimelinePlot(result.events, title=kind.label).plot(output)

    return result


def compare_protocols(args):
    """Run all four protocols on the same configuration."""
    print("=" * 60)
    print("PROTOCOL COMPARISON")
    print("=" * 60)
    print(f"  Frames={args.frames}, Window={args.window}, Lost={args.loss or 'none'}\n")

    header = f"{'Protocol':<18}{'Sent':>6}{'Retx':>6}{'Lost':>6}{'Disc':>6}{'Timeouts':>10}{'Eff':>9}"
    print(header)
    print("-" * len(header))

    results = {}
    for kind in ProtocolKind:
        result = _run(kind, args)
        results[kind] = result
        m = result.metrics
        print(f"{kind.label:<18}{m['frames_sent']:>6}{m['retransmissions']:>6}"
              f"{m['frames_lost']:>6}{m['frames_discarded']:>6}{m['timeouts']:>10}"
              f"{m['efficiency'] * 100:>8.1f}%")

    return results


def run_parameter_sweep(args):
    """Run full parameter sweep."""
    from .simulation.parameter_sweep import ParameterSweep
    from .simulation.runner import BatchRunner

    print("=" * 60)
    print("PARAMETER SWEEP")
    print("=" * 60)

    sweep = ParameterSweep(frame_count=args.sweep_frames)
    runner = BatchRunner(sweep=sweep, output_file=args.output or RESULTS_CSV)

    print(f"\nConfiguration:")
    print(f"  Protocols: {sweep.protocols}")
    print(f"  Window sizes: {sweep.window_sizes}")
    print(f"  Loss frames: {sweep.loss_frames}")
    print(f"  Frames per run: {sweep.frame_count}")
    print(f"  Total simulations: {runner.total_runs}")
    print(f"  Output: {runner.output_file}")

    print("\nStarting parameter sweep...")

    if args.parallel:
        results = runner.run_parallel(max_workers=args.workers)
    else:
        results = runner.run_sequential()

    runner.save_results()

    print("\n" + "=" * 60)
    print("AGGREGATED RESULTS")
    print("=" * 60)
    print(runner.get_aggregated_results().to_string(index=False))

    best = runner.get_best_configuration()
    print(f"\nBest: {best.get('protocol')} W={best.get('window_size')} "
          f"(mean efficiency {best.get('mean_efficiency', 0) * 100:.2f}%)")

    return results


def generate_visualizations(args):
    """Generate visualization plots."""
    from .visualization.heatmap import plot_sweep
    from .simulation.parameter_sweep import ParameterSweep

    print("=" * 60)
    print("GENERATING VISUALIZATIONS")
    print("=" * 60)

    csv_file = args.csv or RESULTS_CSV

    if not os.path.exists(csv_file):
        print(f"Error: Results file not found: {csv_file}")
        print("Run a parameter sweep first: flowsim --sweep")
        return None

    results = ParameterSweep.load_results(csv_file)
    print(f"Loaded {len(results)} results from {csv_file}")

    output_dir = args.output or PLOTS_DIR
    files = plot_sweep(results, output_dir)

    print("\n" + "=" * 60)
    print("VISUALIZATIONS GENERATED")
    print("=" * 60)
    for path in files:
        print(f"  {path}")
    return files


def show_config(args):
    """Display current configuration."""
    print("=" * 60)
    print("SIMULATOR CONFIGURATION")
    print("=" * 60)

    print(f"\nDefaults:")
    print(f"  Protocol: {cfg.DEFAULT_PROTOCOL}")
    print(f"  Frames: {cfg.DEFAULT_FRAME_COUNT}")
    print(f"  Window size: {cfg.DEFAULT_WINDOW_SIZE}")
    print(f"  Loss frame: {cfg.DEFAULT_LOSS_FRAME}")
    print(f"  Ideal transmissions: {cfg.calculate_ideal_transmissions(cfg.DEFAULT_FRAME_COUNT)}")

    print(f"\nParameter Sweep:")
    print(f"  Protocols: {cfg.PROTOCOLS}")
    print(f"  Window Sizes: {cfg.WINDOW_SIZES}")
    print(f"  Loss Frames: {cfg.LOSS_FRAMES}")
    print(f"  Frames per run: {cfg.SWEEP_FRAME_COUNT}")
    print(f"  Total simulations: "
          f"{len(cfg.PROTOCOLS) * len(cfg.WINDOW_SIZES) * len(cfg.LOSS_FRAMES)}")

    print(f"\nGo-Back-N worst-case resend for {cfg.SWEEP_FRAME_COUNT} frames:")
    for w in cfg.WINDOW_SIZES:
        bounds = [cfg.calculate_gbn_worst_case_resend(cfg.SWEEP_FRAME_COUNT, w, l)
                  for l in cfg.LOSS_FRAMES]
        print(f"  W={w:2d}: {bounds}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flowsim",
        description="Flow Control Protocol Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Single run with a lost frame:
    flowsim --single --protocol go_back_n --frames 5 --window 2 --loss 3

  Several lost frames:
    flowsim --single --protocol selective_repeat --loss 2 --loss 5

  Compare all protocols:
    flowsim --compare --frames 10 --window 4 --loss 2

  Parameter sweep:
    flowsim --sweep --parallel --workers 4

  Generate visualizations:
    flowsim --visualize

  Show configuration:
    flowsim --config
        """
    )

    # Mode selection
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--single', action='store_true',
                      help='Run a single protocol')
    mode.add_argument('--compare', action='store_true',
                      help='Run all protocols on the same configuration')
    mode.add_argument('--sweep', action='store_true',
                      help='Run parameter sweep')
    mode.add_argument('--visualize', action='store_true',
                      help='Generate visualizations')
    mode.add_argument('--config', action='store_true',
                      help='Show configuration')

    # Run options
    parser.add_argument('--protocol', '-P', type=str, default=cfg.DEFAULT_PROTOCOL,
                        help=f'Protocol (default: {cfg.DEFAULT_PROTOCOL})')
    parser.add_argument('--frames', '-n', type=int, default=cfg.DEFAULT_FRAME_COUNT,
                        help=f'Frames to send (default: {cfg.DEFAULT_FRAME_COUNT})')
    parser.add_argument('--window', '-w', type=int, default=cfg.DEFAULT_WINDOW_SIZE,
                        help=f'Window size (default: {cfg.DEFAULT_WINDOW_SIZE})')
    parser.add_argument('--loss', '-l', type=int, action='append',
                        help='Frame lost on its first attempt (repeatable)')
    parser.add_argument('--timeline', action='store_true',
                        help='Save a timeline plot of a single run')

    # Parameter sweep options
    parser.add_argument('--sweep-frames', type=int, default=cfg.SWEEP_FRAME_COUNT,
                        help=f'Frames per sweep run (default: {cfg.SWEEP_FRAME_COUNT})')
    parser.add_argument('--parallel', action='store_true',
                        help='Run simulations in parallel')
    parser.add_argument('--workers', type=int, default=None,
                        help='Number of parallel workers')

    # Output options
    parser.add_argument('--output', '-o', type=str,
                        help='Output file path (directory for --visualize)')
    parser.add_argument('--csv', type=str,
                        help='CSV file for visualization')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log every event')

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.single:
            run_single_simulation(args)
        elif args.compare:
            compare_protocols(args)
        elif args.sweep:
            run_parameter_sweep(args)
        elif args.visualize:
            if generate_visualizations(args) is None:
                return 1
        elif args.config:
            show_config(args)
    except InvalidConfiguration as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
