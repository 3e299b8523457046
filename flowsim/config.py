"""
Configuration file for the Flow Control Protocol Simulator.
Contains the default run parameters, the parameter sweep grid and output paths.
"""

import os

# =============================================================================
# PROTOCOL DEFAULTS
# =============================================================================

# Protocol identifiers accepted by the simulator
PROTOCOLS = ["stop_and_wait", "sliding_window", "go_back_n", "selective_repeat"]

DEFAULT_PROTOCOL = "go_back_n"

# Number of frames to transfer (sequence numbers run 1..N)
DEFAULT_FRAME_COUNT = 10

# Sender window size (ignored by Stop-and-Wait, which always uses 1)
DEFAULT_WINDOW_SIZE = 4

# Frame lost on its first attempt (0 = no loss)
DEFAULT_LOSS_FRAME = 0

# =============================================================================
# PARAMETER SWEEP CONFIGURATION
# =============================================================================

# Frames per run in a sweep
SWEEP_FRAME_COUNT = 16

# Send window sizes to evaluate
WINDOW_SIZES = [1, 2, 4, 8, 16]

# Loss positions to evaluate (0 = lossless baseline)
LOSS_FRAMES = [0, 1, 4, 8, 12, 16]

# Total simulations = 4 x 5 x 6 = 120

# =============================================================================
# LOGGING
# =============================================================================

# Logging verbosity levels
LOG_LEVEL_DEBUG = 0
LOG_LEVEL_INFO = 1
LOG_LEVEL_WARNING = 2
LOG_LEVEL_ERROR = 3

DEFAULT_LOG_LEVEL = LOG_LEVEL_WARNING

# =============================================================================
# OUTPUT PATHS
# =============================================================================

BASE_DIR = os.getcwd()
DATA_DIR = os.path.join(BASE_DIR, "data")
OUTPUT_DIR = os.path.join(DATA_DIR, "output")
PLOTS_DIR = os.path.join(OUTPUT_DIR, "plots")

# Results CSV filename
RESULTS_CSV = os.path.join(OUTPUT_DIR, "results.csv")

# =============================================================================
# DERIVED PARAMETERS
# =============================================================================

def calculate_window_cycles(frame_count, window_size):
    """Number of full or partial windows needed to cover frame_count frames."""
    if frame_count <= 0:
        return 0
    return -(-frame_count // window_size)


def calculate_ideal_transmissions(frame_count):
    """Data frames sent on a lossless channel (one per frame)."""
    return max(frame_count, 0)


def calculate_gbn_worst_case_resend(frame_count, window_size, loss_frame):
    """
    Upper bound on extra data frames Go-Back-N sends for one loss.

    The lost frame and every frame sent after it in the same window
    are transmitted again.
    """
    if not 1 <= loss_frame <= frame_count:
        return 0
    return min(window_size, frame_count - loss_frame + 1)


# Print configuration summary
if __name__ == "__main__":
    print("=" * 60)
    print("FLOW CONTROL SIMULATOR - CONFIGURATION")
    print("=" * 60)
    print(f"\nDefaults:")
    print(f"  Protocol: {DEFAULT_PROTOCOL}")
    print(f"  Frames: {DEFAULT_FRAME_COUNT}")
    print(f"  Window size: {DEFAULT_WINDOW_SIZE}")
    print(f"  Loss frame: {DEFAULT_LOSS_FRAME}")

    print(f"\nParameter Sweep:")
    print(f"  Protocols: {PROTOCOLS}")
    print(f"  Window Sizes: {WINDOW_SIZES}")
    print(f"  Loss Frames: {LOSS_FRAMES}")
    print(f"  Total simulations: {len(PROTOCOLS) * len(WINDOW_SIZES) * len(LOSS_FRAMES)}")

    print(f"\nWindow cycles for {SWEEP_FRAME_COUNT} frames:")
    for w in WINDOW_SIZES:
        print(f"  W={w:2d}: {calculate_window_cycles(SWEEP_FRAME_COUNT, w)} cycles")
