"""
Simulation Logger

This module provides logging utilities for the simulation,
with configurable verbosity levels and structured output.
"""

from typing import Optional, TextIO
from datetime import datetime
from enum import IntEnum
import os

from ..config import (
    DEFAULT_LOG_LEVEL, LOG_LEVEL_DEBUG, LOG_LEVEL_ERROR, LOG_LEVEL_INFO, LOG_LEVEL_WARNING
)


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = LOG_LEVEL_DEBUG
    INFO = LOG_LEVEL_INFO
    WARNING = LOG_LEVEL_WARNING
    ERROR = LOG_LEVEL_ERROR
    CRITICAL = 4


class SimulationLogger:
    """
    Logger for simulation events.

    Provides structured logging with simulation ticks and categories.

    Attributes:
        name: Logger name
        level: Minimum log level
        file: Optional file for logging
    """

    # Color codes for terminal output
    COLORS = {
        LogLevel.DEBUG: '\033[36m',     # Cyan
        LogLevel.INFO: '\033[32m',      # Green
        LogLevel.WARNING: '\033[33m',   # Yellow
        LogLevel.ERROR: '\033[31m',     # Red
        LogLevel.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(
        self,
        name: str = "Simulator",
        level: int = DEFAULT_LOG_LEVEL,
        log_file: Optional[str] = None,
        use_colors: bool = True,
        include_timestamp: bool = True
    ):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Minimum log level
            log_file: Optional file path for logging
            use_colors: Use ANSI colors in output
            include_timestamp: Include tick/timestamp in log messages
        """
        self.name = name
        self.level = level
        self.use_colors = use_colors
        self.include_timestamp = include_timestamp

        self.file: Optional[TextIO] = None
        if log_file:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self.file = open(log_file, 'w')

        # Engine iteration the messages belong to
        self.sim_tick: Optional[int] = None

        # Message counts
        self.message_counts = {level: 0 for level in LogLevel}

    def set_sim_time(self, tick: int):
        """Set current engine iteration for log messages."""
        self.sim_tick = tick

    def set_level(self, level: int):
        """Set minimum log level."""
        self.level = level

    def _format_message(
        self,
        level: LogLevel,
        message: str,
        category: Optional[str] = None
    ) -> str:
        """Format a log message."""
        parts = []

        if self.include_timestamp:
            if self.sim_tick is not None:
                parts.append(f"[tick {self.sim_tick:5d}]")
            else:
                parts.append(f"[{datetime.now().strftime('%H:%M:%S.%f')[:-3]}]")

        level_str = level.name.ljust(8)
        if self.use_colors:
            level_str = f"{self.COLORS[level]}{level_str}{self.RESET}"
        parts.append(level_str)

        parts.append(f"[{self.name}]")

        if category:
            parts.append(f"[{category}]")

        parts.append(message)

        return " ".join(parts)

    def _log(
        self,
        level: LogLevel,
        message: str,
        category: Optional[str] = None
    ):
        """Log a message."""
        if level < self.level:
            return

        self.message_counts[level] += 1
        formatted = self._format_message(level, message, category)

        print(formatted)

        if self.file:
            # Strip color codes for file
            clean = formatted
            for color in self.COLORS.values():
                clean = clean.replace(color, '')
            clean = clean.replace(self.RESET, '')
            self.file.write(clean + '\n')
            self.file.flush()

    def debug(self, message: str, category: Optional[str] = None):
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, category)

    def info(self, message: str, category: Optional[str] = None):
        """Log info message."""
        self._log(LogLevel.INFO, message, category)

    def warning(self, message: str, category: Optional[str] = None):
        """Log warning message."""
        self._log(LogLevel.WARNING, message, category)

    def error(self, message: str, category: Optional[str] = None):
        """Log error message."""
        self._log(LogLevel.ERROR, message, category)

    def critical(self, message: str, category: Optional[str] = None):
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, category)

    # Convenience methods for simulation events
    def event(self, event):
        """Log a trace event under its category."""
        self.debug(str(event), self.category_for(event.event_type.name))

    @staticmethod
    def category_for(event_name: str) -> str:
        if event_name.startswith("ACK"):
            return "ACK"
        if event_name in ("FRAME_SENT", "FRAME_LOST"):
            return "TX"
        if event_name.startswith("FRAME") or event_name == "BUFFERED_DELIVERY":
            return "RX"
        if event_name == "WINDOW_SLIDE":
            return "WINDOW"
        if event_name == "RETRANSMIT":
            return "RETX"
        return event_name

    def timeout(self, seq_num: int):
        """Log timeout event."""
        self.warning(f"Timeout for frame {seq_num}", "TIMEOUT")

    def retransmit(self, seq_num: int):
        """Log retransmission event."""
        self.info(f"Retransmitting from frame {seq_num}", "RETX")

    def window_update(self, base: int, next_seq: int, size: int):
        """Log window update."""
        self.debug(f"Window: base={base}, next={next_seq}, size={size}", "WINDOW")

    def simulation_start(self, params: dict):
        """Log simulation start."""
        param_str = ", ".join(f"{k}={v}" for k, v in params.items())
        self.info(f"Simulation started: {param_str}", "SIM")

    def simulation_end(self, metrics: dict):
        """Log simulation end."""
        self.info(
            f"Simulation ended: sent={metrics.get('frames_sent', 0)}, "
            f"retx={metrics.get('retransmissions', 0)}, "
            f"efficiency={metrics.get('efficiency', 0):.3f}",
            "SIM"
        )

    def get_summary(self) -> dict:
        """Get logging summary."""
        return {
            'message_counts': dict(self.message_counts),
            'total_messages': sum(self.message_counts.values())
        }

    def close(self):
        """Close log file if open."""
        if self.file:
            self.file.close()
            self.file = None

    def __del__(self):
        """Cleanup on deletion."""
        self.close()


# Global logger instance
_global_logger: Optional[SimulationLogger] = None


def get_logger() -> SimulationLogger:
    """Get global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = SimulationLogger()
    return _global_logger


def set_logger(logger: SimulationLogger):
    """Set global logger instance."""
    global _global_logger
    _global_logger = logger


if __name__ == "__main__":
    print("=" * 60)
    print("SIMULATION LOGGER TEST")
    print("=" * 60)

    logger = SimulationLogger(name="Test", level=LogLevel.DEBUG)

    logger.debug("This is a debug message")
    logger.info("This is an info message")
    logger.warning("This is a warning message")

    print("\n--- Simulation Events ---")
    logger.set_sim_time(1)
    logger.simulation_start({'protocol': 'go_back_n', 'window_size': 4})
    logger.set_sim_time(3)
    logger.timeout(3)
    logger.retransmit(3)
    logger.set_sim_time(7)
    logger.simulation_end({'frames_sent': 12, 'retransmissions': 2, 'efficiency': 0.83})

    print(f"\nLogger summary: {logger.get_summary()}")
