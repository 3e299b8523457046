"""
Utilities package - Helper functions and classes.

Contains implementations for:
- Metrics calculation (efficiency, retransmissions)
- Logging utilities
- Trace rendering for the command line
"""

from .metrics import MetricsCollector, summarize
from .logger import LogLevel, SimulationLogger, get_logger, set_logger
from .render import describe_event, format_window, render_trace

__all__ = [
    'LogLevel',
    'MetricsCollector',
    'SimulationLogger',
    'describe_event',
    'format_window',
    'get_logger',
    'render_trace',
    'set_logger',
    'summarize'
]
