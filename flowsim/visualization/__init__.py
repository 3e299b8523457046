"""
Visualization package - Plotting and visualization tools.

Contains:
- Sweep heatmaps
- Single-run timeline diagrams
"""

from .heatmap import RetransmissionHeatmap, plot_sweep
from .timeline import TimelinePlot, build_messages

__all__ = [
    'RetransmissionHeatmap',
    'TimelinePlot',
    'build_messages',
    'plot_sweep'
]
