"""
Simulation package - Protocol engine and runners.

Contains:
- Engine loop and the run_protocol entry point
- Batch runner for parameter sweeps
- Parameter sweep logic
"""

from .simulator import RunResult, Simulator, SimulatorConfig, run_protocol
from .runner import BatchRunner, RunConfig, run_single_simulation
from .parameter_sweep import ParameterPoint, ParameterSweep

__all__ = [
    'BatchRunner',
    'ParameterPoint',
    'ParameterSweep',
    'RunConfig',
    'RunResult',
    'Simulator',
    'SimulatorConfig',
    'run_protocol',
    'run_single_simulation'
]
