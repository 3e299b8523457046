"""
flowsim - Flow and error control protocol simulator.

Runs Stop-and-Wait, Sliding Window, Go-Back-N and Selective Repeat over a
channel with scripted single-shot frame loss and returns the structured
event trace of each run.
"""

from .arq.events import AckKind, Event, EventType
from .exceptions import FlowSimError, InvalidConfiguration
from .protocols import ProtocolKind
from .simulation.simulator import RunResult, Simulator, SimulatorConfig, run_protocol

__version__ = "1.0.0"

__all__ = [
    'AckKind',
    'Event',
    'EventType',
    'FlowSimError',
    'InvalidConfiguration',
    'ProtocolKind',
    'RunResult',
    'Simulator',
    'SimulatorConfig',
    'run_protocol'
]
