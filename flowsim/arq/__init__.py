"""
ARQ package - sender, receiver and frame components.

Contains implementations for:
- Frame structure
- Structured event trace
- Senders with window management and ack tables
- Receivers with cumulative or selective acknowledgment
"""

from .events import AckKind, Event, EventTrace, EventType
from .frame import Frame, FrameType
from .sender import (
    AckTable, CumulativeAckSender, SelectiveAckSender, SendWindow, WindowSender
)
from .receiver import CumulativeReceiver, Receiver, SelectiveReceiver

__all__ = [
    'AckKind',
    'AckTable',
    'CumulativeAckSender',
    'CumulativeReceiver',
    'Event',
    'EventTrace',
    'EventType',
    'Frame',
    'FrameType',
    'Receiver',
    'SelectiveAckSender',
    'SelectiveReceiver',
    'SendWindow',
    'WindowSender'
]
