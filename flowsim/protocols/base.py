"""
Protocol Policy Interface

Every discipline is expressed as a policy plugged into the same engine
loop. One loop iteration calls the three hooks in order:

    on_send            sender puts frames on the channel
    on_deliver_or_lose receiver handles whatever the channel delivered
    on_ack_check       sender applies ACKs, slides, and decides timeouts

The loop stops as soon as `finished` is true.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Union

from ..arq.events import EventTrace, EventType
from ..arq.frame import Frame
from ..channel.lossy import LossyChannel
from ..utils.logger import SimulationLogger, get_logger


class ProtocolKind(str, Enum):
    """Supported disciplines."""
    STOP_AND_WAIT = "stop_and_wait"
    SLIDING_WINDOW = "sliding_window"
    GO_BACK_N = "go_back_n"
    SELECTIVE_REPEAT = "selective_repeat"

    @classmethod
    def parse(cls, value: Union['ProtocolKind', str]) -> 'ProtocolKind':
        """Accept a member, its value, or its name (any case, '-' or '_')."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        for kind in cls:
            if key in (kind.value, kind.name.lower()):
                return kind
        raise ValueError(f"Unknown protocol: {value!r}")

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class ProtocolPolicy(ABC):
    """
    Base class for protocol policies.

    Attributes:
        frame_count: Frames 1..N to deliver
        window_size: Configured send window
        channel: Loss channel for this run
        trace: Event trace for this run
    """

    kind: ProtocolKind

    def __init__(
        self,
        frame_count: int,
        window_size: int,
        channel: LossyChannel,
        trace: EventTrace,
        logger: Optional[SimulationLogger] = None
    ):
        self.frame_count = frame_count
        self.window_size = window_size
        self.channel = channel
        self.trace = trace
        self.logger = logger or get_logger()

    @abstractmethod
    def on_send(self) -> bool:
        """Transmit phase. Returns True if anything was sent."""

    @abstractmethod
    def on_deliver_or_lose(self) -> bool:
        """Receive phase. Returns True if the receiver handled a frame."""

    @abstractmethod
    def on_ack_check(self) -> bool:
        """Acknowledgment phase. Returns True if sender state changed."""

    @property
    @abstractmethod
    def finished(self) -> bool:
        """True once every frame is acknowledged."""

    def get_window_state(self) -> dict:
        return {}

    def _transmit(self, frame: Frame) -> Optional[Frame]:
        """
        Pass a DATA frame through the channel.

        Returns:
            The frame if it arrived, None if it was lost
        """
        if self.channel.transmit(frame):
            return frame
        self.trace.emit(EventType.FRAME_LOST, frame.seq_num)
        return None

    def _return_ack(self, ack: Optional[Frame]) -> Optional[Frame]:
        """Carry an ACK back to the sender."""
        if ack is not None and self.channel.transmit(ack):
            return ack
        return None
