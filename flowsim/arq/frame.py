"""
Frame Structure for the Flow Control Protocols

This module defines the frames exchanged between sender and receiver.
Frames are identified only by sequence number; there is no payload or
checksum because the simulation works at the level of protocol decisions.
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass

from .events import AckKind


class FrameType(Enum):
    """Frame type enumeration."""
    DATA = 0x01
    ACK = 0x02


@dataclass(frozen=True)
class Frame:
    """
    Link Layer Frame.

    Attributes:
        frame_type: Type of frame (DATA, ACK)
        seq_num: Sequence number, 1-indexed (acknowledged number for ACKs)
        ack_kind: Cumulative or individual (ACK frames only)
        retransmission: Whether this DATA frame is a resend
    """

    frame_type: FrameType
    seq_num: int
    ack_kind: Optional[AckKind] = None
    retransmission: bool = False

    def __post_init__(self):
        """Validate frame after initialization."""
        if self.seq_num < 1:
            raise ValueError("Sequence number must be >= 1")
        if self.frame_type == FrameType.ACK and self.ack_kind is None:
            raise ValueError("ACK frames need an ack kind")

    @classmethod
    def create_data_frame(cls, seq_num: int, retransmission: bool = False) -> 'Frame':
        """Create a DATA frame."""
        return cls(FrameType.DATA, seq_num, retransmission=retransmission)

    @classmethod
    def create_ack_frame(cls, ack_num: int, ack_kind: AckKind) -> 'Frame':
        """Create an ACK frame acknowledging ack_num."""
        return cls(FrameType.ACK, ack_num, ack_kind=ack_kind)

    @property
    def ack_num(self) -> int:
        """Acknowledged sequence number (same field as seq_num)."""
        return self.seq_num

    def is_ack(self) -> bool:
        return self.frame_type == FrameType.ACK

    def is_cumulative(self) -> bool:
        return self.ack_kind == AckKind.CUMULATIVE

    def __str__(self) -> str:
        if self.is_ack():
            return f"ACK[{self.seq_num}, {self.ack_kind.value}]"
        suffix = ", retx" if self.retransmission else ""
        return f"DATA[{self.seq_num}{suffix}]"
