"""
Deterministic Loss Channel

This module implements the channel between sender and receiver. Instead
of a random error model, loss is scripted: a LossSpec names the data
frames to drop, and each of those frames is dropped on its first
transmission attempt only. The channel owns one single-use token per
scheduled loss, so a retransmission of the same frame always gets through
and every run terminates.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional, Union
from dataclasses import dataclass

from ..arq.frame import Frame


@dataclass(frozen=True)
class LossSpec:
    """
    Frames scheduled to be lost once.

    Attributes:
        frames: Sequence numbers lost on their first attempt
    """
    frames: FrozenSet[int] = frozenset()

    def __post_init__(self):
        if any(seq < 0 for seq in self.frames):
            raise ValueError("Loss frame numbers must be non-negative")

    @classmethod
    def of(cls, value: Union[None, int, Iterable[int]] = None) -> 'LossSpec':
        """
        Build a LossSpec from a single frame number or a collection.

        0 and None mean "no loss".

        Raises:
            TypeError: if value is not an int or a collection of ints
            ValueError: on a negative frame number
        """
        if value is None:
            return cls()
        if isinstance(value, (str, bytes)):
            raise TypeError(f"Loss frames must be integers, got {value!r}")
        if isinstance(value, int):
            value = [value]
        frames = frozenset(value)
        for seq in frames:
            if isinstance(seq, bool) or not isinstance(seq, int):
                raise TypeError(f"Loss frames must be integers, got {seq!r}")
        if any(seq < 0 for seq in frames):
            raise ValueError("Loss frame numbers must be non-negative")
        return cls(frozenset(seq for seq in frames if seq > 0))

    def within(self, frame_count: int) -> 'LossSpec':
        """Drop scheduled losses that can never fire for frame_count frames."""
        return LossSpec(frozenset(seq for seq in self.frames if seq <= frame_count))

    def __contains__(self, seq_num: int) -> bool:
        return seq_num in self.frames

    def __len__(self) -> int:
        return len(self.frames)

    def __bool__(self) -> bool:
        return bool(self.frames)


class LossToken:
    """Single-use permission to drop one frame."""

    def __init__(self, seq_num: int):
        self.seq_num = seq_num
        self.consumed = False

    def consume(self) -> bool:
        """
        Use the token.

        Returns:
            True the first time, False afterwards
        """
        if self.consumed:
            return False
        self.consumed = True
        return True

    def __repr__(self) -> str:
        state = "consumed" if self.consumed else "armed"
        return f"LossToken({self.seq_num}, {state})"


class LossyChannel:
    """
    Channel that drops scheduled DATA frames exactly once.

    ACK frames are never dropped.

    Attributes:
        loss_spec: Losses this channel was built with
    """

    def __init__(self, loss_spec: Optional[LossSpec] = None):
        """
        Initialize the channel.

        Args:
            loss_spec: Frames to lose (default: none)
        """
        self.loss_spec = loss_spec or LossSpec()
        self._tokens: Dict[int, LossToken] = {}
        self.reset()

    def transmit(self, frame: Frame) -> bool:
        """
        Send a frame through the channel.

        Args:
            frame: DATA or ACK frame

        Returns:
            True if the frame is delivered, False if it is lost
        """
        if frame.is_ack():
            self.acks_transmitted += 1
            return True

        self.frames_transmitted += 1
        token = self._tokens.get(frame.seq_num)
        if token is not None and token.consume():
            self.frames_dropped += 1
            return False

        self.frames_delivered += 1
        return True

    def will_drop(self, seq_num: int) -> bool:
        """Check whether the next attempt at seq_num would be lost."""
        token = self._tokens.get(seq_num)
        return token is not None and not token.consumed

    @property
    def pending_losses(self) -> List[int]:
        """Scheduled losses that have not fired yet."""
        return sorted(seq for seq, token in self._tokens.items() if not token.consumed)

    def get_statistics(self) -> dict:
        """Get channel statistics."""
        return {
            'frames_transmitted': self.frames_transmitted,
            'frames_delivered': self.frames_delivered,
            'frames_dropped': self.frames_dropped,
            'acks_transmitted': self.acks_transmitted,
            'pending_losses': self.pending_losses
        }

    def reset(self):
        """Re-arm every token and clear statistics."""
        self._tokens = {seq: LossToken(seq) for seq in self.loss_spec.frames}
        self.frames_transmitted = 0
        self.frames_delivered = 0
        self.frames_dropped = 0
        self.acks_transmitted = 0


if __name__ == "__main__":
    print("=" * 60)
    print("LOSSY CHANNEL TEST")
    print("=" * 60)

    channel = LossyChannel(LossSpec.of([2, 4]))
    for seq in [1, 2, 2, 3, 4, 4]:
        delivered = channel.transmit(Frame.create_data_frame(seq))
        print(f"  Frame {seq}: {'delivered' if delivered else 'LOST'}")

    print(f"\nStatistics: {channel.get_statistics()}")
