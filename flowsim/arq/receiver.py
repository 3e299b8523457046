"""
Receivers

This module implements the receiver side: in-order delivery with
cumulative acknowledgments and discarding of out-of-order frames
(Go-Back-N, Stop-and-Wait), and out-of-order buffering with individual
acknowledgments (Selective Repeat, Sliding Window).
"""

from typing import List, Optional, Set

from .events import AckKind, EventTrace, EventType
from .frame import Frame


class Receiver:
    """
    Common receiver state.

    Attributes:
        expected: Next in-order sequence number
        delivered: Sequence numbers handed to the upper layer, in order
    """

    ack_kind = AckKind.INDIVIDUAL

    def __init__(self, trace: EventTrace):
        self.trace = trace
        self.expected = 1
        self.delivered: List[int] = []

        # Statistics
        self.frames_received = 0
        self.duplicate_frames = 0
        self.discarded_frames = 0
        self.acks_sent = 0

    def receive_frame(self, frame: Frame) -> Optional[Frame]:
        """
        Process a received frame.

        Args:
            frame: Received DATA frame

        Returns:
            ACK frame to send, or None
        """
        raise NotImplementedError

    def _deliver(self, seq_num: int):
        self.delivered.append(seq_num)
        self.expected = seq_num + 1

    def _generate_ack(self, seq_num: int) -> Frame:
        ack_frame = Frame.create_ack_frame(seq_num, self.ack_kind)
        self.acks_sent += 1
        self.trace.emit(EventType.ACK_SENT, seq_num, self.ack_kind)
        return ack_frame

    def _discard(self, seq_num: int):
        self.discarded_frames += 1
        self.trace.emit(EventType.FRAME_DISCARDED, seq_num)

    def get_window_state(self) -> dict:
        return {'expected': self.expected}

    def get_statistics(self) -> dict:
        """Get receiver statistics."""
        return {
            'frames_received': self.frames_received,
            'frames_delivered': len(self.delivered),
            'duplicate_frames': self.duplicate_frames,
            'discarded_frames': self.discarded_frames,
            'acks_sent': self.acks_sent
        }


class CumulativeReceiver(Receiver):
    """
    In-order receiver with cumulative ACKs.

    Anything other than the expected frame is dropped without an
    acknowledgment, so a single gap blocks everything behind it.
    """

    ack_kind = AckKind.CUMULATIVE

    def receive_frame(self, frame: Frame) -> Optional[Frame]:
        self.frames_received += 1
        seq_num = frame.seq_num

        if seq_num == self.expected:
            self.trace.emit(EventType.FRAME_DELIVERED, seq_num)
            self._deliver(seq_num)
            return self._generate_ack(seq_num)

        if seq_num < self.expected:
            # Already delivered; repeat the last cumulative ACK
            self.duplicate_frames += 1
            return self._generate_ack(self.expected - 1)

        self._discard(seq_num)
        return None


class SelectiveReceiver(Receiver):
    """
    Receiver that buffers out-of-order frames inside its window.

    Every accepted frame is acknowledged individually. When the expected
    frame arrives, it is delivered together with the contiguous run of
    buffered frames behind it.
    """

    def __init__(self, window_size: int, trace: EventTrace):
        super().__init__(trace)
        self.window_size = window_size
        self.buffer: Set[int] = set()
        self.out_of_order_frames = 0

    def in_window(self, seq_num: int) -> bool:
        return self.expected <= seq_num < self.expected + self.window_size

    def receive_frame(self, frame: Frame) -> Optional[Frame]:
        self.frames_received += 1
        seq_num = frame.seq_num

        if seq_num < self.expected or seq_num in self.buffer:
            # Sender might not have seen our ACK
            self.duplicate_frames += 1
            return self._generate_ack(seq_num)

        if not self.in_window(seq_num):
            self._discard(seq_num)
            return None

        self.trace.emit(EventType.FRAME_DELIVERED, seq_num)

        if seq_num == self.expected:
            self._deliver(seq_num)
            released = self._deliver_in_order()
            if released:
                self.trace.emit(EventType.BUFFERED_DELIVERY, seq_num, frames=released)
        else:
            self.buffer.add(seq_num)
            self.out_of_order_frames += 1
            self.trace.emit(EventType.FRAME_BUFFERED, seq_num)

        return self._generate_ack(seq_num)

    def _deliver_in_order(self) -> List[int]:
        """Deliver buffered frames that are now in-order."""
        released = []
        while self.expected in self.buffer:
            seq_num = self.expected
            self.buffer.remove(seq_num)
            self._deliver(seq_num)
            released.append(seq_num)
        return released

    def get_window_state(self) -> dict:
        return {
            'expected': self.expected,
            'size': self.window_size,
            'buffered_frames': sorted(self.buffer)
        }

    def get_statistics(self) -> dict:
        stats = super().get_statistics()
        stats['out_of_order_frames'] = self.out_of_order_frames
        return stats
