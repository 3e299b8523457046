"""
Window-Based Senders

This module implements the sender side of the four disciplines: the
sliding send window, the Selective Repeat acknowledgment table, and the
cumulative (Go-Back-N, Stop-and-Wait) and individual (Selective Repeat,
Sliding Window) acknowledgment handling including timeout decisions.
"""

from typing import List, Optional
from dataclasses import dataclass

from .events import AckKind, EventTrace, EventType
from .frame import Frame


@dataclass
class SendWindow:
    """
    Sliding window for the sender.

    Attributes:
        base: Oldest unacknowledged frame
        next_seq: Next sequence number to send
        size: Window size
        limit: Highest sequence number (total frame count)
    """
    base: int = 1
    next_seq: int = 1
    size: int = 1
    limit: int = 0

    @property
    def upper(self) -> int:
        """Last sequence number inside the window, clipped to limit."""
        return min(self.base + self.size - 1, self.limit)

    @property
    def available_slots(self) -> int:
        """Number of available slots in the window."""
        return self.size - (self.next_seq - self.base)

    @property
    def can_send(self) -> bool:
        return self.next_seq < self.base + self.size and self.next_seq <= self.limit

    @property
    def exhausted(self) -> bool:
        """True once every frame has left the window."""
        return self.base > self.limit

    @property
    def outstanding(self) -> List[int]:
        """Sequence numbers sent but not yet acknowledged."""
        return list(range(self.base, self.next_seq))

    def in_window(self, seq_num: int) -> bool:
        """Check if sequence number is within the window."""
        return self.base <= seq_num <= self.upper

    def advance_base(self, new_base: int):
        """Advance window base to new position."""
        if new_base > self.base:
            self.base = new_base

    def get_next_seq(self) -> int:
        """Get next sequence number and increment counter."""
        seq = self.next_seq
        self.next_seq += 1
        return seq

    def rewind(self, seq_num: int):
        """Move next_seq back so seq_num is sent again."""
        self.next_seq = max(self.base, min(seq_num, self.next_seq))


class AckTable:
    """
    Per-frame acknowledgment flags for frames 1..N.

    Entries only ever go from False to True.
    """

    def __init__(self, frame_count: int):
        self._acked = [False] * (frame_count + 1)

    def mark(self, seq_num: int) -> bool:
        """
        Mark seq_num acknowledged.

        Returns:
            True if the flag changed
        """
        if not self._valid(seq_num) or self._acked[seq_num]:
            return False
        self._acked[seq_num] = True
        return True

    def is_acked(self, seq_num: int) -> bool:
        return self._valid(seq_num) and self._acked[seq_num]

    @property
    def acked_count(self) -> int:
        return sum(self._acked)

    def _valid(self, seq_num: int) -> bool:
        return 1 <= seq_num < len(self._acked)

    def __getitem__(self, seq_num: int) -> bool:
        return self.is_acked(seq_num)

    def __len__(self) -> int:
        return len(self._acked)


class WindowSender:
    """
    Common sender bookkeeping.

    Attributes:
        frame_count: Total frames to deliver
        window: Send window state
        trace: Event trace shared with the rest of the run
    """

    def __init__(self, frame_count: int, window_size: int, trace: EventTrace):
        self.frame_count = frame_count
        self.window_size = window_size
        self.trace = trace

        self.window = SendWindow(size=window_size, limit=frame_count)

        # Statistics
        self.frames_sent = 0
        self.retransmissions = 0
        self.acks_received = 0
        self.timeouts = 0

        # Highest sequence number ever transmitted
        self.highest_sent = 0

    def can_send(self) -> bool:
        """Check if sender can transmit a new frame."""
        return self.window.can_send

    def send_next_frame(self) -> Optional[Frame]:
        """
        Create and send the next frame in the window.

        Returns:
            Frame to transmit or None if the window is closed
        """
        if not self.can_send():
            return None
        return self._transmit(self.window.get_next_seq())

    def send_window(self) -> List[Frame]:
        """Send every frame the window currently allows."""
        frames = []
        while self.can_send():
            frames.append(self.send_next_frame())
        return frames

    def is_complete(self) -> bool:
        """Check if all frames have been acknowledged."""
        return self.window.exhausted

    def _transmit(self, seq_num: int) -> Frame:
        retransmission = seq_num <= self.highest_sent
        frame = Frame.create_data_frame(seq_num, retransmission=retransmission)

        self.frames_sent += 1
        if retransmission:
            self.retransmissions += 1
        self.highest_sent = max(self.highest_sent, seq_num)

        self.trace.emit(EventType.FRAME_SENT, seq_num)
        return frame

    def _timeout(self, seq_num: int):
        self.timeouts += 1
        self.trace.emit(EventType.TIMEOUT, seq_num)
        self.trace.emit(EventType.RETRANSMIT, seq_num)

    def get_window_state(self) -> dict:
        """Get current window state."""
        return {
            'base': self.window.base,
            'next_seq': self.window.next_seq,
            'size': self.window.size,
            'upper': self.window.upper,
            'available': self.window.available_slots,
            'outstanding': self.window.outstanding
        }

    def get_statistics(self) -> dict:
        """Get sender statistics."""
        return {
            'frames_sent': self.frames_sent,
            'retransmissions': self.retransmissions,
            'acks_received': self.acks_received,
            'timeouts': self.timeouts,
            'complete': self.is_complete()
        }


class CumulativeAckSender(WindowSender):
    """
    Sender driven by cumulative acknowledgments (Go-Back-N).

    A single timeout covers the oldest unacknowledged frame; on expiry the
    whole outstanding tail is sent again starting from base.
    Stop-and-Wait is the same machine with a window of one and no
    window reporting.
    """

    def __init__(
        self,
        frame_count: int,
        window_size: int,
        trace: EventTrace,
        report_slides: bool = True
    ):
        super().__init__(frame_count, window_size, trace)
        self.report_slides = report_slides

    def process_ack(self, ack: Frame) -> bool:
        """
        Process a cumulative ACK.

        Args:
            ack: ACK frame; everything up to ack.ack_num is acknowledged

        Returns:
            True if the ACK moved the window
        """
        if ack.ack_num < self.window.base or ack.ack_num >= self.window.next_seq:
            return False

        self.acks_received += 1
        self.trace.emit(EventType.ACK_RECEIVED, ack.ack_num, AckKind.CUMULATIVE)

        for seq_num in range(self.window.base, ack.ack_num + 1):
            if self.report_slides:
                self.trace.emit(EventType.WINDOW_SLIDE, seq_num)
        self.window.advance_base(ack.ack_num + 1)
        return True

    def check_timeout(self) -> Optional[int]:
        """
        Fire the timer if anything sent is still unacknowledged.

        Returns:
            Sequence number the sender goes back to, or None
        """
        if self.window.base >= self.window.next_seq:
            return None

        base = self.window.base
        self._timeout(base)
        self.window.rewind(base)
        return base


class SelectiveAckSender(WindowSender):
    """
    Sender driven by individual acknowledgments.

    Keeps an AckTable; the window slides over the contiguous acknowledged
    prefix. Only the frame at base is ever retransmitted.
    """

    def __init__(self, frame_count: int, window_size: int, trace: EventTrace):
        super().__init__(frame_count, window_size, trace)
        self.ack_table = AckTable(frame_count)

    def process_ack(self, ack: Frame) -> bool:
        """
        Process an individual ACK.

        Returns:
            True if the frame was newly acknowledged
        """
        self.acks_received += 1
        self.trace.emit(EventType.ACK_RECEIVED, ack.ack_num, AckKind.INDIVIDUAL)
        return self.ack_table.mark(ack.ack_num)

    def slide_window(self) -> int:
        """
        Slide the window forward past consecutive acknowledged frames.

        Returns:
            Number of positions the base moved
        """
        moved = 0
        while self.window.base <= self.frame_count and self.ack_table[self.window.base]:
            self.trace.emit(EventType.WINDOW_SLIDE, self.window.base)
            self.window.advance_base(self.window.base + 1)
            moved += 1
        return moved

    def base_timed_out(self) -> bool:
        """True if base has been sent and is still unacknowledged."""
        return (not self.window.exhausted
                and self.window.base < self.window.next_seq
                and not self.ack_table[self.window.base])

    def retransmit_base(self) -> Optional[Frame]:
        """
        Time out and resend only the frame at base.

        Returns:
            Retransmitted frame or None if base needs no resend
        """
        if not self.base_timed_out():
            return None
        base = self.window.base
        self._timeout(base)
        return self._transmit(base)


if __name__ == "__main__":
    print("=" * 60)
    print("SENDER TEST")
    print("=" * 60)

    trace = EventTrace(on_event=lambda e: print(f"  {e}"))
    sender = SelectiveAckSender(frame_count=5, window_size=3, trace=trace)

    print("\nSending window...")
    sender.send_window()
    print(f"Window state: {sender.get_window_state()}")

    print("\nAcknowledging 2 and 3, sliding...")
    for seq in (2, 3):
        sender.process_ack(Frame.create_ack_frame(seq, AckKind.INDIVIDUAL))
    sender.slide_window()

    print("\nTimeout on base...")
    sender.retransmit_base()
    print(f"\nStatistics: {sender.get_statistics()}")
