"""
Metrics Collection and Calculation

This module derives performance figures for one run from its event
stream: frame and ACK counts, retransmissions, timeouts and the
resulting transmission efficiency.
"""

from typing import Dict, Iterable, Optional

from ..arq.events import Event, EventType


class MetricsCollector:
    """
    Collects and calculates metrics for one protocol run.

    Primary metric: Efficiency = Frames to Deliver / Data Frames Sent

    Attributes:
        frame_count: Frames the run has to deliver
    """

    def __init__(self, frame_count: int = 0):
        """
        Initialize metrics collector.

        Args:
            frame_count: Number of frames in the transfer
        """
        self.frame_count = frame_count
        self.reset()

    def record(self, event: Event):
        """Update counters from one trace event."""
        self.event_counts[event.event_type] += 1

        if event.event_type == EventType.FRAME_SENT:
            if event.seq_num in self._seen:
                self.retransmissions += 1
            self._seen.add(event.seq_num)
        elif event.event_type == EventType.BUFFERED_DELIVERY:
            self.frames_released += len(event.frames)

    def record_all(self, events: Iterable[Event]):
        for event in events:
            self.record(event)

    def finish(self, iterations: int):
        """
        Mark end of run.

        Args:
            iterations: Engine loop iterations the run took
        """
        self.iterations = iterations

    def count(self, event_type: EventType) -> int:
        return self.event_counts[event_type]

    @property
    def frames_sent(self) -> int:
        return self.count(EventType.FRAME_SENT)

    @property
    def unique_frames(self) -> int:
        return len(self._seen)

    def calculate_efficiency(self) -> float:
        """
        Calculate transmission efficiency.

        Efficiency = Frames to Deliver / Data Frames Sent

        Returns:
            Efficiency ratio (0-1), 1.0 when nothing had to be sent
        """
        if self.frames_sent <= 0:
            return 1.0
        return self.frame_count / self.frames_sent

    def calculate_retransmission_rate(self) -> float:
        """
        Calculate retransmission rate.

        Returns:
            Retransmissions / Original Frames Sent
        """
        if self.unique_frames <= 0:
            return 0.0
        return self.retransmissions / self.unique_frames

    def get_summary(self) -> Dict:
        """
        Get metrics summary.

        Returns:
            Dictionary with all metrics
        """
        return {
            'frame_count': self.frame_count,
            'iterations': self.iterations,

            # Frame counts
            'frames_sent': self.frames_sent,
            'unique_frames': self.unique_frames,
            'retransmissions': self.retransmissions,
            'frames_lost': self.count(EventType.FRAME_LOST),
            'frames_delivered': self.count(EventType.FRAME_DELIVERED),
            'frames_buffered': self.count(EventType.FRAME_BUFFERED),
            'frames_released': self.frames_released,
            'frames_discarded': self.count(EventType.FRAME_DISCARDED),

            # ACKs and timers
            'acks_sent': self.count(EventType.ACK_SENT),
            'acks_received': self.count(EventType.ACK_RECEIVED),
            'timeouts': self.count(EventType.TIMEOUT),
            'window_slides': self.count(EventType.WINDOW_SLIDE),

            # Ratios
            'efficiency': self.calculate_efficiency(),
            'retransmission_rate': self.calculate_retransmission_rate()
        }

    def reset(self):
        """Reset all metrics."""
        self.event_counts: Dict[EventType, int] = {t: 0 for t in EventType}
        self.retransmissions = 0
        self.frames_released = 0
        self.iterations = 0
        self._seen = set()


def summarize(events: Iterable[Event], frame_count: int, iterations: Optional[int] = None) -> Dict:
    """Compute a metrics summary for an already recorded trace."""
    collector = MetricsCollector(frame_count)
    collector.record_all(events)
    if iterations is not None:
        collector.finish(iterations)
    return collector.get_summary()
