"""
Simulation Events

This module defines the structured event trace produced by every protocol
run. Events are the only observable output of a run besides its final
completion status; turning them into text is left to the caller.
"""

from typing import Callable, Iterator, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum


class EventType(Enum):
    """Kinds of trace entries."""
    FRAME_SENT = "frame_sent"
    FRAME_LOST = "frame_lost"
    FRAME_DELIVERED = "frame_delivered"
    FRAME_BUFFERED = "frame_buffered"
    FRAME_DISCARDED = "frame_discarded"
    BUFFERED_DELIVERY = "buffered_delivery"
    ACK_SENT = "ack_sent"
    ACK_RECEIVED = "ack_received"
    TIMEOUT = "timeout"
    RETRANSMIT = "retransmit"
    WINDOW_SLIDE = "window_slide"
    COMPLETE = "complete"


class AckKind(Enum):
    """How much an acknowledgment covers."""
    CUMULATIVE = "cumulative"   # everything up to and including seq_num
    INDIVIDUAL = "individual"   # exactly seq_num


@dataclass(frozen=True)
class Event:
    """
    A single trace entry.

    Attributes:
        event_type: What happened
        seq_num: Sequence number the event refers to
        ack_kind: Acknowledgment kind (ACK_SENT / ACK_RECEIVED only)
        frames: Frames released together (BUFFERED_DELIVERY only)
    """
    event_type: EventType
    seq_num: int
    ack_kind: Optional[AckKind] = None
    frames: Tuple[int, ...] = ()

    def to_dict(self) -> dict:
        """Flat representation for CSV/JSON export."""
        return {
            'event': self.event_type.value,
            'seq_num': self.seq_num,
            'ack_kind': self.ack_kind.value if self.ack_kind else None,
            'frames': list(self.frames),
        }

    def __str__(self) -> str:
        text = f"{self.event_type.name}({self.seq_num}"
        if self.ack_kind is not None:
            text += f", {self.ack_kind.value}"
        if self.frames:
            text += f", frames={list(self.frames)}"
        return text + ")"


class EventTrace:
    """
    Ordered, append-only event log for one run.

    Every protocol component emits into the same trace so the resulting
    sequence reflects the exact order of decisions.
    """

    def __init__(self, on_event: Optional[Callable[[Event], None]] = None):
        """
        Initialize trace.

        Args:
            on_event: Callback invoked with each event as it is emitted
        """
        self.on_event = on_event
        self._events: List[Event] = []

    def emit(
        self,
        event_type: EventType,
        seq_num: int,
        ack_kind: Optional[AckKind] = None,
        frames: Tuple[int, ...] = ()
    ) -> Event:
        """Append an event and notify the listener."""
        event = Event(event_type, seq_num, ack_kind, tuple(frames))
        self._events.append(event)
        if self.on_event:
            self.on_event(event)
        return event

    @property
    def events(self) -> Tuple[Event, ...]:
        return tuple(self._events)

    def of_type(self, event_type: EventType) -> List[Event]:
        return [e for e in self._events if e.event_type == event_type]

    def seq_nums(self, event_type: EventType) -> List[int]:
        """Sequence numbers of all events of one type, in order."""
        return [e.seq_num for e in self._events if e.event_type == event_type]

    def count(self, event_type: EventType, seq_num: Optional[int] = None) -> int:
        return sum(
            1 for e in self._events
            if e.event_type == event_type
            and (seq_num is None or e.seq_num == seq_num)
        )

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)
