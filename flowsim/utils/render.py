"""
Trace Rendering

Turns structured events into the human-readable narration printed by the
command line driver. Nothing in the protocol engines depends on this.
"""

from typing import Iterable, List

from ..arq.events import AckKind, Event, EventType


def describe_event(event: Event) -> str:
    """Narrate one event from the point of view of the acting party."""
    seq = event.seq_num
    et = event.event_type

    if et == EventType.FRAME_SENT:
        return f"[Sender] Sending Frame {seq}"
    if et == EventType.FRAME_LOST:
        return f"[Channel] Frame {seq} LOST!"
    if et == EventType.FRAME_DELIVERED:
        return f"[Receiver] Frame {seq} Received."
    if et == EventType.FRAME_BUFFERED:
        return f"[Receiver] Buffering Out-of-Order Frame {seq}."
    if et == EventType.FRAME_DISCARDED:
        return f"[Receiver] Discarding Frame {seq} (Out-of-Order)."
    if et == EventType.BUFFERED_DELIVERY:
        frames = ", ".join(str(f) for f in event.frames)
        return f"[Receiver] Delivering buffered Frames {frames} in order."
    if et == EventType.ACK_SENT:
        if event.ack_kind == AckKind.CUMULATIVE:
            return f"[Receiver] Sending Cumulative ACK {seq}."
        return f"[Receiver] Sending Individual ACK for Frame {seq}."
    if et == EventType.ACK_RECEIVED:
        return f"[Sender] ACK Received for Frame {seq}."
    if et == EventType.TIMEOUT:
        return f"[Sender] Timeout! ACK not received for Frame {seq}."
    if et == EventType.RETRANSMIT:
        return f"[Sender] Retransmitting from Frame {seq}..."
    if et == EventType.WINDOW_SLIDE:
        return f"[Sender] Window slides past Frame {seq}."
    if et == EventType.COMPLETE:
        return "--- Transmission Complete ---"
    return str(event)


def render_trace(events: Iterable[Event], numbered: bool = False) -> List[str]:
    """Narrate a whole trace, one line per event."""
    lines = []
    for index, event in enumerate(events, start=1):
        text = describe_event(event)
        lines.append(f"{index:4d}. {text}" if numbered else text)
    return lines


def format_window(base: int, upper: int, acked: Iterable[int] = ()) -> str:
    """
    Render a window like ``[ 3 (4) 5 ]``.

    Acknowledged frames are shown in parentheses.
    """
    acked = set(acked)
    cells = [f"({seq})" if seq in acked else str(seq) for seq in range(base, upper + 1)]
    return "[ " + " ".join(cells) + " ]"
