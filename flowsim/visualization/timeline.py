"""
Event Timeline Visualization

Renders one run as a two-lane sequence diagram: sender on the left,
receiver on the right, time running downwards. Data frames go left to
right, ACKs right to left, lost frames stop halfway with a cross.
"""

import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..config import PLOTS_DIR
from ..arq.events import Event, EventType


SENDER_X = 0.0
RECEIVER_X = 1.0


@dataclass
class Message:
    """One arrow on the diagram."""
    kind: str        # 'data' or 'ack'
    seq_num: int
    row: int
    lost: bool = False
    retransmission: bool = False


def build_messages(events: Iterable[Event]) -> Tuple[List[Message], List[Tuple[int, int]]]:
    """
    Lay out a trace.

    Returns:
        (messages, timeouts) where timeouts are (row, seq_num) markers
    """
    messages: List[Message] = []
    timeouts: List[Tuple[int, int]] = []
    seen = set()
    last_data = {}

    for event in events:
        et = event.event_type
        if et == EventType.FRAME_SENT:
            msg = Message('data', event.seq_num, len(messages),
                          retransmission=event.seq_num in seen)
            seen.add(event.seq_num)
            last_data[event.seq_num] = msg
            messages.append(msg)
        elif et == EventType.FRAME_LOST:
            if event.seq_num in last_data:
                last_data[event.seq_num].lost = True
        elif et == EventType.ACK_SENT:
            messages.append(Message('ack', event.seq_num, len(messages)))
        elif et == EventType.TIMEOUT:
            timeouts.append((len(messages), event.seq_num))

    return messages, timeouts


class TimelinePlot:
    """Sequence diagram for a single event trace."""

    def __init__(self, events: Iterable[Event], title: str = "Protocol Timeline"):
        self.events = list(events)
        self.title = title
        self.messages, self.timeouts = build_messages(self.events)

    def plot(self, output_file: Optional[str] = None, row_height: float = 0.35) -> str:
        """
        Draw and save the diagram.

        Args:
            output_file: Output file path (auto-generated if None)
            row_height: Vertical inches per arrow

        Returns:
            Path to saved figure
        """
        rows = max(len(self.messages), 1)
        fig, ax = plt.subplots(figsize=(6, max(3.0, rows * row_height + 1)))

        for x, label in ((SENDER_X, "Sender"), (RECEIVER_X, "Receiver")):
            ax.plot([x, x], [0, rows + 1], color='black', linewidth=1.5)
            ax.text(x, -0.5, label, ha='center', va='bottom', fontweight='bold')

        for msg in self.messages:
            y0 = msg.row + 0.5
            y1 = y0 + 0.8
            if msg.kind == 'data':
                color = 'tab:orange' if msg.retransmission else 'tab:blue'
                x0, x1 = SENDER_X, RECEIVER_X
                label = f"F{msg.seq_num}"
            else:
                color = 'tab:green'
                x0, x1 = RECEIVER_X, SENDER_X
                label = f"A{msg.seq_num}"

            if msg.lost:
                xm, ym = (x0 + x1) / 2, (y0 + y1) / 2
                ax.plot([x0, xm], [y0, ym], color=color, linewidth=1.2)
                ax.plot(xm, ym, marker='x', color='red', markersize=10, mew=2)
            else:
                ax.annotate(
                    "", xy=(x1, y1), xytext=(x0, y0),
                    arrowprops=dict(arrowstyle='->', color=color, linewidth=1.2)
                )
            ax.text((x0 + x1) / 2, (y0 + y1) / 2 - 0.15, label,
                    ha='center', fontsize=8, color=color)

        for row, seq_num in self.timeouts:
            ax.text(SENDER_X - 0.05, row + 0.3, f"timeout {seq_num}",
                    ha='right', fontsize=8, color='red')

        ax.set_xlim(-0.5, 1.3)
        ax.set_ylim(rows + 1.5, -1)
        ax.axis('off')
        ax.set_title(self.title, fontsize=12, fontweight='bold')
        plt.tight_layout()

        if output_file is None:
            os.makedirs(PLOTS_DIR, exist_ok=True)
            output_file = os.path.join(PLOTS_DIR, 'timeline.png')

        plt.savefig(output_file, dpi=120, bbox_inches='tight')
        plt.close(fig)

        print(f"Timeline saved to: {output_file}")
        return output_file
