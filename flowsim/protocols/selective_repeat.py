"""
Selective Repeat Protocol

Sliding window protocol with individual acknowledgments:
- Each iteration tries, in priority order, to send a new frame, to slide
  the window, and only if neither happened, to time out the base frame
- Receiver buffers out-of-order frames and releases them once the gap
  is filled
- Only the frame at base is ever retransmitted
"""

from typing import Optional

from ..arq.receiver import SelectiveReceiver
from ..arq.sender import SelectiveAckSender
from ..arq.frame import Frame
from .base import ProtocolKind, ProtocolPolicy


class SelectiveRepeatPolicy(ProtocolPolicy):
    """Selective Repeat: individual ACKs, receiver buffering, resend base only."""

    kind = ProtocolKind.SELECTIVE_REPEAT

    def __init__(self, frame_count, window_size, channel, trace, logger=None):
        super().__init__(frame_count, window_size, channel, trace, logger)
        self.sender = SelectiveAckSender(frame_count, window_size, trace)
        self.receiver = SelectiveReceiver(window_size, trace)

        self._arrival: Optional[Frame] = None
        self._ack: Optional[Frame] = None
        self._acted = False

    @property
    def ack_table(self):
        return self.sender.ack_table

    def on_send(self) -> bool:
        self._acted = False
        frame = self.sender.send_next_frame()
        if frame is None:
            return False
        self._arrival = self._transmit(frame)
        self._acted = True
        return True

    def on_deliver_or_lose(self) -> bool:
        if self._arrival is None:
            return False
        self._ack = self._return_ack(self.receiver.receive_frame(self._arrival))
        self._arrival = None
        return True

    def on_ack_check(self) -> bool:
        if self._ack is not None:
            self.sender.process_ack(self._ack)
            self._ack = None

        if self.sender.slide_window():
            self._acted = True

        if not self._acted and self.sender.base_timed_out():
            self._retransmit_base()
            self.sender.slide_window()
            return True
        return self._acted

    def _retransmit_base(self):
        """Resend the base frame and run it through receiver and back."""
        frame = self.sender.retransmit_base()
        self.logger.timeout(frame.seq_num)
        self.logger.retransmit(frame.seq_num)

        arrived = self._transmit(frame)
        if arrived is None:
            return
        ack = self._return_ack(self.receiver.receive_frame(arrived))
        if ack is not None:
            self.sender.process_ack(ack)

    @property
    def finished(self) -> bool:
        return self.sender.is_complete()

    def get_window_state(self) -> dict:
        sender_state = self.sender.get_window_state()
        sender_state['acked'] = [
            seq for seq in range(self.sender.window.base, self.sender.window.upper + 1)
            if self.ack_table[seq]
        ]
        return {
            'sender': sender_state,
            'receiver': self.receiver.get_window_state()
        }
