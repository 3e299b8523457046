"""
Sliding Window Protocol (flow control only)

The sender transmits a full window, the receiver acknowledges every
frame, and the window slides by W. There is no error control, so the
channel is bypassed and loss specifications are ignored.
"""

from typing import List

from ..arq.receiver import SelectiveReceiver
from ..arq.sender import SelectiveAckSender
from ..arq.frame import Frame
from .base import ProtocolKind, ProtocolPolicy


class SlidingWindowPolicy(ProtocolPolicy):
    """Pure flow control: whole windows, ideal channel."""

    kind = ProtocolKind.SLIDING_WINDOW

    def __init__(self, frame_count, window_size, channel, trace, logger=None):
        super().__init__(frame_count, window_size, channel, trace, logger)
        self.sender = SelectiveAckSender(frame_count, window_size, trace)
        self.receiver = SelectiveReceiver(window_size, trace)

        self._arrivals: List[Frame] = []
        self._acks: List[Frame] = []

        if channel.pending_losses:
            self.logger.warning(
                f"Loss of frames {channel.pending_losses} ignored: "
                f"sliding window has no error control",
                "CHANNEL"
            )

    def on_send(self) -> bool:
        self._arrivals = self.sender.send_window()
        return bool(self._arrivals)

    def on_deliver_or_lose(self) -> bool:
        for frame in self._arrivals:
            ack = self.receiver.receive_frame(frame)
            if ack is not None:
                self._acks.append(ack)
        handled = bool(self._arrivals)
        self._arrivals = []
        return handled

    def on_ack_check(self) -> bool:
        for ack in self._acks:
            self.sender.process_ack(ack)
        self._acks = []
        return self.sender.slide_window() > 0

    @property
    def finished(self) -> bool:
        return self.sender.is_complete()

    def get_window_state(self) -> dict:
        return {
            'sender': self.sender.get_window_state(),
            'receiver': self.receiver.get_window_state()
        }
