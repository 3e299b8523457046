"""
Go-Back-N Protocol

Sliding window protocol with cumulative acknowledgments:
- Send up to W frames before waiting for an ACK, even past a loss
- Receiver only accepts the expected frame and discards the rest
- Base advances only over contiguous, in-order frames
- On timeout: go back to base and resend everything from there
"""

from typing import List

from ..arq.receiver import CumulativeReceiver
from ..arq.sender import CumulativeAckSender
from ..arq.frame import Frame
from .base import ProtocolKind, ProtocolPolicy


class GoBackNPolicy(ProtocolPolicy):
    """Go-Back-N: cumulative ACKs, discard out-of-order, resend from base."""

    kind = ProtocolKind.GO_BACK_N
    report_slides = True

    def __init__(self, frame_count, window_size, channel, trace, logger=None):
        super().__init__(frame_count, window_size, channel, trace, logger)
        self.sender = CumulativeAckSender(
            frame_count, self.window_size, trace, report_slides=self.report_slides
        )
        self.receiver = CumulativeReceiver(trace)

        self._arrivals: List[Frame] = []
        self._acks: List[Frame] = []

    def on_send(self) -> bool:
        sent = False
        while self.sender.can_send():
            frame = self.sender.send_next_frame()
            arrived = self._transmit(frame)
            if arrived is not None:
                self._arrivals.append(arrived)
            sent = True
        return sent

    def on_deliver_or_lose(self) -> bool:
        handled = bool(self._arrivals)
        for frame in self._arrivals:
            ack = self._return_ack(self.receiver.receive_frame(frame))
            if ack is not None:
                self._acks.append(ack)
        self._arrivals = []
        return handled

    def on_ack_check(self) -> bool:
        moved = False
        for ack in self._acks:
            moved = self.sender.process_ack(ack) or moved
        self._acks = []

        base = self.sender.check_timeout()
        if base is not None:
            self.logger.timeout(base)
            self.logger.retransmit(base)
            return True
        return moved

    @property
    def finished(self) -> bool:
        return self.sender.is_complete()

    def get_window_state(self) -> dict:
        return {
            'sender': self.sender.get_window_state(),
            'receiver': self.receiver.get_window_state()
        }
