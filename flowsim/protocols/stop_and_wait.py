"""
Stop-and-Wait Protocol

Send one frame, wait for its ACK, then send the next. A lost frame is
detected by timeout and the same frame is sent again.
"""

from .base import ProtocolKind
from .go_back_n import GoBackNPolicy


class StopAndWaitPolicy(GoBackNPolicy):
    """
    Stop-and-Wait as Go-Back-N with a single-frame window.

    The configured window size is ignored and no window events are
    reported since there is no window to speak of.
    """

    kind = ProtocolKind.STOP_AND_WAIT
    report_slides = False

    def __init__(self, frame_count, _window_size, channel, trace, logger=None):
        super().__init__(frame_count, 1, channel, trace, logger)
