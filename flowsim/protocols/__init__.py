"""
Protocols package - the four flow/error-control disciplines.

Each discipline is a ProtocolPolicy driven by the shared engine loop.
"""

from typing import Dict, Type, Union

from .base import ProtocolKind, ProtocolPolicy
from .go_back_n import GoBackNPolicy
from .selective_repeat import SelectiveRepeatPolicy
from .sliding_window import SlidingWindowPolicy
from .stop_and_wait import StopAndWaitPolicy

POLICIES: Dict[ProtocolKind, Type[ProtocolPolicy]] = {
    ProtocolKind.STOP_AND_WAIT: StopAndWaitPolicy,
    ProtocolKind.SLIDING_WINDOW: SlidingWindowPolicy,
    ProtocolKind.GO_BACK_N: GoBackNPolicy,
    ProtocolKind.SELECTIVE_REPEAT: SelectiveRepeatPolicy,
}


def create_policy(
    kind: Union[ProtocolKind, str],
    frame_count: int,
    window_size: int,
    channel,
    trace,
    logger=None
) -> ProtocolPolicy:
    """Instantiate the policy for a protocol kind."""
    policy_cls = POLICIES[ProtocolKind.parse(kind)]
    return policy_cls(frame_count, window_size, channel, trace, logger)


__all__ = [
    'GoBackNPolicy',
    'POLICIES',
    'ProtocolKind',
    'ProtocolPolicy',
    'SelectiveRepeatPolicy',
    'SlidingWindowPolicy',
    'StopAndWaitPolicy',
    'create_policy'
]
