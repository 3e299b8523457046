"""
Tests for the four protocol engines.
"""

import pytest

from flowsim import AckKind, EventType, InvalidConfiguration, ProtocolKind, run_protocol
from flowsim.arq import EventTrace
from flowsim.channel import LossyChannel
from flowsim.protocols import create_policy
from flowsim.utils import LogLevel, SimulationLogger

E = EventType
ALL_PROTOCOLS = list(ProtocolKind)
ERROR_CONTROL = [ProtocolKind.STOP_AND_WAIT, ProtocolKind.GO_BACK_N, ProtocolKind.SELECTIVE_REPEAT]


def pairs(result):
    """(type, seq) pairs of a trace."""
    return [(e.event_type, e.seq_num) for e in result.events]


class TestLosslessRuns:
    """Every protocol on an ideal channel."""

    @pytest.mark.parametrize("kind", ALL_PROTOCOLS)
    @pytest.mark.parametrize("frames,window", [(1, 1), (5, 2), (7, 3), (8, 8), (4, 10)])
    def test_one_send_and_delivery_per_frame(self, kind, frames, window):
        """Each frame is sent and delivered exactly once, nothing is lost."""
        result = run_protocol(kind, frames, window, 0)

        expected = list(range(1, frames + 1))
        assert sorted(result.seq_nums(E.FRAME_SENT)) == expected
        assert sorted(result.seq_nums(E.FRAME_DELIVERED)) == expected
        assert result.count(E.FRAME_LOST) == 0
        assert result.count(E.TIMEOUT) == 0
        assert result.count(E.RETRANSMIT) == 0
        assert result.complete

    @pytest.mark.parametrize("kind", ALL_PROTOCOLS)
    def test_trace_ends_with_complete(self, kind):
        """COMPLETE is the last event and appears once."""
        result = run_protocol(kind, 6, 3)

        assert result.events[-1].event_type == E.COMPLETE
        assert result.events[-1].seq_num == 6
        assert result.count(E.COMPLETE) == 1

    @pytest.mark.parametrize("kind", ALL_PROTOCOLS)
    def test_zero_frames(self, kind):
        """An empty transfer completes immediately."""
        result = run_protocol(kind, 0, 3)

        assert pairs(result) == [(E.COMPLETE, 0)]
        assert result.complete
        assert result.iterations == 0

    @pytest.mark.parametrize("kind", ALL_PROTOCOLS)
    def test_loss_outside_range_is_ignored(self, kind):
        """A loss frame beyond N never fires."""
        assert run_protocol(kind, 4, 2, 9).events == run_protocol(kind, 4, 2, 0).events

    @pytest.mark.parametrize("kind", ALL_PROTOCOLS)
    def test_deterministic(self, kind):
        """Running the same configuration twice yields identical traces."""
        first = run_protocol(kind, 9, 3, 4)
        second = run_protocol(kind, 9, 3, 4)

        assert first.events == second.events
        assert first.to_rows() == second.to_rows()


class TestStopAndWait:
    """Tests for Stop-and-Wait."""

    def test_loss_retries_same_frame(self):
        """A lost frame is timed out and sent again before moving on."""
        result = run_protocol(ProtocolKind.STOP_AND_WAIT, 2, 1, 1)

        assert pairs(result) == [
            (E.FRAME_SENT, 1), (E.FRAME_LOST, 1), (E.TIMEOUT, 1), (E.RETRANSMIT, 1),
            (E.FRAME_SENT, 1), (E.FRAME_DELIVERED, 1), (E.ACK_SENT, 1), (E.ACK_RECEIVED, 1),
            (E.FRAME_SENT, 2), (E.FRAME_DELIVERED, 2), (E.ACK_SENT, 2), (E.ACK_RECEIVED, 2),
            (E.COMPLETE, 2),
        ]

    def test_window_size_ignored(self):
        """Stop-and-Wait behaves identically for every window size."""
        base = run_protocol("stop_and_wait", 5, 1, 3)
        for window in (2, 4, 16):
            assert run_protocol("stop_and_wait", 5, window, 3).events == base.events

    def test_policy_window_is_one(self):
        """The configured window size never reaches the policy."""
        policy = create_policy("stop_and_wait", 5, 4, LossyChannel(), EventTrace())
        assert policy.window_size == 1
        assert policy.get_window_state()['sender']['size'] == 1

    def test_no_window_slides(self):
        """There is no window to report on."""
        result = run_protocol(ProtocolKind.STOP_AND_WAIT, 4, 1, 2)
        assert result.count(E.WINDOW_SLIDE) == 0

    def test_acks_are_cumulative(self):
        """ACK events carry the cumulative kind."""
        result = run_protocol(ProtocolKind.STOP_AND_WAIT, 3)
        acks = [e for e in result.events if e.event_type in (E.ACK_SENT, E.ACK_RECEIVED)]
        assert acks and all(e.ack_kind == AckKind.CUMULATIVE for e in acks)

    def test_one_frame_in_flight(self):
        """Each frame is acknowledged before the next one is sent."""
        result = run_protocol(ProtocolKind.STOP_AND_WAIT, 4, 4)
        last_acked = 0
        for event in result.events:
            if event.event_type == E.FRAME_SENT:
                assert event.seq_num == last_acked + 1
            elif event.event_type == E.ACK_RECEIVED:
                last_acked = event.seq_num


class TestSlidingWindow:
    """Tests for flow-control-only Sliding Window."""

    def test_whole_windows(self):
        """Frames go out a window at a time, final window partial."""
        result = run_protocol(ProtocolKind.SLIDING_WINDOW, 5, 2)

        assert pairs(result)[:10] == [
            (E.FRAME_SENT, 1), (E.FRAME_SENT, 2),
            (E.FRAME_DELIVERED, 1), (E.ACK_SENT, 1),
            (E.FRAME_DELIVERED, 2), (E.ACK_SENT, 2),
            (E.ACK_RECEIVED, 1), (E.ACK_RECEIVED, 2),
            (E.WINDOW_SLIDE, 1), (E.WINDOW_SLIDE, 2),
        ]
        assert result.iterations == 3
        assert result.seq_nums(E.WINDOW_SLIDE) == [1, 2, 3, 4, 5]

    def test_acks_are_individual(self):
        result = run_protocol(ProtocolKind.SLIDING_WINDOW, 4, 2)
        acks = [e for e in result.events if e.event_type == E.ACK_SENT]
        assert all(e.ack_kind == AckKind.INDIVIDUAL for e in acks)

    def test_loss_is_ignored(self, capsys):
        """No error control: a loss specification changes nothing."""
        logger = SimulationLogger(level=LogLevel.WARNING, use_colors=False)
        lossy = run_protocol(ProtocolKind.SLIDING_WINDOW, 6, 3, [2, 5], logger=logger)
        clean = run_protocol(ProtocolKind.SLIDING_WINDOW, 6, 3, 0)

        assert lossy.events == clean.events
        assert lossy.count(E.FRAME_LOST) == 0
        assert "ignored" in capsys.readouterr().out

    def test_window_equals_frame_count(self):
        """W = N is a single cycle."""
        assert run_protocol(ProtocolKind.SLIDING_WINDOW, 6, 6).iterations == 1


class TestGoBackN:
    """Tests for Go-Back-N."""

    def test_concrete_scenario(self):
        """N=5, W=2, loss 3: 1,2 acked; 3 lost, 4 discarded; resend 3,4; send 5."""
        result = run_protocol(ProtocolKind.GO_BACK_N, 5, 2, 3)

        assert pairs(result) == [
            # cycle 1
            (E.FRAME_SENT, 1), (E.FRAME_SENT, 2),
            (E.FRAME_DELIVERED, 1), (E.ACK_SENT, 1),
            (E.FRAME_DELIVERED, 2), (E.ACK_SENT, 2),
            (E.ACK_RECEIVED, 1), (E.WINDOW_SLIDE, 1),
            (E.ACK_RECEIVED, 2), (E.WINDOW_SLIDE, 2),
            # cycle 2
            (E.FRAME_SENT, 3), (E.FRAME_LOST, 3), (E.FRAME_SENT, 4),
            (E.FRAME_DISCARDED, 4),
            (E.TIMEOUT, 3), (E.RETRANSMIT, 3),
            # cycle 3
            (E.FRAME_SENT, 3), (E.FRAME_SENT, 4),
            (E.FRAME_DELIVERED, 3), (E.ACK_SENT, 3),
            (E.FRAME_DELIVERED, 4), (E.ACK_SENT, 4),
            (E.ACK_RECEIVED, 3), (E.WINDOW_SLIDE, 3),
            (E.ACK_RECEIVED, 4), (E.WINDOW_SLIDE, 4),
            # cycle 4
            (E.FRAME_SENT, 5), (E.FRAME_DELIVERED, 5), (E.ACK_SENT, 5),
            (E.ACK_RECEIVED, 5), (E.WINDOW_SLIDE, 5),
            (E.COMPLETE, 5),
        ]
        assert result.metrics['frames_sent'] == 7
        assert result.metrics['retransmissions'] == 2

    @pytest.mark.parametrize("frames,window", [(5, 2), (8, 3), (6, 6), (4, 1)])
    def test_single_timeout_and_resume_at_loss(self, frames, window):
        """One Timeout(L) for any L, and the next send resumes at L."""
        for loss in range(1, frames + 1):
            result = run_protocol(ProtocolKind.GO_BACK_N, frames, window, loss)
            events = list(result.events)

            assert result.seq_nums(E.TIMEOUT) == [loss]
            index = next(i for i, e in enumerate(events) if e.event_type == E.TIMEOUT)
            resumed = next(e for e in events[index:] if e.event_type == E.FRAME_SENT)
            assert resumed.seq_num == loss
            assert sorted(result.seq_nums(E.FRAME_DELIVERED)) == list(range(1, frames + 1))

    def test_out_of_order_frames_discarded(self):
        """Everything after the gap in the same window is discarded."""
        result = run_protocol(ProtocolKind.GO_BACK_N, 8, 4, 2)

        assert result.seq_nums(E.FRAME_DISCARDED) == [3, 4]
        assert result.count(E.FRAME_BUFFERED) == 0

    def test_delivery_in_order(self):
        """Receiver delivers strictly in sequence."""
        result = run_protocol(ProtocolKind.GO_BACK_N, 10, 4, [3, 7])
        assert result.seq_nums(E.FRAME_DELIVERED) == list(range(1, 11))

    def test_window_equals_frame_count(self):
        """W = N: one cycle, plus one resend cycle after a loss."""
        assert run_protocol(ProtocolKind.GO_BACK_N, 4, 4, 0).iterations == 1
        assert run_protocol(ProtocolKind.GO_BACK_N, 4, 4, 2).iterations == 2

    def test_multiple_losses(self):
        """Each scheduled loss times out once."""
        result = run_protocol(ProtocolKind.GO_BACK_N, 6, 3, [2, 5])

        assert result.seq_nums(E.TIMEOUT) == [2, 5]
        assert result.seq_nums(E.FRAME_LOST) == [2, 5]
        assert result.seq_nums(E.FRAME_DISCARDED) == [3, 6]

    def test_acks_cumulative(self):
        result = run_protocol(ProtocolKind.GO_BACK_N, 4, 2, 2)
        acks = [e for e in result.events if e.event_type in (E.ACK_SENT, E.ACK_RECEIVED)]
        assert all(e.ack_kind == AckKind.CUMULATIVE for e in acks)


class TestSelectiveRepeat:
    """Tests for Selective Repeat."""

    def test_lossless_single_pass(self):
        """N=4, W=4: every frame sent and acked once, base walks 1 to 5."""
        result = run_protocol(ProtocolKind.SELECTIVE_REPEAT, 4, 4, 0)

        assert result.seq_nums(E.FRAME_SENT) == [1, 2, 3, 4]
        assert result.seq_nums(E.ACK_RECEIVED) == [1, 2, 3, 4]
        assert result.seq_nums(E.WINDOW_SLIDE) == [1, 2, 3, 4]
        assert result.count(E.TIMEOUT) == 0
        assert result.count(E.FRAME_BUFFERED) == 0

    def test_buffered_frames_released_after_retransmit(self):
        """Frames behind a gap are buffered and released with the resend."""
        result = run_protocol(ProtocolKind.SELECTIVE_REPEAT, 5, 4, 2)

        assert pairs(result) == [
            (E.FRAME_SENT, 1), (E.FRAME_DELIVERED, 1), (E.ACK_SENT, 1),
            (E.ACK_RECEIVED, 1), (E.WINDOW_SLIDE, 1),
            (E.FRAME_SENT, 2), (E.FRAME_LOST, 2),
            (E.FRAME_SENT, 3), (E.FRAME_DELIVERED, 3), (E.FRAME_BUFFERED, 3),
            (E.ACK_SENT, 3), (E.ACK_RECEIVED, 3),
            (E.FRAME_SENT, 4), (E.FRAME_DELIVERED, 4), (E.FRAME_BUFFERED, 4),
            (E.ACK_SENT, 4), (E.ACK_RECEIVED, 4),
            (E.FRAME_SENT, 5), (E.FRAME_DELIVERED, 5), (E.FRAME_BUFFERED, 5),
            (E.ACK_SENT, 5), (E.ACK_RECEIVED, 5),
            (E.TIMEOUT, 2), (E.RETRANSMIT, 2), (E.FRAME_SENT, 2),
            (E.FRAME_DELIVERED, 2), (E.BUFFERED_DELIVERY, 2),
            (E.ACK_SENT, 2), (E.ACK_RECEIVED, 2),
            (E.WINDOW_SLIDE, 2), (E.WINDOW_SLIDE, 3),
            (E.WINDOW_SLIDE, 4), (E.WINDOW_SLIDE, 5),
            (E.COMPLETE, 5),
        ]
        release = next(e for e in result.events if e.event_type == E.BUFFERED_DELIVERY)
        assert release.frames == (3, 4, 5)

    @pytest.mark.parametrize("frames,window", [(5, 2), (5, 4), (7, 3), (6, 6), (3, 1)])
    def test_lost_frame_acked_once_via_timeout(self, frames, window):
        """For any L, only L times out, it is acked exactly once, and the run ends."""
        for loss in range(1, frames + 1):
            result = run_protocol(ProtocolKind.SELECTIVE_REPEAT, frames, window, loss)

            assert result.seq_nums(E.TIMEOUT) == [loss]
            assert result.count(E.ACK_RECEIVED, loss) == 1
            assert result.count(E.FRAME_SENT, loss) == 2
            assert result.seq_nums(E.WINDOW_SLIDE) == list(range(1, frames + 1))
            assert result.complete

    def test_only_lost_frames_resent(self):
        """Retransmissions equal the number of losses."""
        result = run_protocol(ProtocolKind.SELECTIVE_REPEAT, 10, 4, [2, 3, 8])

        assert result.metrics['retransmissions'] == 3
        assert result.seq_nums(E.TIMEOUT) == [2, 3, 8]
        assert result.count(E.FRAME_DISCARDED) == 0

    def test_acks_individual(self):
        result = run_protocol(ProtocolKind.SELECTIVE_REPEAT, 4, 2, 1)
        acks = [e for e in result.events if e.event_type in (E.ACK_SENT, E.ACK_RECEIVED)]
        assert all(e.ack_kind == AckKind.INDIVIDUAL for e in acks)

    def test_window_bound_respected(self):
        """Never more than W frames beyond base are outstanding."""
        window = 3
        result = run_protocol(ProtocolKind.SELECTIVE_REPEAT, 9, window, 2)
        base = 1
        for event in result.events:
            if event.event_type == E.WINDOW_SLIDE:
                base = event.seq_num + 1
            elif event.event_type == E.FRAME_SENT:
                assert base <= event.seq_num < base + window


class TestInvalidConfiguration:
    """Bad parameters are rejected before anything runs."""

    @pytest.mark.parametrize("kwargs", [
        dict(kind="go_back_n", frame_count=-1),
        dict(kind="go_back_n", frame_count=5, window_size=0),
        dict(kind="selective_repeat", frame_count=5, window_size=-2),
        dict(kind="stop_and_wait", frame_count=5, window_size=0),
        dict(kind="go_back_n", frame_count=5, loss_frame=-1),
        dict(kind="go_back_n", frame_count=5, loss_frame=[2, -3]),
        dict(kind="go_back_n", frame_count=20, window_size=4, loss_frame="12"),
        dict(kind="go_back_n", frame_count=5, loss_frame=True),
        dict(kind="go_back_n", frame_count=5, loss_frame=[True]),
        dict(kind="go_back_n", frame_count=True, window_size=1),
        dict(kind="go_back_n", frame_count=5, window_size=True),
        dict(kind="token_ring", frame_count=5),
    ])
    def test_rejected(self, kwargs):
        with pytest.raises(InvalidConfiguration):
            run_protocol(**kwargs)

    def test_is_value_error(self):
        """Callers catching ValueError see it too."""
        with pytest.raises(ValueError) as excinfo:
            run_protocol("go_back_n", 5, 0)
        assert excinfo.value.field == "window_size"
        assert "window_size" in str(excinfo.value)

    @pytest.mark.parametrize("name", ["GO_BACK_N", "go-back-n", "Selective_Repeat", "stop_and_wait"])
    def test_kind_spellings(self, name):
        assert run_protocol(name, 2).complete
