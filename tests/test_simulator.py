"""
Tests for the engine loop, metrics, logging and trace rendering.
"""

import pytest

from flowsim import EventType, InvalidConfiguration, ProtocolKind, run_protocol
from flowsim.config import (
    DEFAULT_LOG_LEVEL, calculate_gbn_worst_case_resend, calculate_window_cycles
)
from flowsim.simulation import Simulator, SimulatorConfig
from flowsim.utils import (
    LogLevel, MetricsCollector, SimulationLogger, describe_event, format_window,
    render_trace, summarize
)
from flowsim.arq import AckKind, Event

E = EventType


def quiet_logger(level=LogLevel.ERROR, **kwargs):
    return SimulationLogger(name="test", level=level, use_colors=False, **kwargs)


class TestSimulatorConfig:
    """Tests for configuration validation."""

    def test_defaults_valid(self):
        config = SimulatorConfig()
        config.validate()
        assert config.kind == ProtocolKind.GO_BACK_N

    def test_default_log_level(self):
        assert SimulatorConfig().log_level == DEFAULT_LOG_LEVEL
        assert LogLevel(DEFAULT_LOG_LEVEL) == LogLevel.WARNING

    def test_to_dict(self):
        config = SimulatorConfig(protocol="selective-repeat", frame_count=6,
                                 window_size=3, loss_frame=[4, 2])
        assert config.to_dict() == {
            'protocol': 'selective_repeat',
            'frame_count': 6,
            'window_size': 3,
            'loss_frames': [2, 4]
        }

    @pytest.mark.parametrize("field,value", [
        ("frame_count", -3),
        ("frame_count", "5"),
        ("frame_count", True),
        ("window_size", 0),
        ("window_size", True),
        ("loss_frame", -1),
        ("loss_frame", "12"),
        ("protocol", "carrier_pigeon"),
    ])
    def test_rejects(self, field, value):
        config = SimulatorConfig(**{field: value})
        with pytest.raises(InvalidConfiguration) as excinfo:
            config.validate()
        assert excinfo.value.field == field

    def test_simulator_validates_on_construction(self):
        with pytest.raises(InvalidConfiguration):
            Simulator(SimulatorConfig(window_size=0))


class TestSimulator:
    """Tests for the engine loop."""

    def test_run_result(self):
        config = SimulatorConfig(protocol="go_back_n", frame_count=5, window_size=2, loss_frame=3)
        result = Simulator(config, logger=quiet_logger()).run()

        assert result.complete
        assert result.iterations == 4
        assert result.config['loss_frames'] == [3]
        assert result.to_rows()[0] == {
            'index': 0, 'event': 'frame_sent', 'seq_num': 1, 'ack_kind': None, 'frames': []
        }

    def test_rerun_is_fresh(self):
        """Each run builds a new channel, so the loss fires again."""
        sim = Simulator(SimulatorConfig(protocol="stop_and_wait", frame_count=3, loss_frame=2),
                        logger=quiet_logger())
        first = sim.run()
        second = sim.run()

        assert first.events == second.events
        assert second.metrics['frames_lost'] == 1

    def test_step_reports_activity(self):
        sim = Simulator(SimulatorConfig(protocol="go_back_n", frame_count=2, window_size=2),
                        logger=quiet_logger())
        sim._build()

        assert sim.step()
        assert sim.policy.finished

    def test_on_step_receives_window_states(self):
        steps = []
        config = SimulatorConfig(protocol="go_back_n", frame_count=5, window_size=2, loss_frame=3)
        result = Simulator(config, logger=quiet_logger(),
                           on_step=lambda i, state: steps.append((i, state))).run()

        assert [i for i, _ in steps] == list(range(1, result.iterations + 1))
        first = steps[0][1]['sender']
        assert (first['base'], first['upper']) == (3, 4)

    def test_window_state_snapshot(self):
        sim = Simulator(SimulatorConfig(protocol="selective_repeat", frame_count=5,
                                        window_size=4, loss_frame=2),
                        logger=quiet_logger())
        sim._build()
        for _ in range(3):
            sim.step()

        state = sim.policy.get_window_state()
        assert state['sender']['base'] == 2
        assert state['sender']['acked'] == [3]
        assert state['receiver']['buffered_frames'] == [3]


class TestMetrics:
    """Tests for MetricsCollector."""

    def test_go_back_n_summary(self):
        result = run_protocol("go_back_n", 5, 2, 3, logger=quiet_logger())
        m = result.metrics

        assert m['frames_sent'] == 7
        assert m['unique_frames'] == 5
        assert m['retransmissions'] == 2
        assert m['frames_lost'] == 1
        assert m['frames_discarded'] == 1
        assert m['frames_delivered'] == 5
        assert m['timeouts'] == 1
        assert m['window_slides'] == 5
        assert m['iterations'] == 4
        assert m['efficiency'] == pytest.approx(5 / 7)
        assert m['retransmission_rate'] == pytest.approx(2 / 5)

    def test_selective_repeat_release_count(self):
        result = run_protocol("selective_repeat", 5, 4, 2, logger=quiet_logger())
        assert result.metrics['frames_buffered'] == 3
        assert result.metrics['frames_released'] == 3

    def test_summarize_matches_live_collection(self):
        result = run_protocol("selective_repeat", 8, 3, [2, 6], logger=quiet_logger())
        assert summarize(result.events, 8, result.iterations) == result.metrics

    def test_empty(self):
        collector = MetricsCollector(0)
        assert collector.calculate_efficiency() == 1.0
        assert collector.calculate_retransmission_rate() == 0.0

    def test_reset(self):
        collector = MetricsCollector(1)
        collector.record(Event(E.FRAME_SENT, 1))
        collector.record(Event(E.FRAME_SENT, 1))
        assert collector.retransmissions == 1

        collector.reset()

        assert collector.frames_sent == 0
        assert collector.retransmissions == 0


class TestLogging:
    """Tests for SimulationLogger integration."""

    def test_events_logged_at_debug(self, capsys):
        run_protocol("go_back_n", 5, 2, 3, logger=quiet_logger(LogLevel.DEBUG))
        out = capsys.readouterr().out

        assert "[TX] FRAME_SENT(1)" in out
        assert "[RX] FRAME_DISCARDED(4)" in out
        assert "[TIMEOUT] Timeout for frame 3" in out
        assert "[tick     2]" in out
        assert "Simulation started" in out

    def test_warning_level_shows_timeouts_only(self, capsys):
        logger = quiet_logger(LogLevel.WARNING)
        run_protocol("selective_repeat", 4, 2, 1, logger=logger)
        out = capsys.readouterr().out

        assert "Timeout for frame 1" in out
        assert "FRAME_SENT" not in out
        assert logger.get_summary()['message_counts'][LogLevel.WARNING] == 1

    def test_run_protocol_is_quiet_by_default(self, capsys):
        """Timeouts are not printed unless a logger asks for them."""
        result = run_protocol("go_back_n", 5, 2, 3)

        assert result.count(E.TIMEOUT) == 1
        assert capsys.readouterr().out == ""

    def test_log_file_has_no_colors(self, tmp_path, capsys):
        path = tmp_path / "logs" / "run.log"
        logger = SimulationLogger(name="file", level=LogLevel.INFO, log_file=str(path))
        run_protocol("stop_and_wait", 2, 1, 1, logger=logger)
        logger.close()

        text = path.read_text()
        assert "Simulation ended" in text
        assert "\033[" not in text

    def test_category_mapping(self):
        assert SimulationLogger.category_for("ACK_SENT") == "ACK"
        assert SimulationLogger.category_for("FRAME_LOST") == "TX"
        assert SimulationLogger.category_for("BUFFERED_DELIVERY") == "RX"
        assert SimulationLogger.category_for("WINDOW_SLIDE") == "WINDOW"
        assert SimulationLogger.category_for("COMPLETE") == "COMPLETE"


class TestRender:
    """Tests for trace narration."""

    def test_describe(self):
        assert describe_event(Event(E.FRAME_SENT, 3)) == "[Sender] Sending Frame 3"
        assert describe_event(Event(E.FRAME_LOST, 3)) == "[Channel] Frame 3 LOST!"
        assert describe_event(Event(E.ACK_SENT, 2, AckKind.CUMULATIVE)) == \
            "[Receiver] Sending Cumulative ACK 2."
        assert describe_event(Event(E.ACK_SENT, 2, AckKind.INDIVIDUAL)) == \
            "[Receiver] Sending Individual ACK for Frame 2."
        assert describe_event(Event(E.BUFFERED_DELIVERY, 2, frames=(3, 4))) == \
            "[Receiver] Delivering buffered Frames 3, 4 in order."
        assert describe_event(Event(E.COMPLETE, 5)) == "--- Transmission Complete ---"

    def test_render_numbered(self):
        result = run_protocol("stop_and_wait", 1, logger=quiet_logger())
        lines = render_trace(result.events, numbered=True)

        assert len(lines) == len(result.events)
        assert lines[0] == "   1. [Sender] Sending Frame 1"

    def test_format_window(self):
        assert format_window(3, 5, acked=[4]) == "[ 3 (4) 5 ]"


class TestDerivedConfig:
    """Tests for config helpers."""

    def test_window_cycles(self):
        assert calculate_window_cycles(5, 2) == 3
        assert calculate_window_cycles(4, 4) == 1
        assert calculate_window_cycles(0, 4) == 0

    def test_gbn_resend_bound_holds(self):
        for loss in range(1, 9):
            result = run_protocol("go_back_n", 8, 3, loss, logger=quiet_logger())
            assert result.metrics['retransmissions'] <= calculate_gbn_worst_case_resend(8, 3, loss)
        assert calculate_gbn_worst_case_resend(8, 3, 0) == 0
