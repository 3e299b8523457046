"""
Tests for heatmap and timeline plots.
"""

import numpy as np
import pytest

from flowsim import run_protocol
from flowsim.simulation import BatchRunner, ParameterSweep
from flowsim.visualization import RetransmissionHeatmap, TimelinePlot, build_messages, plot_sweep


@pytest.fixture(scope="module")
def sweep_results():
    runner = BatchRunner(
        sweep=ParameterSweep(window_sizes=[1, 3], loss_frames=[0, 2, 4], frame_count=4),
        show_progress=False
    )
    return runner.run_sequential()


class TestRetransmissionHeatmap:
    """Tests for RetransmissionHeatmap."""

    def test_axes_from_results(self, sweep_results):
        heatmap = RetransmissionHeatmap(results=sweep_results)

        assert heatmap.protocols == ["stop_and_wait", "sliding_window", "go_back_n", "selective_repeat"]
        assert heatmap.window_sizes == [1, 3]
        assert heatmap.loss_frames == [0, 2, 4]

    def test_matrix_values(self, sweep_results):
        matrix = RetransmissionHeatmap(results=sweep_results).create_matrix("selective_repeat")

        assert matrix.shape == (2, 3)
        np.testing.assert_allclose(matrix[:, 0], 1.0)
        np.testing.assert_allclose(matrix[:, 1:], 4 / 5)

    def test_plot_writes_png(self, sweep_results, tmp_path):
        output = tmp_path / "eff.png"
        path = RetransmissionHeatmap(results=sweep_results).plot(str(output))

        assert path == str(output)
        assert output.stat().st_size > 0

    def test_plot_from_csv(self, sweep_results, tmp_path):
        runner = BatchRunner(show_progress=False)
        runner.results = sweep_results
        csv_path = runner.save_results(str(tmp_path / "results.csv"))

        heatmap = RetransmissionHeatmap(csv_file=csv_path)
        assert heatmap.window_sizes == [1, 3]

    def test_plot_sweep(self, sweep_results, tmp_path):
        files = plot_sweep(sweep_results, str(tmp_path / "plots"))
        assert len(files) == 2
        assert all((tmp_path / "plots" / name).exists()
                   for name in ("efficiency_heatmap.png", "retransmissions_heatmap.png"))

    def test_empty_results(self):
        with pytest.raises(ValueError):
            RetransmissionHeatmap(results=[]).plot()


class TestTimeline:
    """Tests for the sequence diagram."""

    def test_build_messages(self):
        result = run_protocol("go_back_n", 5, 2, 3)
        messages, timeouts = build_messages(result.events)

        data = [m for m in messages if m.kind == 'data']
        acks = [m for m in messages if m.kind == 'ack']

        assert [m.seq_num for m in data] == [1, 2, 3, 4, 3, 4, 5]
        assert [m.seq_num for m in data if m.lost] == [3]
        assert [m.seq_num for m in data if m.retransmission] == [3, 4]
        assert len(acks) == 5
        assert timeouts == [(6, 3)]

    def test_plot_writes_png(self, tmp_path):
        result = run_protocol("selective_repeat", 4, 2, 2)
        output = tmp_path / "timeline.png"

        TimelinePlot(result.events, title="Selective Repeat").plot(str(output))

        assert output.stat().st_size > 0
