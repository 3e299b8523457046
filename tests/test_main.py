"""
Tests for the command line interface.
"""

from flowsim.main import build_parser, main


class TestCli:
    """Tests for flowsim.main."""

    def test_single_run(self, capsys):
        code = main(["--single", "--protocol", "go_back_n",
                     "--frames", "5", "--window", "2", "--loss", "3"])
        out = capsys.readouterr().out

        assert code == 0
        assert "[Channel] Frame 3 LOST!" in out
        assert "[Receiver] Discarding Frame 4 (Out-of-Order)." in out
        assert "--- Transmission Complete ---" in out
        assert "Frames Sent: 7" in out

    def test_single_run_prints_windows(self, capsys):
        """The sender window is shown after every iteration that leaves one open."""
        main(["--single", "--protocol", "go_back_n",
              "--frames", "5", "--window", "2", "--loss", "3"])
        out = capsys.readouterr().out

        assert "Current Window:" in out
        assert "after iteration   1: [ 3 4 ]" in out
        assert "after iteration   3: [ 5 ]" in out
        assert "after iteration   4" not in out

    def test_selective_repeat_window_marks_acked(self, capsys):
        main(["--single", "--protocol", "selective_repeat",
              "--frames", "5", "--window", "4", "--loss", "2"])
        assert "after iteration   3: [ 2 (3) 4 5 ]" in capsys.readouterr().out

    def test_repeatable_loss(self):
        args = build_parser().parse_args(["--single", "--loss", "2", "--loss", "5"])
        assert args.loss == [2, 5]

    def test_invalid_configuration(self, capsys):
        code = main(["--single", "--window", "0"])
        assert code == 2
        assert "window_size" in capsys.readouterr().err

    def test_unknown_protocol(self, capsys):
        code = main(["--single", "--protocol", "token_ring"])
        assert code == 2
        assert "protocol" in capsys.readouterr().err

    def test_compare(self, capsys):
        code = main(["--compare", "--frames", "6", "--window", "3", "--loss", "2"])
        out = capsys.readouterr().out

        assert code == 0
        for label in ("Stop And Wait", "Sliding Window", "Go Back N", "Selective Repeat"):
            assert label in out

    def test_timeline_output(self, tmp_path, capsys):
        output = tmp_path / "t.png"
        code = main(["--single", "--protocol", "selective_repeat", "--frames", "3",
                     "--loss", "2", "--timeline", "--output", str(output)])

        assert code == 0
        assert output.exists()

    def test_sweep_and_visualize(self, tmp_path, capsys):
        csv_path = tmp_path / "results.csv"
        assert main(["--sweep", "--sweep-frames", "4", "--output", str(csv_path)]) == 0
        assert csv_path.exists()

        plots = tmp_path / "plots"
        assert main(["--visualize", "--csv", str(csv_path), "--output", str(plots)]) == 0
        assert (plots / "efficiency_heatmap.png").exists()

    def test_visualize_missing_csv(self, tmp_path, capsys):
        code = main(["--visualize", "--csv", str(tmp_path / "missing.csv")])
        assert code == 1

    def test_config(self, capsys):
        assert main(["--config"]) == 0
        assert "Total simulations: 120" in capsys.readouterr().out
