import pytest
import numpy as np
import sys
import os
from unittest.mock import patch

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ukf_tracking.errors import NumericalError
from ukf_tracking.main import build_parser, main
from ukf_tracking.sensors import read_measurements


class TestCommandLine:
    """Test the ukf-tracking entry point"""

    def test_parser_defaults(self):
        args = build_parser().parse_args([])

        assert args.input is None
        assert args.std_a == 3.0
        assert args.std_yawdd == 1.0
        assert not args.no_lidar and not args.no_radar

    def test_simulated_run(self, capsys):
        """A short simulated run prints RMSE and NIS"""
        assert main(['--seed', '1', '--duration', '3']) == 0

        output = capsys.readouterr().out
        assert "=== UKF tracking results ===" in output
        assert "RMSE  px=" in output
        assert "LIDAR NIS" in output
        assert "RADAR NIS" in output

    def test_dump_and_replay(self, tmp_path, capsys):
        """Dumped measurements can be read back as input"""
        dump = tmp_path / "measurements.txt"

        assert main(['--seed', '2', '--duration', '2', '--dump', str(dump)]) == 0
        assert len(read_measurements(dump)) == 41

        assert main(['--input', str(dump), '--no-radar']) == 0
        output = capsys.readouterr().out
        assert "Measurements processed: 41" in output

    def test_radar_disabled_reports_lidar_only(self, tmp_path, capsys):
        assert main(['--seed', '2', '--duration', '2', '--no-radar']) == 0

        output = capsys.readouterr().out
        assert "LIDAR NIS" in output
        assert "RADAR NIS" not in output

    def test_missing_input_file(self, tmp_path):
        assert main(['--input', str(tmp_path / "missing.txt")]) == 2

    def test_malformed_input_file(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("L 1.0 2.0 0\nX 1.0 2.0 50000\n")

        assert main(['--input', str(path)]) == 2

    def test_unwritable_dump_path(self, tmp_path):
        """A dump target that cannot be written is reported, not raised"""
        assert main(['--seed', '0', '--duration', '1', '--dump', str(tmp_path)]) == 2

    def test_plot_without_matplotlib(self, tmp_path):
        """Missing plotting support ends the run with an error code"""
        with patch.dict(sys.modules, {'ukf_tracking.visualization.plotter': None}):
            assert main(['--seed', '0', '--duration', '1', '--plot', str(tmp_path / "run.png")]) == 2

    def test_filter_error_exit_code(self):
        with patch('ukf_tracking.main.run_filter', side_effect=NumericalError("degenerate")):
            assert main(['--seed', '0', '--duration', '1']) == 1

    def test_plot_option(self, tmp_path):
        import matplotlib
        matplotlib.use('Agg')
        path = tmp_path / "run.png"

        assert main(['--seed', '0', '--duration', '1', '--plot', str(path)]) == 0
        assert path.exists()
