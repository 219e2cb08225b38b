import pytest
import numpy as np
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ukf_tracking.sensors import LidarSensor, SensorType
from ukf_tracking.simulation import (TrajectoryGenerator, TrajectoryParameters, generate_scenario,
                                     ground_truth_vector)


class TestTrajectoryParameters:
    """Test trajectory parameter validation"""

    def test_defaults(self):
        params = TrajectoryParameters()

        assert params.speed == 5.0
        assert params.step_us == 50_000

    @pytest.mark.parametrize("kwargs", [
        {"speed": -1.0},
        {"duration": 0.0},
        {"step_us": 0},
        {"yaw_rate_period": 0.0},
        {"initial_position": (1.0, 2.0, 3.0)},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ValueError):
            TrajectoryParameters(**kwargs)


class TestTrajectoryGenerator:
    """Test ground-truth trajectories"""

    def test_straight_line(self):
        """Zero yaw rate moves the object along its heading"""
        params = TrajectoryParameters(yaw_rate=0.0, yaw_rate_amplitude=0.0, duration=2.0)

        trajectory = TrajectoryGenerator(params).generate()

        assert len(trajectory) == 41
        timestamp, state = trajectory[-1]
        assert timestamp == 2_000_000
        np.testing.assert_allclose(state, [10.6, 0.6, 5.0, 0.0, 0.0], atol=1e-9)

    def test_constant_turn_is_a_circle(self):
        """Constant yaw rate keeps the object on a circle of radius v / yaw rate"""
        params = TrajectoryParameters(yaw_rate=0.5, yaw_rate_amplitude=0.0, duration=10.0)
        center = np.array([0.6, 10.6])

        trajectory = TrajectoryGenerator(params).generate()

        radii = [np.linalg.norm(state[:2] - center) for _, state in trajectory]
        np.testing.assert_allclose(radii, 10.0, atol=1e-9)
        assert trajectory[-1][1][3] == pytest.approx(5.0)

    def test_start_offset(self):
        """Timestamps start at the requested offset"""
        params = TrajectoryParameters(duration=1.0)

        timestamps = TrajectoryGenerator(params).timestamps(start_us=1477010443000000)

        assert timestamps[0] == 1477010443000000
        assert np.all(np.diff(timestamps) == 50_000)

    def test_ground_truth_vector(self):
        """Speed and heading map to velocity components"""
        gt = ground_truth_vector(np.array([1.0, 2.0, 2.0, np.pi / 2, 0.1]))

        np.testing.assert_allclose(gt, [1.0, 2.0, 0.0, 2.0], atol=1e-12)


class TestScenario:
    """Test interleaved lidar/radar recordings"""

    def test_interleaving(self):
        """Lidar starts and the sensors alternate"""
        records = generate_scenario(TrajectoryParameters(duration=2.0), seed=0)

        assert len(records) == 41
        assert records[0].sample.sensor_type is SensorType.LIDAR
        assert records[1].sample.sensor_type is SensorType.RADAR
        kinds = [r.sample.sensor_type for r in records]
        assert kinds.count(SensorType.LIDAR) == 21
        assert all(r.ground_truth is not None for r in records)
        assert np.all(np.diff([r.sample.timestamp for r in records]) > 0)

    def test_seed_is_reproducible(self):
        first = generate_scenario(TrajectoryParameters(duration=1.0), seed=7)
        second = generate_scenario(TrajectoryParameters(duration=1.0), seed=7)

        for a, b in zip(first, second):
            np.testing.assert_array_equal(a.sample.raw_measurements, b.sample.raw_measurements)

    def test_dropouts_skip_samples(self):
        """Dropped lidar samples do not appear in the recording"""
        lidar = LidarSensor(dropout_prob=1.0, rng=np.random.default_rng(0))

        records = generate_scenario(TrajectoryParameters(duration=1.0), lidar=lidar, seed=0)

        assert all(r.sample.sensor_type is SensorType.RADAR for r in records)
        assert len(records) == 10
