import pytest
import numpy as np
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ukf_tracking.config import UKFConfig
from ukf_tracking.errors import SingularInnovationCovarianceError
from ukf_tracking.fusion import (CTRVMotionModel, CTRVState, LidarUpdate, RadarUpdate,
                                 SigmaPointGenerator, compute_weights)
from ukf_tracking.sensors import MeasurementSample, SensorType


def predicted_sigma_points(state, dt=0.0):
    """Sigma points of a prediction from the current belief"""
    generator = SigmaPointGenerator(std_a=3.0, std_yawdd=1.0)
    model = CTRVMotionModel(generator.weights)
    predicted, x, P = model.predict(generator.generate(state), dt)
    state.commit(x, P)
    return predicted, generator.weights


class TestLidarUpdate:
    """Test the linear lidar update"""

    def test_update_matches_closed_form(self):
        """Position moves toward the measurement by the Kalman gain"""
        config = UKFConfig()
        update = LidarUpdate(config.lidar_noise)
        state = CTRVState()
        state.x = np.array([1.0, 1.0, 0.0, 0.0, 0.0])

        result = update.apply(state, MeasurementSample.lidar(1.1, 1.05, 100000), None)

        gain = 0.5 / (0.5 + 0.15 ** 2)
        np.testing.assert_allclose(state.x, [1.0 + gain * 0.1, 1.0 + gain * 0.05, 0.0, 0.0, 0.0])
        np.testing.assert_allclose(np.diag(state.P)[:2], 0.5 * (1 - gain))
        np.testing.assert_allclose(np.diag(state.P)[2:], 0.5)
        np.testing.assert_allclose(result.innovation, [0.1, 0.05])
        assert result.sensor_type is SensorType.LIDAR
        assert result.timestamp == 100000

    def test_nis_value(self):
        """NIS is the innovation weighted by the inverse innovation covariance"""
        update = LidarUpdate(UKFConfig().lidar_noise)
        state = CTRVState()

        result = update.apply(state, MeasurementSample.lidar(0.3, -0.4, 0), None)

        expected = (0.3 ** 2 + 0.4 ** 2) / (0.5 + 0.15 ** 2)
        assert result.nis == pytest.approx(expected)

    def test_covariance_shrinks_and_stays_symmetric(self):
        """Lidar update reduces uncertainty"""
        update = LidarUpdate(UKFConfig().lidar_noise)
        state = CTRVState()
        state.x = np.array([2.0, -1.0, 4.0, 0.3, 0.1])
        predicted_sigma_points(state, 0.1)
        prior_trace = np.trace(state.P)

        update.apply(state, MeasurementSample.lidar(2.3, -0.9, 0), None)

        assert np.trace(state.P) < prior_trace
        np.testing.assert_allclose(state.P, state.P.T, atol=1e-10)
        assert np.min(np.linalg.eigvalsh(state.P)) > -1e-9

    def test_singular_innovation_covariance_commits_nothing(self):
        """A singular S raises and leaves the state untouched"""
        update = LidarUpdate(np.zeros((2, 2)))
        state = CTRVState()
        state.x = np.array([1.0, 2.0, 0.0, 0.0, 0.0])
        state.P = np.zeros((5, 5))

        with pytest.raises(SingularInnovationCovarianceError):
            update.apply(state, MeasurementSample.lidar(1.5, 2.5, 0), None)

        np.testing.assert_allclose(state.x, [1.0, 2.0, 0.0, 0.0, 0.0])
        np.testing.assert_allclose(state.P, 0.0)


class TestRadarMeasurementModel:
    """Test the mapping into radar measurement space"""

    def test_known_point(self):
        """Range, bearing and range rate of a point moving radially"""
        yaw = np.arctan2(4.0, 3.0)
        points = np.array([[3.0], [4.0], [5.0], [yaw], [0.0]])

        Z = RadarUpdate.measurement_model(points)[:, 0]

        np.testing.assert_allclose(Z, [5.0, yaw, 5.0], atol=1e-12)

    def test_tangential_motion_has_zero_range_rate(self):
        """Motion perpendicular to the line of sight has no range rate"""
        points = np.array([[0.0], [2.0], [3.0], [0.0], [0.0]])

        Z = RadarUpdate.measurement_model(points)[:, 0]

        np.testing.assert_allclose(Z, [2.0, np.pi / 2, 0.0], atol=1e-12)

    def test_point_at_origin(self):
        """A point at the sensor origin yields a finite measurement"""
        points = np.array([[0.0], [0.0], [3.0], [1.0], [0.0]])

        Z = RadarUpdate.measurement_model(points)[:, 0]

        assert np.all(np.isfinite(Z))
        assert Z[2] == 0.0


class TestRadarUpdate:
    """Test the unscented radar update"""

    def setup_method(self):
        config = UKFConfig()
        self.noise = config.radar_noise

    def test_update_toward_measurement(self):
        """Position moves toward the polar measurement"""
        state = CTRVState()
        state.x = np.array([10.0, 0.0, 0.0, 0.0, 0.0])
        sigma_points, weights = predicted_sigma_points(state, 0.05)
        update = RadarUpdate(self.noise, weights)
        prior_trace = np.trace(state.P)

        result = update.apply(state, MeasurementSample.radar(10.2, 0.01, 0.0, 50000), sigma_points)

        assert abs(state.x[0] - 10.2) < 0.15
        assert abs(state.x[1] - 10.2 * np.sin(0.01)) < 0.05
        assert np.trace(state.P) < prior_trace
        assert result.sensor_type is SensorType.RADAR
        assert result.innovation_covariance.shape == (3, 3)

    def test_bearing_residual_wrapped_across_pi(self):
        """A measurement just across the ±π cut gives a small residual"""
        state = CTRVState()
        state.x = np.array([-5.0, 0.05, 0.0, 0.0, 0.0])
        state.P = np.eye(5) * 1e-4
        sigma_points, weights = predicted_sigma_points(state, 0.0)
        update = RadarUpdate(self.noise, weights)

        Zsig, z_pred, S = update.predict_measurement(sigma_points)
        result = update.apply(state, MeasurementSample.radar(5.0, -np.pi + 0.005, 0.0, 0), sigma_points)

        assert np.all(Zsig[1] > 3.0)
        assert S[1, 1] < 0.01
        assert abs(result.innovation[1]) < 0.05
        assert np.all(np.abs(result.innovation) <= np.pi)
        # Without wrapping the residual would be close to -2π and drag py far off
        assert state.x[1] < 0.05
        assert abs(state.x[1] - 0.05) < 0.01

    def test_covariance_symmetric_after_update(self):
        """Radar update keeps P symmetric and PSD"""
        state = CTRVState()
        state.x = np.array([16.0, 12.0, 5.0, 0.6, 0.1])
        sigma_points, weights = predicted_sigma_points(state, 0.1)
        update = RadarUpdate(self.noise, weights)

        update.apply(state, MeasurementSample.radar(20.1, 0.65, 4.8, 0), sigma_points)

        np.testing.assert_allclose(state.P, state.P.T, atol=1e-10)
        assert np.min(np.linalg.eigvalsh(state.P)) > -1e-9

    def test_singular_innovation_covariance(self):
        """Zero noise and collapsed sigma points give a singular S"""
        state = CTRVState()
        state.x = np.array([4.0, 3.0, 0.0, 0.0, 0.0])
        sigma_points = np.tile(state.x[:, None], (1, 15))
        update = RadarUpdate(np.zeros((3, 3)), compute_weights())

        with pytest.raises(SingularInnovationCovarianceError):
            update.apply(state, MeasurementSample.radar(5.0, 0.6, 0.0, 0), sigma_points)

        np.testing.assert_allclose(state.x, [4.0, 3.0, 0.0, 0.0, 0.0])
