import pytest
import numpy as np
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ukf_tracking.fusion import CTRVMotionModel, CTRVState, SigmaPointGenerator, compute_weights
from ukf_tracking.fusion.motion import YAW_RATE_THRESHOLD


def single_point(px=0.0, py=0.0, v=0.0, yaw=0.0, yawd=0.0, nu_a=0.0, nu_yawdd=0.0):
    return np.array([[px], [py], [v], [yaw], [yawd], [nu_a], [nu_yawdd]])


class TestCTRVPropagation:
    """Test propagation of individual sigma points"""

    def setup_method(self):
        self.model = CTRVMotionModel(compute_weights())

    def test_straight_line_motion(self):
        """Zero yaw rate moves along the heading"""
        point = single_point(px=1.0, py=2.0, v=2.0, yaw=np.pi / 2)

        predicted = self.model.propagate(point, 0.5)[:, 0]

        np.testing.assert_allclose(predicted, [1.0, 3.0, 2.0, np.pi / 2, 0.0], atol=1e-12)

    def test_quarter_turn(self):
        """Constant turn traces a circle of radius v / yawd"""
        point = single_point(v=1.0, yawd=np.pi / 2)

        predicted = self.model.propagate(point, 1.0)[:, 0]

        radius = 2.0 / np.pi
        np.testing.assert_allclose(predicted, [radius, radius, 1.0, np.pi / 2, np.pi / 2], atol=1e-12)

    def test_branches_agree_near_threshold(self):
        """Curved and straight-line branches are continuous around the threshold"""
        above = single_point(px=1.0, py=-1.0, v=5.0, yaw=0.3, yawd=YAW_RATE_THRESHOLD * 1.0001)
        below = single_point(px=1.0, py=-1.0, v=5.0, yaw=0.3, yawd=YAW_RATE_THRESHOLD * 0.9999)

        curved = self.model.propagate(above, 0.1)[:, 0]
        straight = self.model.propagate(below, 0.1)[:, 0]

        np.testing.assert_allclose(curved, straight, atol=1e-4)

    def test_curved_branch_converges_to_straight_line(self):
        """As yaw rate shrinks the curved integral approaches the straight-line limit"""
        dt = 0.1
        straight = self.model.propagate(single_point(v=5.0, yaw=0.3), dt)[:2, 0]

        errors = []
        for yawd in [0.1, 0.01, 0.002]:
            curved = self.model.propagate(single_point(v=5.0, yaw=0.3, yawd=yawd), dt)[:2, 0]
            errors.append(np.linalg.norm(curved - straight))

        assert errors[0] > errors[1] > errors[2]
        assert errors[2] < 1e-4

    def test_process_noise_contributions(self):
        """Noise samples enter position, speed, heading and yaw rate"""
        point = single_point(nu_a=2.0, nu_yawdd=4.0)

        predicted = self.model.propagate(point, 0.5)[:, 0]

        np.testing.assert_allclose(predicted, [0.25, 0.0, 1.0, 0.5, 2.0], atol=1e-12)

    def test_vectorised_over_columns(self):
        """All columns are propagated independently"""
        points = np.hstack([single_point(v=1.0), single_point(v=1.0, yawd=0.5), single_point(px=3.0)])

        predicted = self.model.propagate(points, 0.2)

        for column in range(3):
            single = self.model.propagate(points[:, [column]], 0.2)
            np.testing.assert_allclose(predicted[:, [column]], single)


class TestMeanAndCovariance:
    """Test recombination of predicted sigma points"""

    def setup_method(self):
        self.generator = SigmaPointGenerator(std_a=3.0, std_yawdd=1.0)
        self.model = CTRVMotionModel(self.generator.weights)

    def test_zero_time_step_keeps_mean(self):
        """With dt = 0 the predicted belief equals the prior"""
        state = CTRVState()
        state.x = np.array([1.0, 2.0, 3.0, 0.5, 0.2])

        _, x, P = self.model.predict(self.generator.generate(state), 0.0)

        np.testing.assert_allclose(x, state.x, atol=1e-12)
        np.testing.assert_allclose(P, state.P, atol=1e-12)

    def test_prediction_moves_mean_and_grows_covariance(self):
        """A forward prediction moves along the heading and adds uncertainty"""
        state = CTRVState()
        state.x = np.array([0.0, 0.0, 2.0, 0.0, 0.0])

        predicted, x, P = self.model.predict(self.generator.generate(state), 0.1)

        assert predicted.shape == (5, 15)
        assert x[0] > 0.1
        assert np.trace(P) > np.trace(state.P)

    def test_heading_differences_are_wrapped(self):
        """Headings offset by full turns do not inflate the heading variance"""
        a = 0.1
        points = np.zeros((5, 15))
        points[3, 1:8] = a
        points[3, 8:] = -a
        # Same physical heading, one full turn apart
        points[3, 1] += 2 * np.pi
        points[3, 8] -= 2 * np.pi

        x, P = self.model.mean_and_covariance(points)

        assert x[3] == pytest.approx(0.0, abs=1e-12)
        assert P[3, 3] == pytest.approx(1.4 * a ** 2)

    def test_covariance_symmetric_positive_semidefinite(self):
        """Predicted covariance stays symmetric and PSD"""
        rng = np.random.default_rng(7)
        state = CTRVState()
        for _ in range(20):
            state.x = rng.normal(size=5) * [10, 10, 3, 4, 1]
            _, x, P = self.model.predict(self.generator.generate(state), rng.uniform(0.0, 0.1))

            np.testing.assert_allclose(P, P.T, atol=1e-10)
            assert np.min(np.linalg.eigvalsh(P)) > -1e-9
