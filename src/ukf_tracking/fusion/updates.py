"""
Measurement updates.

Both sensors share one interface, ``MeasurementUpdate.apply``, and differ
only in how the predicted measurement and its statistics are obtained:

Lidar (linear-Gaussian):
    z = H x + v,   H = [[1 0 0 0 0], [0 1 0 0 0]]
    y = z - Hx
    S = H P Hᵀ + R
    K = P Hᵀ S⁻¹
    x⁺ = x + K y
    P⁺ = (I - K H) P

Radar (sigma-point):
    Z_i = h(X_i),  h(x) = [√(px²+py²), atan2(py, px), (px v cosψ + py v sinψ)/ρ]
    ẑ = Σ w_i Z_i
    S = Σ w_i (Z_i - ẑ)(Z_i - ẑ)ᵀ + R
    T = Σ w_i (X_i - x)(Z_i - ẑ)ᵀ
    K = T S⁻¹
    x⁺ = x + K (z - ẑ)
    P⁺ = P - K S Kᵀ

Bearing and heading differences are wrapped into (-π, π] wherever they
appear.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
import scipy.linalg

from ..errors import SingularInnovationCovarianceError
from ..sensors.measurement import MeasurementSample, SensorType
from .angles import normalize_angle
from .state import N_X, PX, PY, V, YAW, CTRVState

logger = logging.getLogger(__name__)

# Bearing row in radar measurement space
PHI = 1


@dataclass
class UpdateResult:
    """
    Outcome of one applied measurement update.

    Attributes:
        sensor_type: Sensor whose update was applied
        innovation: Residual between measurement and prediction
        innovation_covariance: S used for the gain
        nis: Normalized innovation squared, yᵀ S⁻¹ y
        timestamp: Timestamp of the measurement
    """
    sensor_type: SensorType
    innovation: np.ndarray
    innovation_covariance: np.ndarray
    nis: float
    timestamp: int


def _invert_innovation_covariance(S: np.ndarray) -> np.ndarray:
    """Invert S, failing loudly instead of returning inf/NaN."""
    try:
        S_inv = scipy.linalg.inv(S)
    except np.linalg.LinAlgError as exc:
        raise SingularInnovationCovarianceError("Innovation covariance is singular") from exc
    if not np.all(np.isfinite(S_inv)):
        raise SingularInnovationCovarianceError("Innovation covariance is singular")
    return S_inv


class MeasurementUpdate(ABC):
    """A correction step for one sensor type."""

    sensor_type: SensorType

    def __init__(self, noise: np.ndarray):
        self.noise = np.array(noise, dtype=float)
        self.noise.setflags(write=False)

    @abstractmethod
    def apply(self, state: CTRVState, sample: MeasurementSample,
              sigma_points: np.ndarray) -> UpdateResult:
        """
        Correct the belief with one measurement.

        The new mean and covariance are computed in full before being
        committed; if the update raises, ``state`` is unchanged.

        Args:
            state: Predicted belief, updated in place
            sample: Measurement of this update's sensor type
            sigma_points: (5, N) predicted sigma points of the current cycle

        Returns:
            UpdateResult with innovation statistics
        """


class LidarUpdate(MeasurementUpdate):
    """Closed-form linear Kalman update for position measurements."""

    sensor_type = SensorType.LIDAR

    def __init__(self, noise: np.ndarray):
        super().__init__(noise)
        self.H = np.zeros((2, N_X))
        self.H[0, PX] = 1.0
        self.H[1, PY] = 1.0

    def apply(self, state, sample, sigma_points=None):
        x = state.x
        P = state.P
        H = self.H

        z = sample.raw_measurements[:2]
        y = z - H @ x
        S = H @ P @ H.T + self.noise
        S_inv = _invert_innovation_covariance(S)
        K = P @ H.T @ S_inv

        state.commit(x + K @ y, (np.eye(N_X) - K @ H) @ P)

        nis = float(y @ S_inv @ y)
        logger.debug(f"Lidar update applied: innovation={np.linalg.norm(y):.3f}m, NIS={nis:.3f}")
        return UpdateResult(self.sensor_type, y, S, nis, sample.timestamp)


class RadarUpdate(MeasurementUpdate):
    """Unscented update in range / bearing / range-rate space."""

    sensor_type = SensorType.RADAR

    def __init__(self, noise: np.ndarray, weights: np.ndarray):
        super().__init__(noise)
        self.weights = weights

    @staticmethod
    def measurement_model(sigma_points: np.ndarray) -> np.ndarray:
        """
        Map predicted sigma points into radar measurement space.

        A point exactly at the sensor origin has no defined range rate and
        is given ρ̇ = 0.

        Args:
            sigma_points: (5, N) predicted sigma points

        Returns:
            (3, N) matrix of [ρ, φ, ρ̇] columns
        """
        px = sigma_points[PX]
        py = sigma_points[PY]
        v = sigma_points[V]
        yaw = sigma_points[YAW]

        rho = np.hypot(px, py)
        phi = np.arctan2(py, px)
        radial = px * v * np.cos(yaw) + py * v * np.sin(yaw)
        rho_dot = np.divide(radial, rho, out=np.zeros_like(radial), where=rho > 0)
        return np.vstack([rho, phi, rho_dot])

    def predict_measurement(self, sigma_points: np.ndarray):
        """
        Predicted measurement mean and innovation covariance.

        Returns:
            Tuple (Zsig, z_pred, S)
        """
        Zsig = self.measurement_model(sigma_points)
        z_pred = Zsig @ self.weights

        z_diff = Zsig - z_pred[:, None]
        z_diff[PHI] = normalize_angle(z_diff[PHI])
        S = (z_diff * self.weights) @ z_diff.T + self.noise
        return Zsig, z_pred, S

    def apply(self, state, sample, sigma_points):
        x = state.x
        P = state.P

        Zsig, z_pred, S = self.predict_measurement(sigma_points)

        z_diff = Zsig - z_pred[:, None]
        z_diff[PHI] = normalize_angle(z_diff[PHI])
        x_diff = sigma_points - x[:, None]
        x_diff[YAW] = normalize_angle(x_diff[YAW])
        Tc = (x_diff * self.weights) @ z_diff.T

        S_inv = _invert_innovation_covariance(S)
        K = Tc @ S_inv

        y = sample.raw_measurements - z_pred
        y[PHI] = normalize_angle(y[PHI])

        state.commit(x + K @ y, P - K @ S @ K.T)

        nis = float(y @ S_inv @ y)
        logger.debug(f"Radar update applied: innovation={np.linalg.norm(y):.3f}, NIS={nis:.3f}")
        return UpdateResult(self.sensor_type, y, S, nis, sample.timestamp)
