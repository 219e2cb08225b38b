"""
Radar sensor simulation.

Radar Measurement Model:
    ρ   = √(px² + py²)
    φ   = atan2(py, px)
    ρ̇   = (px·v·cos ψ + py·v·sin ψ) / ρ

    z_radar = [ρ, φ, ρ̇]ᵀ + n_radar,   n_radar ~ N(0, diag(σ_ρ², σ_φ², σ_ρ̇²))

The radar sits at the origin of the world frame. The reported bearing is
wrapped into (-π, π] after noise is added.
"""

import numpy as np
from typing import Optional

from ..fusion.angles import normalize_angle
from .measurement import MeasurementSample, SensorType


class RadarSensor:
    """
    Radar reporting range, bearing and range rate.

    Attributes:
        std_rho: Range noise standard deviation (meters)
        std_phi: Bearing noise standard deviation (radians)
        std_rho_dot: Range-rate noise standard deviation (m/s)
        dropout_prob: Probability of a missing measurement [0.0, 1.0]
        sensor_id: Identifier for this unit
    """

    sensor_type = SensorType.RADAR

    def __init__(self, std_rho: float = 0.3, std_phi: float = 0.03, std_rho_dot: float = 0.3,
                 dropout_prob: float = 0.0, sensor_id: int = 1,
                 rng: Optional[np.random.Generator] = None):
        if std_rho <= 0 or std_phi <= 0 or std_rho_dot <= 0:
            raise ValueError("Radar noise standard deviations must be positive")
        if not 0 <= dropout_prob <= 1:
            raise ValueError("Dropout probability must be between 0 and 1")

        self.std_rho = std_rho
        self.std_phi = std_phi
        self.std_rho_dot = std_rho_dot
        self.dropout_prob = dropout_prob
        self.sensor_id = sensor_id
        self.rng = rng if rng is not None else np.random.default_rng()

    @staticmethod
    def measurement_function(true_state: np.ndarray) -> np.ndarray:
        """
        Noise-free radar measurement of a CTRV state.

        Raises:
            ValueError: If the state is at the sensor origin, where bearing
                and range rate are undefined
        """
        px, py, v, yaw = true_state[:4]
        rho = np.hypot(px, py)
        if rho < 1e-9:
            raise ValueError("Radar measurement undefined at the sensor origin")
        phi = np.arctan2(py, px)
        rho_dot = (px * v * np.cos(yaw) + py * v * np.sin(yaw)) / rho
        return np.array([rho, phi, rho_dot])

    def get_measurement(self, true_state: np.ndarray, timestamp: int) -> Optional[MeasurementSample]:
        """
        Generate a noisy radar measurement.

        Args:
            true_state: True CTRV state [px, py, v, yaw, yawd]
            timestamp: Measurement time in microseconds

        Returns:
            Radar sample, or None if a dropout occurs
        """
        if len(true_state) < 4:
            raise ValueError("Radar requires a state with [px, py, v, yaw]")

        if self.dropout_prob > 0 and self.rng.random() < self.dropout_prob:
            return None

        z = self.measurement_function(true_state)
        z = z + self.rng.normal(0.0, [self.std_rho, self.std_phi, self.std_rho_dot])
        z[1] = normalize_angle(z[1])
        return MeasurementSample(SensorType.RADAR, z, timestamp)

    def get_measurement_covariance(self) -> np.ndarray:
        """
        Get measurement noise covariance matrix.

        Returns:
            3x3 covariance matrix for radar measurements
        """
        return np.diag([self.std_rho ** 2, self.std_phi ** 2, self.std_rho_dot ** 2])

    def get_sensor_info(self) -> dict:
        """Sensor configuration for reporting."""
        return {
            'sensor_id': self.sensor_id,
            'sensor_type': self.sensor_type.name,
            'std_rho': self.std_rho,
            'std_phi': self.std_phi,
            'std_rho_dot': self.std_rho_dot,
            'dropout_prob': self.dropout_prob,
            'covariance': self.get_measurement_covariance().tolist()
        }
