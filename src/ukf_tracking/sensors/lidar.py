"""
Lidar sensor simulation.

Lidar Measurement Model:
    z_lidar = [px, py]ᵀ + n_lidar

    where n_lidar ~ N(0, diag(σ_px², σ_py²))

The lidar observes position directly, so its measurement function is
linear in the CTRV state.
"""

import numpy as np
from typing import Optional

from .measurement import MeasurementSample, SensorType


class LidarSensor:
    """
    Lidar with independent Gaussian noise on both position axes.

    Attributes:
        std_px: Noise standard deviation along x (meters)
        std_py: Noise standard deviation along y (meters)
        dropout_prob: Probability of a missing measurement [0.0, 1.0]
        sensor_id: Identifier for this unit
    """

    sensor_type = SensorType.LIDAR

    def __init__(self, std_px: float = 0.15, std_py: float = 0.15,
                 dropout_prob: float = 0.0, sensor_id: int = 1,
                 rng: Optional[np.random.Generator] = None):
        """
        Initialize lidar with specified characteristics.

        Args:
            std_px: Standard deviation of x noise (meters)
            std_py: Standard deviation of y noise (meters)
            dropout_prob: Probability of measurement dropout per call
            sensor_id: Identifier for this unit
            rng: Random generator; a fresh default generator if None
        """
        if std_px <= 0 or std_py <= 0:
            raise ValueError("Lidar noise standard deviations must be positive")
        if not 0 <= dropout_prob <= 1:
            raise ValueError("Dropout probability must be between 0 and 1")

        self.std_px = std_px
        self.std_py = std_py
        self.dropout_prob = dropout_prob
        self.sensor_id = sensor_id
        self.rng = rng if rng is not None else np.random.default_rng()

    def get_measurement(self, true_state: np.ndarray, timestamp: int) -> Optional[MeasurementSample]:
        """
        Generate a noisy position measurement.

        Args:
            true_state: True CTRV state [px, py, v, yaw, yawd]
            timestamp: Measurement time in microseconds

        Returns:
            Lidar sample, or None if a dropout occurs

        Raises:
            ValueError: If true_state has fewer than two elements
        """
        if len(true_state) < 2:
            raise ValueError("Lidar requires at least a 2D position [px, py]")

        if self.dropout_prob > 0 and self.rng.random() < self.dropout_prob:
            return None

        noise = self.rng.normal(0.0, [self.std_px, self.std_py])
        return MeasurementSample(SensorType.LIDAR, np.asarray(true_state[:2], dtype=float) + noise, timestamp)

    def get_measurement_covariance(self) -> np.ndarray:
        """
        Get measurement noise covariance matrix.

        Returns:
            2x2 covariance matrix for lidar measurements
        """
        return np.diag([self.std_px ** 2, self.std_py ** 2])

    def get_sensor_info(self) -> dict:
        """Sensor configuration for reporting."""
        return {
            'sensor_id': self.sensor_id,
            'sensor_type': self.sensor_type.name,
            'std_px': self.std_px,
            'std_py': self.std_py,
            'dropout_prob': self.dropout_prob,
            'covariance': self.get_measurement_covariance().tolist()
        }
