"""
Filter configuration.

The noise parameters are fixed at construction time. Process noise
(``std_a``, ``std_yawdd``) is the tuning knob of the CTRV model; the
measurement noise values are provided by the sensor manufacturer and are
not meant to be changed when tuning the filter.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class UKFConfig:
    """Immutable configuration of an ``UnscentedKalmanFilter``."""

    # Process noise standard deviation, longitudinal acceleration [m/s²]
    std_a: float = 3.0
    # Process noise standard deviation, yaw acceleration [rad/s²]
    std_yawdd: float = 1.0

    # Lidar position noise [m] (manufacturer values)
    std_laspx: float = 0.15
    std_laspy: float = 0.15

    # Radar noise: range [m], bearing [rad], range rate [m/s] (manufacturer values)
    std_radr: float = 0.3
    std_radphi: float = 0.03
    std_radrd: float = 0.3

    use_lidar: bool = True
    use_radar: bool = True

    # P is created as scale * I before the first measurement
    initial_covariance_scale: float = 0.5

    # Accept a radar sample as the first measurement (inverse polar transform).
    # When False a radar-first sample raises InitializationError.
    init_from_radar: bool = True

    def __post_init__(self):
        """Validate noise parameters."""
        for name in ("std_a", "std_yawdd", "std_laspx", "std_laspy",
                     "std_radr", "std_radphi", "std_radrd"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive finite number, got {value}")
        if not np.isfinite(self.initial_covariance_scale) or self.initial_covariance_scale <= 0:
            raise ValueError(
                f"Initial covariance scale must be positive, got {self.initial_covariance_scale}")

    @property
    def lidar_noise(self) -> np.ndarray:
        """2x2 lidar measurement noise covariance R_lidar."""
        return np.diag([self.std_laspx ** 2, self.std_laspy ** 2])

    @property
    def radar_noise(self) -> np.ndarray:
        """3x3 radar measurement noise covariance R_radar."""
        return np.diag([self.std_radr ** 2, self.std_radphi ** 2, self.std_radrd ** 2])
