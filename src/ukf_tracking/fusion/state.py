"""
CTRV state belief (mean + covariance).

State Vector Definition:
    x = [px, py, v, ψ, ψ̇]ᵀ ∈ ℝ⁵

Where:
    - [px, py]: Position in the world frame (m)
    - v: Speed magnitude along the heading (m/s)
    - ψ: Heading angle (rad), stored unconstrained
    - ψ̇: Yaw rate (rad/s)

The heading is never wrapped in storage. Every angle *difference* derived
from it is wrapped into (-π, π] before being averaged or used as a
residual; see ``fusion.angles.normalize_angle``.
"""

import numpy as np
from typing import Optional, Tuple

N_X = 5

PX, PY, V, YAW, YAW_RATE = range(N_X)


class CTRVState:
    """
    Gaussian belief over the CTRV state.

    The mean and covariance are overwritten as a whole by every predict and
    update step; the setters validate shape and finiteness so that a
    corrupted result is rejected rather than stored.
    """

    def __init__(self, initial_covariance_scale: float = 0.5):
        """
        Create the prior belief.

        Args:
            initial_covariance_scale: P is initialized to scale * I

        Raises:
            ValueError: If the scale is not positive
        """
        if initial_covariance_scale <= 0:
            raise ValueError(f"Initial covariance scale must be positive, got {initial_covariance_scale}")
        self._x = np.zeros(N_X)
        self._P = np.eye(N_X) * initial_covariance_scale

    @property
    def x(self) -> np.ndarray:
        """Copy of the state mean [px, py, v, yaw, yawd]."""
        return self._x.copy()

    @x.setter
    def x(self, value: np.ndarray) -> None:
        value = np.asarray(value, dtype=float).reshape(-1)
        if value.shape != (N_X,):
            raise ValueError(f"State mean must have {N_X} elements, got {value.shape[0]}")
        if not np.all(np.isfinite(value)):
            raise ValueError("State mean contains NaN or infinite values")
        self._x = value.copy()

    @property
    def P(self) -> np.ndarray:
        """Copy of the 5x5 state covariance."""
        return self._P.copy()

    @P.setter
    def P(self, value: np.ndarray) -> None:
        value = np.asarray(value, dtype=float)
        if value.shape != (N_X, N_X):
            raise ValueError(f"Covariance shape must be ({N_X}, {N_X}), got {value.shape}")
        if not np.all(np.isfinite(value)):
            raise ValueError("Covariance contains NaN or infinite values")
        self._P = value.copy()

    def commit(self, x: np.ndarray, P: np.ndarray) -> None:
        """Replace mean and covariance together; nothing is written if either is invalid."""
        previous = self._x
        self.x = x
        try:
            self.P = P
        except ValueError:
            self._x = previous
            raise

    @property
    def position(self) -> np.ndarray:
        """Position [px, py] in meters."""
        return self._x[PX:PY + 1].copy()

    @property
    def speed(self) -> float:
        return float(self._x[V])

    @property
    def yaw(self) -> float:
        return float(self._x[YAW])

    @property
    def yaw_rate(self) -> float:
        return float(self._x[YAW_RATE])

    @property
    def velocity(self) -> np.ndarray:
        """Cartesian velocity [vx, vy] in m/s derived from speed and heading."""
        return np.array([self.speed * np.cos(self.yaw), self.speed * np.sin(self.yaw)])

    def get_uncertainty(self) -> np.ndarray:
        """Standard deviations of all five state components."""
        return np.sqrt(np.clip(np.diag(self._P), 0.0, None))

    def get_pose_2d(self) -> Tuple[float, float, float]:
        """
        Extract 2D pose (x, y, yaw) for reporting.

        Returns:
            Tuple of (x, y, yaw) in meters and radians
        """
        return (float(self._x[PX]), float(self._x[PY]), self.yaw)

    def reset(self, x: Optional[np.ndarray] = None, initial_covariance_scale: float = 0.5) -> None:
        """Return to the prior belief, optionally with a given mean."""
        self._x = np.zeros(N_X) if x is None else np.asarray(x, dtype=float).copy()
        self._P = np.eye(N_X) * initial_covariance_scale

    def __str__(self) -> str:
        """String representation for debugging."""
        return (f"CTRVState(pos=[{self._x[PX]:.3f}, {self._x[PY]:.3f}], v={self._x[V]:.3f}, "
                f"yaw={np.degrees(self._x[YAW]):.1f}°, yawd={self._x[YAW_RATE]:.3f})")
