"""
CTRV (constant turn rate and velocity) process model.

Deterministic part, for |ψ̇| > ε:

    px' = px + v/ψ̇ · (sin(ψ + ψ̇Δt) - sin ψ)
    py' = py + v/ψ̇ · (cos ψ - cos(ψ + ψ̇Δt))

and the straight-line limit otherwise:

    px' = px + v·Δt·cos ψ
    py' = py + v·Δt·sin ψ

    v' = v,   ψ' = ψ + ψ̇Δt,   ψ̇' = ψ̇

Noise part (ν_a: longitudinal acceleration, ν_ψ̈: yaw acceleration):

    px' += ½ν_aΔt² cos ψ     py' += ½ν_aΔt² sin ψ     v' += ν_aΔt
    ψ'  += ½ν_ψ̈Δt²          ψ̇' += ν_ψ̈Δt
"""

import logging

import numpy as np

from .angles import normalize_angle
from .state import N_X, YAW

logger = logging.getLogger(__name__)

# Below this yaw rate the curved-path integral is replaced by its straight-line limit
YAW_RATE_THRESHOLD = 1e-3


class CTRVMotionModel:
    """Propagates augmented sigma points and recombines them into a Gaussian."""

    def __init__(self, weights: np.ndarray, yaw_rate_threshold: float = YAW_RATE_THRESHOLD):
        self.weights = weights
        self.yaw_rate_threshold = yaw_rate_threshold

    def propagate(self, sigma_points_aug: np.ndarray, dt: float) -> np.ndarray:
        """
        Push every augmented sigma point through the CTRV equations.

        Args:
            sigma_points_aug: (7, N) augmented sigma points
            dt: Elapsed time in seconds

        Returns:
            (5, N) predicted sigma points
        """
        px, py, v, yaw, yawd, nu_a, nu_yawdd = sigma_points_aug

        turning = np.abs(yawd) > self.yaw_rate_threshold
        # Division only happens where the rate is safely away from zero
        safe_yawd = np.where(turning, yawd, 1.0)
        yaw_end = yaw + yawd * dt

        px_p = np.where(turning,
                        px + v / safe_yawd * (np.sin(yaw_end) - np.sin(yaw)),
                        px + v * dt * np.cos(yaw))
        py_p = np.where(turning,
                        py + v / safe_yawd * (np.cos(yaw) - np.cos(yaw_end)),
                        py + v * dt * np.sin(yaw))

        half_dt2 = 0.5 * dt * dt
        predicted = np.empty((N_X, sigma_points_aug.shape[1]))
        predicted[0] = px_p + half_dt2 * nu_a * np.cos(yaw)
        predicted[1] = py_p + half_dt2 * nu_a * np.sin(yaw)
        predicted[2] = v + nu_a * dt
        predicted[3] = yaw_end + half_dt2 * nu_yawdd
        predicted[4] = yawd + nu_yawdd * dt
        return predicted

    def mean_and_covariance(self, sigma_points: np.ndarray):
        """
        Weighted mean and covariance of predicted sigma points.

        The heading row of every deviation is wrapped into (-π, π] before
        the outer products are accumulated.

        Returns:
            Tuple (x, P)
        """
        x = sigma_points @ self.weights

        diff = sigma_points - x[:, None]
        diff[YAW] = normalize_angle(diff[YAW])
        P = (diff * self.weights) @ diff.T
        return x, P

    def predict(self, sigma_points_aug: np.ndarray, dt: float):
        """
        Full prediction: propagate, then recombine.

        Returns:
            Tuple (predicted_sigma_points, x, P)
        """
        if dt < 0:
            logger.warning(f"Negative time step {dt:.6f}s, measurements are out of order")
        predicted = self.propagate(sigma_points_aug, dt)
        x, P = self.mean_and_covariance(predicted)
        logger.debug(f"Prediction step completed, dt={dt:.3f}s")
        return predicted, x, P
