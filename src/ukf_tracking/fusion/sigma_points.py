"""
Augmented sigma-point generation.

The process noise of the CTRV model enters the motion equations
non-additively, so the state is augmented with the two noise terms before
sampling:

    x_aug = [px, py, v, ψ, ψ̇, ν_a, ν_ψ̈]ᵀ ∈ ℝ⁷

    P_aug = | P   0          0          |
            | 0   σ_a²       0          |
            | 0   0          σ_ψ̈²       |

Sigma points (n_aug = 7, λ = 3 - n_x):

    X₀       = x_aug
    X_i      = x_aug + √(λ + n_aug) · L_i        i = 1..n_aug
    X_{i+n}  = x_aug - √(λ + n_aug) · L_i

where L is the lower Cholesky factor of P_aug and L_i its i-th column.

Weights:

    w₀ = λ / (λ + n_aug),   w_i = 1 / (2(λ + n_aug))
"""

import logging

import numpy as np
import scipy.linalg

from ..errors import CovarianceNotPositiveDefiniteError
from .state import N_X, CTRVState

logger = logging.getLogger(__name__)

N_AUG = N_X + 2
N_SIGMA = 2 * N_AUG + 1
# Spread parameter is tied to the state dimension, not the augmented one
LAMBDA = 3.0 - N_X


def compute_weights(n_aug: int = N_AUG, lam: float = LAMBDA) -> np.ndarray:
    """
    Sigma-point weights for a given augmented dimension.

    Args:
        n_aug: Augmented state dimension
        lam: Spread parameter λ

    Returns:
        Read-only array of 2·n_aug + 1 weights summing to one

    Raises:
        ValueError: If n_aug is not positive or λ + n_aug is zero
    """
    if n_aug <= 0:
        raise ValueError(f"Augmented dimension must be positive, got {n_aug}")
    if lam + n_aug == 0:
        raise ValueError("λ + n_aug must be non-zero")

    weights = np.full(2 * n_aug + 1, 0.5 / (lam + n_aug))
    weights[0] = lam / (lam + n_aug)
    weights.setflags(write=False)
    return weights


class SigmaPointGenerator:
    """
    Builds the augmented sigma-point matrix from the current belief.

    Attributes:
        std_a: Longitudinal acceleration noise standard deviation (m/s²)
        std_yawdd: Yaw acceleration noise standard deviation (rad/s²)
        weights: Fixed weights shared by every sigma-point set
    """

    def __init__(self, std_a: float, std_yawdd: float):
        if std_a <= 0 or std_yawdd <= 0:
            raise ValueError("Process noise standard deviations must be positive")
        self.std_a = std_a
        self.std_yawdd = std_yawdd
        self.n_aug = N_AUG
        self.lam = LAMBDA
        self.weights = compute_weights(self.n_aug, self.lam)

    def augment(self, state: CTRVState):
        """
        Build the augmented mean and covariance.

        Returns:
            Tuple (x_aug, P_aug) of shapes (7,) and (7, 7)
        """
        x_aug = np.zeros(self.n_aug)
        x_aug[:N_X] = state.x

        P_aug = np.zeros((self.n_aug, self.n_aug))
        P_aug[:N_X, :N_X] = state.P
        P_aug[N_X, N_X] = self.std_a ** 2
        P_aug[N_X + 1, N_X + 1] = self.std_yawdd ** 2
        return x_aug, P_aug

    def generate(self, state: CTRVState) -> np.ndarray:
        """
        Generate augmented sigma points for the current belief.

        Args:
            state: Current belief

        Returns:
            Read-only (7, 15) matrix, one sigma point per column

        Raises:
            CovarianceNotPositiveDefiniteError: If P_aug has no Cholesky factor
        """
        x_aug, P_aug = self.augment(state)

        try:
            L = scipy.linalg.cholesky(P_aug, lower=True)
        except np.linalg.LinAlgError as exc:
            logger.error("Cholesky factorization of augmented covariance failed")
            raise CovarianceNotPositiveDefiniteError(
                "Augmented covariance is not positive definite") from exc

        spread = np.sqrt(self.lam + self.n_aug) * L
        sigma_points = np.empty((self.n_aug, 2 * self.n_aug + 1))
        sigma_points[:, 0] = x_aug
        sigma_points[:, 1:self.n_aug + 1] = x_aug[:, None] + spread
        sigma_points[:, self.n_aug + 1:] = x_aug[:, None] - spread

        sigma_points.setflags(write=False)
        return sigma_points
