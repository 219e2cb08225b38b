"""Angle helpers shared by the prediction and update steps."""

import numpy as np


def normalize_angle(angle):
    """
    Wrap an angle (or array of angles) into (-π, π].

    Closed form, so extreme inputs cost the same as small ones:
        wrap(a) = π - ((π - a) mod 2π)

    Args:
        angle: Scalar or numpy array in radians

    Returns:
        Wrapped angle(s) with the same shape as the input
    """
    wrapped = np.pi - np.mod(np.pi - angle, 2.0 * np.pi)
    # mod rounds up to 2π for tiny negative arguments, which lands on -π
    return np.where(wrapped <= -np.pi, np.pi, wrapped)[()]
