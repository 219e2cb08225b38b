"""
Unscented sensor fusion for CTRV object tracking.

This module implements the sigma-point machinery, the CTRV process model,
the lidar and radar measurement updates, and the filter that sequences
them for every incoming measurement.
"""

from .angles import normalize_angle
from .motion import CTRVMotionModel
from .sigma_points import SigmaPointGenerator, compute_weights
from .state import CTRVState
from .ukf import FilterState, UnscentedKalmanFilter
from .updates import LidarUpdate, MeasurementUpdate, RadarUpdate, UpdateResult

__all__ = [
    "UnscentedKalmanFilter",
    "FilterState",
    "CTRVState",
    "SigmaPointGenerator",
    "compute_weights",
    "CTRVMotionModel",
    "MeasurementUpdate",
    "LidarUpdate",
    "RadarUpdate",
    "UpdateResult",
    "normalize_angle"
]
