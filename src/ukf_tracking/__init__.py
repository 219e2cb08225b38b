"""
UKF Tracking: Lidar/Radar Fusion with an Unscented Kalman Filter

A scientific Python package for tracking a single moving object from
asynchronous lidar (position) and radar (range, bearing, range rate)
measurements.

This package implements:
- Augmented sigma-point generation and a CTRV motion model
- Linear lidar update and unscented radar update
- Measurement file reading and lidar/radar simulation
- RMSE / NIS evaluation and plotting of runs
"""

from .config import UKFConfig
from .errors import (
    UKFError,
    UnknownSensorError,
    InitializationError,
    FilterNotInitializedError,
    PredictionRequiredError,
    NumericalError,
    CovarianceNotPositiveDefiniteError,
    SingularInnovationCovarianceError,
    MeasurementParseError,
)
from .fusion.ukf import UnscentedKalmanFilter, FilterState
from .sensors.measurement import SensorType, MeasurementSample, MeasurementRecord
from .sensors.reader import read_measurements
from .simulation.scenario import generate_scenario
from .evaluation import calculate_rmse, run_filter

# Optional visualization import (graceful failure if not available)
try:
    from .visualization.plotter import plot_run
    _has_visualization = True
except ImportError:
    plot_run = None
    _has_visualization = False

__version__ = "1.0.0"
__author__ = "UKF Tracking Team"

__all__ = [
    "UKFConfig",
    "UnscentedKalmanFilter",
    "FilterState",
    "SensorType",
    "MeasurementSample",
    "MeasurementRecord",
    "read_measurements",
    "generate_scenario",
    "calculate_rmse",
    "run_filter",
    "UKFError",
    "UnknownSensorError",
    "InitializationError",
    "FilterNotInitializedError",
    "PredictionRequiredError",
    "NumericalError",
    "CovarianceNotPositiveDefiniteError",
    "SingularInnovationCovarianceError",
    "MeasurementParseError"
]

# Add visualization to __all__ only if available
if _has_visualization:
    __all__.append("plot_run")
