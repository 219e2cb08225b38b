"""
Accuracy and consistency evaluation of a filter run.

RMSE:
    rmse_j = √( (1/N) Σ_k (x̂_k,j - x_k,j)² )     over [px, py, vx, vy]

NIS (normalized innovation squared):
    ε_k = y_kᵀ S_k⁻¹ y_k  ~  χ²(n_z)   for a consistent filter

With n_z = 2 (lidar) or 3 (radar), about 95 % of the NIS values of a
well-tuned filter fall below χ²₀.₉₅(n_z) (5.991 and 7.815).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np
from scipy import stats

from .fusion.ukf import UnscentedKalmanFilter
from .sensors.measurement import MeasurementRecord, SensorType

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """
    Everything recorded while running a filter over a recording.

    Attributes:
        timestamps: Timestamp of every processed record (µs)
        estimates: Filter estimate per record in [px, py, vx, vy]
        ground_truth: Ground truth per record in [px, py, vx, vy]
        nis: NIS values keyed by sensor type
        rmse: RMSE over [px, py, vx, vy], None without ground truth
    """
    timestamps: np.ndarray
    estimates: np.ndarray
    ground_truth: Optional[np.ndarray]
    nis: Dict[SensorType, np.ndarray] = field(default_factory=dict)
    rmse: Optional[np.ndarray] = None


def state_to_ground_truth_space(x: np.ndarray) -> np.ndarray:
    """
    Convert a CTRV state mean to [px, py, vx, vy].

    Args:
        x: [px, py, v, yaw, yawd]
    """
    px, py, v, yaw = x[:4]
    return np.array([px, py, v * np.cos(yaw), v * np.sin(yaw)])


def calculate_rmse(estimates, ground_truth) -> np.ndarray:
    """
    Root-mean-square error per component.

    Args:
        estimates: (N, d) estimates
        ground_truth: (N, d) true values

    Returns:
        (d,) RMSE vector

    Raises:
        ValueError: If the inputs are empty or their shapes differ
    """
    estimates = np.atleast_2d(np.asarray(estimates, dtype=float))
    ground_truth = np.atleast_2d(np.asarray(ground_truth, dtype=float))
    if estimates.size == 0 or ground_truth.size == 0:
        raise ValueError("Cannot compute RMSE of empty inputs")
    if estimates.shape != ground_truth.shape:
        raise ValueError(f"Estimate shape {estimates.shape} does not match ground truth {ground_truth.shape}")

    return np.sqrt(np.mean((estimates - ground_truth) ** 2, axis=0))


def nis_bound(dof: int, confidence: float = 0.95) -> float:
    """
    Upper χ² bound for NIS values.

    Args:
        dof: Measurement dimension
        confidence: Probability mass below the bound

    Raises:
        ValueError: If dof is not positive or confidence not in (0, 1)
    """
    if dof <= 0:
        raise ValueError(f"Degrees of freedom must be positive, got {dof}")
    if not 0 < confidence < 1:
        raise ValueError("Confidence must be between 0 and 1")
    return float(stats.chi2.ppf(confidence, dof))


def nis_consistency(nis_values: Iterable[float], dof: int, confidence: float = 0.95) -> float:
    """
    Fraction of NIS values at or below the χ² bound.

    Returns:
        Fraction in [0, 1]; NaN for an empty sequence
    """
    values = np.asarray(list(nis_values), dtype=float)
    if values.size == 0:
        return float('nan')
    return float(np.mean(values <= nis_bound(dof, confidence)))


def run_filter(records: List[MeasurementRecord], ukf: Optional[UnscentedKalmanFilter] = None) -> RunResult:
    """
    Feed every record through a filter and collect the results.

    Args:
        records: Measurements in time order
        ukf: Filter to run; a default-configured filter if None

    Returns:
        RunResult with estimates, ground truth, NIS values and RMSE

    Raises:
        ValueError: If records is empty
        UKFError: Propagated from the filter
    """
    if not records:
        raise ValueError("No measurement records to process")
    ukf = ukf if ukf is not None else UnscentedKalmanFilter()

    timestamps = []
    estimates = []
    ground_truth = []
    nis: Dict[SensorType, List[float]] = {sensor: [] for sensor in SensorType}

    for record in records:
        result = ukf.process_measurement(record.sample)
        if result is not None:
            nis[result.sensor_type].append(result.nis)

        timestamps.append(record.sample.timestamp)
        estimates.append(state_to_ground_truth_space(ukf.x))
        if record.ground_truth is not None:
            ground_truth.append(record.ground_truth)

    estimates = np.array(estimates)
    truth = None
    rmse = None
    if len(ground_truth) == len(records):
        truth = np.array(ground_truth)
        rmse = calculate_rmse(estimates, truth)
    elif ground_truth:
        logger.warning("Ground truth missing for some records, RMSE not computed")

    for sensor, values in nis.items():
        if values:
            fraction = nis_consistency(values, sensor.measurement_size)
            logger.debug(f"{sensor.name} NIS within 95% bound: {fraction:.1%}")

    return RunResult(
        timestamps=np.array(timestamps, dtype=np.int64),
        estimates=estimates,
        ground_truth=truth,
        nis={sensor: np.array(values) for sensor, values in nis.items()},
        rmse=rmse,
    )
