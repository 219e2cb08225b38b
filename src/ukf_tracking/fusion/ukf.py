"""
Unscented Kalman Filter for CTRV object tracking with lidar and radar.

Mathematical Foundation:
The UKF propagates a small deterministic set of sigma points through the
nonlinear process and measurement models instead of linearizing them:

State Evolution:
    x(k+1) = f(x(k), ν(k))        (CTRV, non-additive noise ν = [ν_a, ν_ψ̈])
    z(k)   = h(x(k)) + w(k)       (lidar: linear, radar: polar)

UKF Recursion (per measurement):
    1. Δt = (t_k - t_{k-1}) · 10⁻⁶
    2. Augmented sigma points  X_aug = σ(x_aug, P_aug)
    3. Prediction              X_pred = f(X_aug, Δt);  x⁻, P⁻ = Σ w_i ...
    4. Update                  lidar: linear Kalman update
                               radar: unscented update

State Vector Definition:
    x = [px, py, v, ψ, ψ̇]ᵀ

Filter lifecycle:
    UNINITIALIZED --first accepted measurement--> TRACKING
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np

from ..config import UKFConfig
from ..errors import FilterNotInitializedError, InitializationError, PredictionRequiredError
from ..sensors.measurement import MeasurementSample, SensorType
from .motion import CTRVMotionModel
from .sigma_points import SigmaPointGenerator
from .state import N_X, CTRVState
from .updates import LidarUpdate, MeasurementUpdate, RadarUpdate, UpdateResult

logger = logging.getLogger(__name__)

MICROSECONDS_PER_SECOND = 1.0e6


class FilterState(Enum):
    """Lifecycle of the filter."""
    UNINITIALIZED = "uninitialized"
    TRACKING = "tracking"


class UnscentedKalmanFilter:
    """
    Lidar/radar fusion filter over a CTRV motion model.

    One instance tracks one object. Measurements must be fed one at a time
    from a single thread; each call runs to completion before returning.

    Attributes:
        config: Immutable noise parameters and sensor switches
        state: Current belief (mean + covariance)
        sigma_points_pred: (5, 15) predicted sigma points of the last cycle
        time_us: Timestamp of the last processed measurement (µs)
    """

    def __init__(self, config: Optional[UKFConfig] = None):
        """
        Initialize the filter.

        Args:
            config: Filter configuration; defaults to ``UKFConfig()``
        """
        self.config = config if config is not None else UKFConfig()

        self.state = CTRVState(self.config.initial_covariance_scale)
        self.sigma_generator = SigmaPointGenerator(self.config.std_a, self.config.std_yawdd)
        self.weights = self.sigma_generator.weights
        self.motion_model = CTRVMotionModel(self.weights)

        self.updates: Dict[SensorType, MeasurementUpdate] = {
            SensorType.LIDAR: LidarUpdate(self.config.lidar_noise),
            SensorType.RADAR: RadarUpdate(self.config.radar_noise, self.weights),
        }
        self._enabled = {
            SensorType.LIDAR: self.config.use_lidar,
            SensorType.RADAR: self.config.use_radar,
        }

        self.sigma_points_pred = np.zeros((N_X, self.sigma_generator.n_aug * 2 + 1))
        # sigma_points_pred belongs to the current mean only until the next update
        self._prediction_pending = False
        self.time_us: Optional[int] = None
        self._filter_state = FilterState.UNINITIALIZED

        self._prediction_count = 0
        self._update_count = 0
        self._nis_history: Dict[SensorType, List[float]] = {s: [] for s in SensorType}

        logger.info("Unscented Kalman Filter initialized")

    @property
    def is_initialized(self) -> bool:
        return self._filter_state is FilterState.TRACKING

    @property
    def filter_state(self) -> FilterState:
        return self._filter_state

    @property
    def x(self) -> np.ndarray:
        """State mean [px, py, v, yaw, yawd]."""
        return self.state.x

    @property
    def P(self) -> np.ndarray:
        """State covariance (5x5)."""
        return self.state.P

    def sensor_enabled(self, sensor_type: SensorType) -> bool:
        return self._enabled[SensorType.from_tag(sensor_type)]

    def process_measurement(self, sample: MeasurementSample) -> Optional[UpdateResult]:
        """
        Run one filter cycle for a measurement.

        The first accepted measurement only initializes the state. Every
        later one predicts to its timestamp and, if its sensor is enabled,
        applies the matching update.

        Args:
            sample: Incoming measurement

        Returns:
            The UpdateResult of the applied update, or None when the sample
            initialized the filter or its sensor is disabled

        Raises:
            UnknownSensorError: If the sample's sensor tag is not supported
            InitializationError: If a radar sample arrives first and
                ``config.init_from_radar`` is False
            NumericalError: If prediction or update hits a degenerate covariance
        """
        sensor_type = SensorType.from_tag(sample.sensor_type)

        if not self.is_initialized:
            self.initialize(sample)
            return None

        delta_t = (sample.timestamp - self.time_us) / MICROSECONDS_PER_SECOND
        self.predict(delta_t)
        self.time_us = sample.timestamp

        if not self._enabled[sensor_type]:
            logger.debug(f"{sensor_type.name} disabled, update skipped")
            return None
        return self.update(sample)

    def initialize(self, sample: MeasurementSample) -> None:
        """
        Set the state mean from the first measurement.

        Lidar sets the position directly; radar (if allowed) recovers it by
        the inverse polar transform. Speed, heading and yaw rate start at zero.

        Raises:
            InitializationError: For a radar sample when radar initialization is disabled
        """
        sensor_type = SensorType.from_tag(sample.sensor_type)
        z = sample.raw_measurements

        x = np.zeros(N_X)
        if sensor_type is SensorType.LIDAR:
            x[0:2] = z[0:2]
        elif self.config.init_from_radar:
            rho, phi = z[0], z[1]
            x[0] = rho * np.cos(phi)
            x[1] = rho * np.sin(phi)
        else:
            raise InitializationError(
                "Filter must be initialized with a lidar measurement (init_from_radar is disabled)")

        self.state.x = x
        self._prediction_pending = False
        self.time_us = sample.timestamp
        self._filter_state = FilterState.TRACKING
        logger.info(f"Filter initialized from {sensor_type.name} at t={sample.timestamp}us: "
                    f"pos=[{x[0]:.3f}, {x[1]:.3f}]")

    def predict(self, delta_t: float) -> None:
        """
        Predict the belief forward by ``delta_t`` seconds.

        Raises:
            FilterNotInitializedError: Before the first measurement
            CovarianceNotPositiveDefiniteError: If the augmented covariance is corrupted
        """
        self._require_initialized()

        sigma_points_aug = self.sigma_generator.generate(self.state)
        predicted, x, P = self.motion_model.predict(sigma_points_aug, delta_t)
        self.state.commit(x, P)
        self.sigma_points_pred = predicted
        self._prediction_pending = True
        self._prediction_count += 1

    def update(self, sample: MeasurementSample) -> UpdateResult:
        """
        Apply the update registered for the sample's sensor.

        Every update consumes the prediction before it, so ``predict`` must
        run between two updates.

        Raises:
            FilterNotInitializedError: Before the first measurement
            PredictionRequiredError: If no prediction ran since initialization
                or since the previous update
            UnknownSensorError: For an unsupported sensor tag
            SingularInnovationCovarianceError: If S cannot be inverted
        """
        self._require_initialized()
        sensor_type = SensorType.from_tag(sample.sensor_type)
        if not self._prediction_pending:
            raise PredictionRequiredError(
                f"{sensor_type.name} update needs a prediction since the last initialization or update")

        result = self.updates[sensor_type].apply(self.state, sample, self.sigma_points_pred)
        self._prediction_pending = False
        self._update_count += 1
        self._nis_history[sensor_type].append(result.nis)
        return result

    def update_lidar(self, sample: MeasurementSample) -> UpdateResult:
        """Linear update with a lidar sample."""
        if SensorType.from_tag(sample.sensor_type) is not SensorType.LIDAR:
            raise ValueError("update_lidar requires a LIDAR measurement")
        return self.update(sample)

    def update_radar(self, sample: MeasurementSample) -> UpdateResult:
        """Unscented update with a radar sample."""
        if SensorType.from_tag(sample.sensor_type) is not SensorType.RADAR:
            raise ValueError("update_radar requires a RADAR measurement")
        return self.update(sample)

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise FilterNotInitializedError("Filter has not received its first measurement")

    def get_nis_history(self, sensor_type: SensorType) -> List[float]:
        """NIS values of every applied update of one sensor, oldest first."""
        return list(self._nis_history[SensorType.from_tag(sensor_type)])

    def reset_filter(self) -> None:
        """Return to the uninitialized state with the prior covariance."""
        self.state.reset(initial_covariance_scale=self.config.initial_covariance_scale)
        self.sigma_points_pred = np.zeros_like(self.sigma_points_pred)
        self._prediction_pending = False
        self.time_us = None
        self._filter_state = FilterState.UNINITIALIZED
        self._prediction_count = 0
        self._update_count = 0
        for history in self._nis_history.values():
            history.clear()

        logger.info("Unscented Kalman Filter reset")

    def get_state_dict(self) -> Dict[str, Any]:
        """
        Get state information as a dictionary for reporting.

        Returns:
            Dictionary with mean, uncertainty and bookkeeping counters
        """
        px, py, yaw = self.state.get_pose_2d()
        return {
            'position': [px, py],
            'speed': self.state.speed,
            'yaw': yaw,
            'yaw_rate': self.state.yaw_rate,
            'velocity': self.state.velocity.tolist(),
            'uncertainty': self.state.get_uncertainty().tolist(),
            'covariance_trace': float(np.trace(self.state.P)),
            'prediction_count': self._prediction_count,
            'update_count': self._update_count,
            'filter_state': self._filter_state.value,
            'timestamp': self.time_us,
        }
