"""
Measurement containers exchanged between the sensors and the filter.

A ``MeasurementSample`` is a single observation from one of the two
supported sensors:

    LIDAR: z = [px, py]                     (meters)
    RADAR: z = [rho, phi, rho_dot]          (meters, radians, m/s)

Timestamps are integers in microseconds, as produced by the data
acquisition side.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from ..errors import UnknownSensorError


class SensorType(Enum):
    """Enumeration of supported sensor types, valued by their record tag."""
    LIDAR = "L"
    RADAR = "R"

    @property
    def measurement_size(self) -> int:
        """Length of the raw measurement vector for this sensor."""
        return 2 if self is SensorType.LIDAR else 3

    @classmethod
    def from_tag(cls, tag) -> 'SensorType':
        """
        Resolve a sensor tag ("L"/"R", or an existing ``SensorType``).

        Raises:
            UnknownSensorError: If the tag does not name a supported sensor
        """
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag).strip().upper())
        except ValueError:
            raise UnknownSensorError(f"Unknown measurement source: {tag!r}") from None


@dataclass(frozen=True, eq=False)
class MeasurementSample:
    """
    One immutable observation.

    Attributes:
        sensor_type: Sensor that produced the measurement
        raw_measurements: Raw measurement vector (2 for lidar, 3 for radar)
        timestamp: Acquisition time in microseconds
    """
    sensor_type: SensorType
    raw_measurements: np.ndarray
    timestamp: int

    def __post_init__(self):
        raw = np.array(self.raw_measurements, dtype=float).reshape(-1)
        if not np.all(np.isfinite(raw)):
            raise ValueError("Measurement contains NaN or infinite values")

        # An unknown tag is kept as given so that the filter reports it as a typed error
        try:
            sensor_type = SensorType.from_tag(self.sensor_type)
        except UnknownSensorError:
            sensor_type = None
        if sensor_type is not None:
            if len(raw) != sensor_type.measurement_size:
                raise ValueError(
                    f"{sensor_type.name} measurement must have "
                    f"{sensor_type.measurement_size} elements, got {len(raw)}")
            object.__setattr__(self, 'sensor_type', sensor_type)

        raw.setflags(write=False)
        object.__setattr__(self, 'raw_measurements', raw)
        object.__setattr__(self, 'timestamp', int(self.timestamp))

    @classmethod
    def lidar(cls, px: float, py: float, timestamp: int) -> 'MeasurementSample':
        """Build a lidar sample from a position."""
        return cls(SensorType.LIDAR, np.array([px, py]), timestamp)

    @classmethod
    def radar(cls, rho: float, phi: float, rho_dot: float, timestamp: int) -> 'MeasurementSample':
        """Build a radar sample from range, bearing and range rate."""
        return cls(SensorType.RADAR, np.array([rho, phi, rho_dot]), timestamp)


@dataclass(frozen=True, eq=False)
class MeasurementRecord:
    """
    A measurement together with the ground truth recorded alongside it.

    Attributes:
        sample: The measurement fed to the filter
        ground_truth: Optional true state [px, py, vx, vy]
    """
    sample: MeasurementSample
    ground_truth: Optional[np.ndarray] = field(default=None)

    def __post_init__(self):
        if self.ground_truth is not None:
            gt = np.array(self.ground_truth, dtype=float).reshape(-1)
            if len(gt) != 4:
                raise ValueError(f"Ground truth must have 4 elements (px, py, vx, vy), got {len(gt)}")
            gt.setflags(write=False)
            object.__setattr__(self, 'ground_truth', gt)
