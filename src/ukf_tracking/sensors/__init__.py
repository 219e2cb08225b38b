"""
Sensor modules for ukf tracking.

This module contains the measurement containers fed to the filter, the
reader for recorded measurement files, and lidar/radar simulators with
Gaussian noise models.
"""

from .measurement import SensorType, MeasurementSample, MeasurementRecord
from .reader import parse_line, read_measurements, format_record, write_measurements
from .lidar import LidarSensor
from .radar import RadarSensor

__all__ = [
    "SensorType",
    "MeasurementSample",
    "MeasurementRecord",
    "parse_line",
    "read_measurements",
    "format_record",
    "write_measurements",
    "LidarSensor",
    "RadarSensor"
]
