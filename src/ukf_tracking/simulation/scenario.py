"""
Measurement scenarios built from a ground-truth trajectory.

Lidar and radar take turns along the trajectory (lidar on even steps,
radar on odd steps), which mirrors the interleaved recordings the filter
is usually run against.
"""

import logging
from typing import List, Optional

import numpy as np

from ..sensors.lidar import LidarSensor
from ..sensors.measurement import MeasurementRecord
from ..sensors.radar import RadarSensor
from .trajectory import TrajectoryGenerator, TrajectoryParameters, ground_truth_vector

logger = logging.getLogger(__name__)


def generate_scenario(params: Optional[TrajectoryParameters] = None,
                      lidar: Optional[LidarSensor] = None,
                      radar: Optional[RadarSensor] = None,
                      seed: Optional[int] = None,
                      start_us: int = 0) -> List[MeasurementRecord]:
    """
    Simulate an interleaved lidar/radar recording.

    Args:
        params: Trajectory parameters; defaults if None
        lidar: Lidar simulator; one with manufacturer noise if None
        radar: Radar simulator; one with manufacturer noise if None
        seed: Seed for the default sensors' random generator
        start_us: Timestamp of the first sample

    Returns:
        Records in time order, each carrying its ground truth
    """
    rng = np.random.default_rng(seed)
    lidar = lidar if lidar is not None else LidarSensor(rng=rng)
    radar = radar if radar is not None else RadarSensor(rng=rng)

    trajectory = TrajectoryGenerator(params).generate(start_us)

    records = []
    dropped = 0
    for index, (timestamp, state) in enumerate(trajectory):
        # First sample comes from the lidar so the filter starts from a position fix
        sensor = lidar if index % 2 == 0 else radar
        sample = sensor.get_measurement(state, timestamp)
        if sample is None:
            dropped += 1
            continue
        records.append(MeasurementRecord(sample, ground_truth_vector(state)))

    logger.info(f"Generated scenario with {len(records)} measurements ({dropped} dropped)")
    return records
